'''
### nkibank

Converts sampled instruments between the Kontakt 1 and Kontakt 2 instrument containers, the
monolith container with embedded NCW samples, SFZ and YAML.

Modules:
    `Converter`: reads a file into the canonical model and writes it in the selected format.
    `SfzCreator`: the SFZ text emitter.
    `Compression`: the zlib codec of the container metadata blocks.
    `Errors`: exceptions and the warning collector.
    `Enums`, `Helpers`, `YAMLSerializer`: shared constants, binary helpers and YAML setup.

Packages:
    `model`: the canonical instrument model.
    `codec`: the NCW and WAV sample codecs.
    `container`: the container readers, writers and the format dispatcher.
'''
