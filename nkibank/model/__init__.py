'''
### Model Package

The canonical in-memory representation of a multi-sample instrument, which every reader builds
and every writer consumes.

Modules:
    `Instrument`: `Instrument`, `Metadata` and `Group`.
    `Zone`: `Zone` and `Loop`.
    `Envelope`: `Envelope`, `Modulator` and `Filter`.
    `SampleData`: the sample payload classes with lazily computed audio metadata.
    `AudioMetadata`: the format description of a sample payload.
'''
