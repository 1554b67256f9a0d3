'''
### Container Package

Readers and writers of the instrument containers.

Modules:
    `Dispatcher`: detects the container variant of a file and creates the matching container.
    `Kontakt`, `Kontakt1`, `Kontakt2`: the single instrument containers with external samples.
    `Monolith`: the container bundling instruments and embedded samples.
    `MetadataHandler`, `Tags`: the XML metadata of the Kontakt containers.
    `SampleResolver`: finds the sample files referenced by a container.
'''
