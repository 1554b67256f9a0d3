'''
### Codec Package

This package contains the audio formats used for the sample payloads of an instrument.

Modules:
    `NCW`:
        The compressed-PCM format embedded in monolith containers, including mid/side stereo
        decorrelation.

    `Wave`:
        Plain PCM WAV reading and writing for samples stored next to a container.

Intended Usage:
    The codecs work on raw bytes and integer sample lists. They are used by the sample data
    classes of the model and by the monolith writer.
'''
