'''
### Enums Module

This module defines enumerations used throughout the project to classify and interpret
constants found in instrument containers and in the canonical instrument model.

Classes:
    `TriggerType`:
        When a group or zone is triggered (attack, release, first, legato).

    `PlayLogic`:
        Whether a zone always plays or takes part in a round-robin sequence.

    `LoopType`:
        The playback direction of a sample loop.

    `FilterType`:
        The supported filter characteristics.

    `ContainerVariant`:
        Every container generation and byte order the dispatcher can select.

    `Magic`:
        Signatures of the binary containers and of the NCW audio format.

    `MonolithEntryType`:
        The kinds of files bundled in a monolith.

    `MetadataState`:
        The state of the lazily computed audio metadata of a sample.

Functionality:
    - Provides strongly typed constants for use in parsing, validation, and serialization logic.
    - Improves readbility and reduces the likelihood of errors from magic numbers or strings.

Dependencies:
    `enum`:
        Used for defining enumeration types.

Intended Usage:
    This module should be imported wherever constant classification is needed during XML parsing,
    binary parsing, or binary conversion.
'''

from enum import Enum, IntEnum


class TriggerType(Enum):
    ATTACK = 'attack'
    RELEASE = 'release'
    FIRST = 'first'
    LEGATO = 'legato'


class PlayLogic(Enum):
    ALWAYS = 'always'
    ROUND_ROBIN = 'round_robin'


class LoopType(Enum):
    FORWARD = 'forward'
    BACKWARDS = 'backwards'
    ALTERNATING = 'alternating'


class FilterType(Enum):
    LOW_PASS = 'lowpass'
    HIGH_PASS = 'highpass'
    BAND_PASS = 'bandpass'
    BAND_REJECTION = 'bandreject'


class ContainerVariant(Enum):
    KONTAKT1_LE = 'kontakt1-le'
    KONTAKT1_BE = 'kontakt1-be'
    KONTAKT2_LE = 'kontakt2-le'
    KONTAKT2_BE = 'kontakt2-be'
    MONOLITH = 'monolith'

    @property
    def is_big_endian(self) -> bool:
        return self in (ContainerVariant.KONTAKT1_BE, ContainerVariant.KONTAKT2_BE)


class Magic(IntEnum):
    KONTAKT1_INSTRUMENT = 0x5EE56EB3
    KONTAKT2_INSTRUMENT = 0x7FA89012
    NCW = 0x01A89ED6
    NCW_ALTERNATIVE = 0x01A89ED7
    NCW_BLOCK = 0x160C9A3E


class MonolithEntryType(IntEnum):
    OTHER = 0
    INSTRUMENT = 1
    SAMPLE = 2


class MetadataState(Enum):
    UNRESOLVED = 0
    RESOLVED = 1
    FAILED = 2


if __name__ == '__main__':
    pass
