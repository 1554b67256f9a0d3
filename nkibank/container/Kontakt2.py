'''
### Kontakt2 Module

This module defines the Kontakt 2 container.

Classes:
    `Kontakt2Header`:
        The 56 byte header.

    `Kontakt2Container`:
        Reads and writes Kontakt 2 containers with the `K2Tags` vocabulary.

Layout:
    0x00 u32 magic 0x7FA89012
    0x04 u32 offset of the compressed metadata, counted from 0x08, always 0x30
    0x08 u16 version 0x0110
    0x0A u16 flags 0x01
    0x0C u32 0
    0x10 u32 1
    0x14 u32 creation timestamp (Unix seconds)
    0x18 u32 total size of the referenced sample data
    0x1C u32 0
    0x20 u32 application version 0x02010002
    0x24 [16] checksum, written as zeros
    0x34 u32 0
'''

# Import helper functions
from ..Helpers import *
from ..Enums import Magic
from .Kontakt import KontaktContainer, KontaktHeader
from .Tags import K2Tags

HEADER_FORMAT = 'IIHHIIIIII16sI'

APPLICATION_VERSION = 0x02010002

class Kontakt2Header(KontaktHeader): # struct size = 0x38
  MAGIC = Magic.KONTAKT2_INSTRUMENT
  SIZE  = 0x38
  OFFSET_ORIGIN = 0x08

  def __init__(self, big_endian: bool = False):
    super().__init__(big_endian)
    self.version = 0x0110

    self.unk_0 = 0
    self.unk_1 = 1
    self.unk_2 = 0
    self.unk_3 = 0

    self.application_version = APPLICATION_VERSION
    self.checksum = bytes(16)

  @classmethod
  def from_bytes(cls, data: bytes, big_endian: bool = False):
    cls.check_signature(data, big_endian)

    self = cls(big_endian)
    (
      self.magic,
      self.offset,
      self.version,
      self.flags,
      self.unk_0,
      self.unk_1,
      self.timestamp,
      self.samples_size,
      self.unk_2,
      self.application_version,
      self.checksum,
      self.unk_3
    ) = struct.unpack_from(self.format_prefix + HEADER_FORMAT, data, 0)

    return self

  def to_bytes(self) -> bytes:
    return struct.pack(
      self.format_prefix + HEADER_FORMAT,
      self.magic,
      self.offset,
      self.version,
      self.flags,
      self.unk_0,
      self.unk_1,
      self.timestamp,
      self.samples_size,
      self.unk_2,
      self.application_version,
      self.checksum,
      self.unk_3
    )

class Kontakt2Container(KontaktContainer):
  HEADER_CLASS = Kontakt2Header
  TAGS = K2Tags

if __name__ == '__main__':
  pass
