'''
### Kontakt1 Module

This module defines the Kontakt 1 container, whose metadata uses the NiSS XML dialect.

Classes:
    `Kontakt1Header`:
        The 36 byte header.

    `Kontakt1Container`:
        Reads and writes Kontakt 1 containers with the `NiSSTags` vocabulary.

Layout:
    0x00 u32 magic 0x5EE56EB3
    0x04 u32 offset of the compressed metadata from the start of the file, always 0x24
    0x08 u16 version 0x50
    0x0A u16 flags 0x01
    0x0C u32 0
    0x10 u32 0
    0x14 u32 1
    0x18 u32 creation timestamp (Unix seconds)
    0x1C u32 total size of the referenced sample data
    0x20 u32 0
'''

# Import helper functions
from ..Helpers import *
from ..Enums import Magic
from .Kontakt import KontaktContainer, KontaktHeader
from .Tags import NiSSTags

HEADER_FORMAT = 'IIHHIIIIII'

class Kontakt1Header(KontaktHeader): # struct size = 0x24
  MAGIC = Magic.KONTAKT1_INSTRUMENT
  SIZE  = 0x24
  OFFSET_ORIGIN = 0

  def __init__(self, big_endian: bool = False):
    super().__init__(big_endian)
    self.version = 0x50

    self.unk_0 = 0
    self.unk_1 = 0
    self.unk_2 = 1
    self.unk_3 = 0

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
      self.unk_2,
      self.timestamp,
      self.samples_size,
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
      self.unk_2,
      self.timestamp,
      self.samples_size,
      self.unk_3
    )

class Kontakt1Container(KontaktContainer):
  HEADER_CLASS = Kontakt1Header
  TAGS = NiSSTags

if __name__ == '__main__':
  pass
