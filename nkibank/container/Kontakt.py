'''
### Kontakt Module

This module holds what the Kontakt 1 and Kontakt 2 containers have in common. Both store a fixed
size header followed by the zlib compressed XML metadata, the samples are stored next to the
container.

Classes:
    `KontaktHeader`:
        Base class of the generation specific headers. Checks the signature and the declared
        offsets of a header against the container data.

    `KontaktContainer`:
        Base class of the generation specific containers. Reads and writes a complete container
        using the header class and the tag set of the generation.

Functionality:
    - Validate the header, decompress the metadata at the declared offset and parse it ('read').
    - Create the metadata, compress it and put the header in front of it ('write').

Dependencies:
    `Compression`:
        The zlib codec of the metadata block.

    `MetadataHandler`:
        Converts the metadata between XML and the canonical model.

    `SampleResolver`:
        Finds the sample files referenced by the metadata.

Intended Usage:
    The byte order is given to every container and header instance by its creator, usually the
    `Dispatcher`, and is used for every multi-byte value. It is never guessed from the data.
'''

import logging
import os
import time

from .MetadataHandler import MetadataHandler, decode_text
from .SampleResolver import SampleResolver
from .Tags import TagSet
from .. import Compression
from ..Errors import CorruptedContainerError, Notifier
from ..Helpers import byte_order, unpack_u32
from ..model.Instrument import Instrument

logger = logging.getLogger(__name__)

SAMPLES_SIZE_LIMIT = 0x80000000

class KontaktHeader:
  ''' Fields shared by the headers of both generations '''
  MAGIC = 0
  SIZE  = 0
  # The stored metadata offset is counted from this position
  OFFSET_ORIGIN = 0

  def __init__(self, big_endian: bool = False):
    self.big_endian   = big_endian
    self.magic        = self.MAGIC
    self.offset       = self.SIZE - self.OFFSET_ORIGIN
    self.version      = 0
    self.flags        = 0x01
    self.timestamp    = 0
    self.samples_size = 0

  @property
  def format_prefix(self) -> str:
    return byte_order(self.big_endian)

  @property
  def metadata_offset(self) -> int:
    ''' Position of the compressed metadata counted from the start of the container '''
    return self.OFFSET_ORIGIN + self.offset

  @classmethod
  def check_signature(cls, data: bytes, big_endian: bool):
    if len(data) < cls.SIZE:
      raise CorruptedContainerError(f"Container header is truncated ({len(data)} of {cls.SIZE} bytes)")

    magic = unpack_u32(data, 0, big_endian)
    if magic != cls.MAGIC:
      raise CorruptedContainerError(f"Bad container signature 0x{magic:08X}, expected 0x{cls.MAGIC:08X}")

  def validate(self, data_length: int):
    if not self.SIZE <= self.metadata_offset < data_length:
      raise CorruptedContainerError(f"Metadata offset 0x{self.metadata_offset:X} lies outside of the container")
    if self.samples_size >= SAMPLES_SIZE_LIMIT:
      raise CorruptedContainerError(f"Declared sample size 0x{self.samples_size:X} is not plausible")

class KontaktContainer:
  ''' A container storing the compressed metadata of one instrument '''
  HEADER_CLASS = KontaktHeader
  TAGS: TagSet = TagSet

  def __init__(self, big_endian: bool = False):
    self.big_endian = big_endian

  def read(self, data: bytes, source_path: str, notifier: Notifier, sample_lookup=None) -> list[Instrument]:
    header = self.HEADER_CLASS.from_bytes(data, self.big_endian)
    header.validate(len(data))
    logger.debug("Reading %s (version 0x%X, %d bytes of samples)", source_path, header.version, header.samples_size)

    text = decode_text(Compression.decompress(data[header.metadata_offset:]), notifier)

    if sample_lookup is None:
      sample_lookup = SampleResolver(os.path.dirname(os.fspath(source_path))).lookup

    instruments = MetadataHandler(self.TAGS, notifier).parse(text, sample_lookup)
    if not instruments:
      notifier.warn("The container holds no instrument")

    return instruments

  def write(self, instrument: Instrument, sample_folder_name: str, samples_size: int, timestamp: int = None,
            file_names: dict = None, notifier: Notifier = None, level: int = Compression.DEFAULT_LEVEL) -> bytes:
    handler = MetadataHandler(self.TAGS, notifier or Notifier(instrument.name))
    text = handler.create(instrument, sample_folder_name, file_names)

    header = self.HEADER_CLASS(self.big_endian)
    header.timestamp    = int(time.time()) if timestamp is None else timestamp
    header.samples_size = samples_size

    return header.to_bytes() + Compression.compress(text.encode('utf-8'), level)

if __name__ == '__main__':
  pass
