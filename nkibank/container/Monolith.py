'''
### Monolith Module

This module defines the monolith container, which bundles instrument containers and their samples
into one file.

Classes:
    `MonolithHeader`:
        The 32 byte file header.

    `MonolithEntry`:
        One entry of the table of contents (an instrument or a sample).

    `MonolithContainer`:
        Reads every embedded instrument and resolves its samples, and writes a monolith from a
        list of instruments.

Layout:
    All values are little-endian.
    0x00 [16] signature '/\\ NI FC MTD  /\\'
    0x10 u32  format version 1
    0x14 u32  entry count
    0x18 u32  offset of the entry table from the start of the file
    0x1C u32  0
    Entry:
      u8 type (1 instrument, 2 sample), u8 flags (bit 0 set if the payload is embedded),
      u16 0, u32 payload offset, u32 payload length, then three strings (name, absolute path
      hint, relative path hint), each a u16 count of UTF-16 code units followed by UTF-16LE text.
    Payloads start at 16 byte aligned offsets.

Functionality:
    - Embedded instruments are read through the `Dispatcher`. An instrument which cannot be read
      is reported on the notifier, the others are still returned.
    - Samples are looked up by name among the embedded payloads first, then on disk through the
      `SampleResolver` with the path hints of the entry.
    - Written instruments are Kontakt 2 containers (little-endian), written samples are NCW
      payloads. Samples with a depth NCW cannot store are embedded as WAV data.
    - The zones of a sample which cannot be decoded are dropped from the written instruments
      with a warning.
'''

import io
import os

# Import helper functions
from ..Helpers import *
from ..codec import NCW, Wave
from ..Compression import DEFAULT_LEVEL
from ..Enums import MonolithEntryType
from ..Errors import AudioDecodeError, ConversionError, CorruptedContainerError, Notifier
from ..model.Instrument import Instrument
from ..model.SampleData import EmbeddedSampleData
from .Kontakt2 import Kontakt2Container
from .SampleResolver import SampleResolver, decode_relative_path, normalize_separators

SIGNATURE        = b'/\\ NI FC MTD  /\\'
HEADER_SIZE      = 0x20
HEADER_FORMAT    = '<16s4I'
ENTRY_FORMAT     = '<BBHII'
ENTRY_SIZE       = 0x0C
FORMAT_VERSION   = 1
FLAG_EMBEDDED    = 0x01

def read_string(data: bytes, offset: int) -> tuple[str, int]:
  if offset + 2 > len(data):
    raise CorruptedContainerError(f"Monolith string at 0x{offset:X} is truncated")

  length = unpack_u16(data, offset, False) * 2
  offset += 2
  if offset + length > len(data):
    raise CorruptedContainerError(f"Monolith string at 0x{offset:X} is truncated")

  return data[offset:offset + length].decode('utf-16-le', errors='replace'), offset + length

def write_string(text: str) -> bytes:
  encoded = text.encode('utf-16-le')
  return pack_u16(len(encoded) // 2, False) + encoded

class MonolithHeader: # struct size = 0x20
  ''' Represents the header of a monolith '''
  def __init__(self):
    self.signature    = SIGNATURE
    self.version      = FORMAT_VERSION
    self.num_entries  = 0
    self.table_offset = HEADER_SIZE
    self.reserved     = 0

  @classmethod
  def from_bytes(cls, data: bytes):
    if len(data) < HEADER_SIZE:
      raise CorruptedContainerError(f"Monolith header is truncated ({len(data)} bytes)")

    self = cls()
    (
      self.signature,
      self.version,
      self.num_entries,
      self.table_offset,
      self.reserved
    ) = struct.unpack_from(HEADER_FORMAT, data, 0)

    if self.signature != SIGNATURE:
      raise CorruptedContainerError("Bad monolith signature")
    if not HEADER_SIZE <= self.table_offset <= len(data):
      raise CorruptedContainerError(f"Monolith entry table offset 0x{self.table_offset:X} lies outside of the file")

    return self

  def to_bytes(self) -> bytes:
    return struct.pack(HEADER_FORMAT, self.signature, self.version, self.num_entries, self.table_offset, self.reserved)

class MonolithEntry:
  ''' Represents one entry of the table of contents '''
  def __init__(self, type: MonolithEntryType = MonolithEntryType.OTHER, name: str = ''):
    self.type   = type
    self.flags  = 0
    self.offset = 0
    self.length = 0

    self.name          = name
    self.absolute_hint = ''
    self.relative_hint = ''

  @property
  def is_embedded(self) -> bool:
    return bool(self.flags & FLAG_EMBEDDED)

  @classmethod
  def from_bytes(cls, data: bytes, offset: int):
    ''' Returns the entry and the offset of the next entry '''
    if offset + ENTRY_SIZE > len(data):
      raise CorruptedContainerError(f"Monolith entry at 0x{offset:X} is truncated")

    self = cls()
    entry_type, self.flags, _, self.offset, self.length = struct.unpack_from(ENTRY_FORMAT, data, offset)
    try:
      self.type = MonolithEntryType(entry_type)
    except ValueError:
      self.type = MonolithEntryType.OTHER

    offset += ENTRY_SIZE
    self.name, offset          = read_string(data, offset)
    self.absolute_hint, offset = read_string(data, offset)
    self.relative_hint, offset = read_string(data, offset)

    if self.is_embedded and self.offset + self.length > len(data):
      raise CorruptedContainerError(f"Payload of monolith entry '{self.name}' lies outside of the file")

    return self, offset

  def to_bytes(self) -> bytes:
    return (
      struct.pack(ENTRY_FORMAT, self.type, self.flags, 0, self.offset, self.length)
      + write_string(self.name)
      + write_string(self.absolute_hint)
      + write_string(self.relative_hint)
    )

  def payload(self, data: bytes) -> bytes:
    return data[self.offset:self.offset + self.length]

class MonolithContainer:
  ''' A file bundling several instruments and their samples '''
  def __init__(self, big_endian: bool = False):
    # Monoliths are always little-endian, the argument keeps the container interface uniform
    self.big_endian = False

  def read_entries(self, data: bytes) -> list[MonolithEntry]:
    header = MonolithHeader.from_bytes(data)

    entries = []
    offset = header.table_offset
    for _ in range(header.num_entries):
      entry, offset = MonolithEntry.from_bytes(data, offset)
      entries.append(entry)

    return entries

  def read(self, data: bytes, source_path: str, notifier: Notifier, sample_lookup=None) -> list[Instrument]:
    # Imported here, the dispatcher itself creates monolith containers
    from .Dispatcher import SIGNATURE_SIZE, create_container, detect

    entries  = self.read_entries(data)
    resolver = SampleResolver(os.path.dirname(os.fspath(source_path)))

    embedded = {}
    external = {}
    for entry in entries:
      if entry.type is not MonolithEntryType.SAMPLE:
        continue
      if entry.is_embedded:
        embedded[entry.name] = EmbeddedSampleData(os.path.splitext(entry.name)[0], entry.payload(data), entry.offset, os.fspath(source_path))
      else:
        external[entry.name] = entry

    def lookup(file_reference: str):
      name = os.path.basename(normalize_separators(file_reference))
      if name in embedded:
        return embedded[name]
      if name in external:
        entry = external[name]
        return resolver.lookup_hints(name, entry.absolute_hint, entry.relative_hint)
      if sample_lookup is not None:
        return sample_lookup(file_reference)
      return resolver.lookup(file_reference)

    instruments = []
    for entry in entries:
      if entry.type is not MonolithEntryType.INSTRUMENT:
        continue

      if not entry.is_embedded:
        path = os.path.join(resolver.base_folder, decode_relative_path(entry.relative_hint or entry.name))
        notifier.warn(f"External instrument '{entry.name}' is not read ({path})")
        continue

      payload = entry.payload(data)
      try:
        container = create_container(detect(payload[:SIGNATURE_SIZE]))
        if isinstance(container, MonolithContainer):
          raise CorruptedContainerError("Nested monoliths are not supported")
        instruments += container.read(payload, source_path, notifier, lookup)
      except ConversionError as e:
        notifier.warn(f"Embedded instrument '{entry.name}' skipped: {e}")

    if not instruments:
      notifier.warn("The monolith holds no readable instrument")

    return instruments

  def write(self, instruments: list[Instrument], timestamp: int = None, notifier: Notifier = None, level: int = DEFAULT_LEVEL) -> bytes:
    samples = []
    for instrument in instruments:
      for sample in instrument.sample_data():
        if not any(sample is known for known in samples):
          samples.append(sample)

    notifier = notifier or Notifier(instruments[0].name if instruments else '')
    encoded = []
    for sample in samples:
      try:
        encoded.append((sample, self.encode_sample(sample)))
      except AudioDecodeError as e:
        for instrument in instruments:
          for zone in instrument.remove_sample(sample):
            notifier.warn(f"Zone '{zone.name}' dropped: {e}")

    samples  = [sample for sample, _ in encoded]
    payloads = [payload for _, payload in encoded]

    names = create_unique_filenames([sample.name for sample in samples], '')
    names = [name + extension for name, (extension, _, _) in zip(names, payloads)]
    file_names = {sample: name for sample, name in zip(samples, names)}
    entries = []

    kontakt = Kontakt2Container(big_endian=False)
    for instrument in instruments:
      samples_size = sum(size for sample, (_, _, size) in zip(samples, payloads) if sample in instrument.sample_data())
      entry = MonolithEntry(MonolithEntryType.INSTRUMENT, instrument.safe_name + '.nki')
      entries.append((entry, kontakt.write(instrument, '', samples_size, timestamp, file_names, notifier, level)))

    for name, (_, payload, _) in zip(names, payloads):
      entries.append((MonolithEntry(MonolithEntryType.SAMPLE, name), payload))

    body = bytearray()
    offset = HEADER_SIZE
    for entry, payload in entries:
      entry.flags  = FLAG_EMBEDDED
      entry.offset = offset + len(body)
      entry.length = len(payload)
      body += add_padding_to_16(payload)

    header = MonolithHeader()
    header.num_entries  = len(entries)
    header.table_offset = offset + len(body)

    table = b''.join(entry.to_bytes() for entry, _ in entries)
    return header.to_bytes() + bytes(body) + add_padding_to_16(table)

  @staticmethod
  def encode_sample(sample) -> tuple[str, bytes, int]:
    ''' Returns the file extension, the payload and the raw sample data size '''
    metadata, pcm = sample.read_pcm()

    if metadata.bits in NCW.SUPPORTED_DEPTHS:
      channels = NCW.split_pcm(pcm, metadata.channels, metadata.bits)
      return '.ncw', NCW.encode(channels, metadata.bits, metadata.sample_rate), len(pcm)

    stream = io.BytesIO()
    Wave.write_wave(stream, metadata, pcm)
    return '.wav', stream.getvalue(), len(pcm)

if __name__ == '__main__':
  pass
