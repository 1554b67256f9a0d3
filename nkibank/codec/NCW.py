'''
### NCW Module

This module implements the compressed-PCM sample format (NCW) which is embedded in monolith
containers.

Classes:
    `NcwHeader`:
        The 120 byte file header (channels, depth, sample rate, block table location).

    `NcwBlockHeader`:
        The 16 byte header in front of every 512 sample block of one channel.

    `NcwAudio`:
        Decoded audio as one list of integer samples per channel.

Functions:
    `read_header`:
        Parses only the file header, used for the audio metadata of a sample.

    `decode`:
        Decodes a complete NCW payload, recombining mid/side encoded stereo blocks.

    `encode`:
        Encodes per-channel integer samples, choosing the smallest encoding per block.

Layout:
    All values are little-endian. The header is followed by a table of (block count + 1) offsets,
    relative to the first block. Every block holds, per channel, a block header and its data:
        bits > 0: 512 deltas of `bits` bits, the first sample is the base value
        bits < 0: 512 absolute values of `-bits` bits
        bits = 0: 512 raw values of the depth declared in the file header
    Values are signed and packed LSB first. A block with the mid/side flag set stores mid and side
    instead of left and right, with left = mid + side and right = mid - side.

Dependencies:
    `struct`:
        For byte-level unpacking and packing.

    `Helpers`:
        For the exposed struct module.

Intended Usage:
    Used by the sample data classes to read embedded samples and by the monolith writer to
    embed samples. Every decoding problem raises `AudioDecodeError`, which the container readers
    treat as a per-zone failure.
'''

# Import helper functions
from ..Helpers import *
from ..Enums import Magic
from ..Errors import AudioDecodeError

HEADER_SIZE       = 0x78
BLOCK_HEADER_SIZE = 0x10
SAMPLES_PER_BLOCK = 512
NCW_VERSION       = 1
SUPPORTED_DEPTHS  = (16, 24, 32)

HEADER_FORMAT       = '<2I2H5I'
BLOCK_HEADER_FORMAT = '<IihHI'

# Interleaved PCM depths struct can unpack directly
PCM_FORMATS = {16: '<h', 32: '<i'}

FLAG_MID_SIDE = 0x01

''' Bit Stream Functions '''
def unpack_bits(data: bytes, bits: int, count: int) -> list[int]:
  stream = int.from_bytes(data, 'little')
  mask = (1 << bits) - 1
  sign = 1 << (bits - 1)

  values = []
  for i in range(count):
    value = (stream >> (i * bits)) & mask
    if value & sign:
      value -= 1 << bits
    values.append(value)

  return values

def pack_bits(values: list[int], bits: int) -> bytes:
  mask = (1 << bits) - 1
  stream = 0
  for i, value in enumerate(values):
    stream |= (value & mask) << (i * bits)

  return stream.to_bytes((bits * len(values) + 7) // 8, 'little')

def signed_width(value: int) -> int:
  ''' Number of bits needed to store the value as a signed integer '''
  return (value if value >= 0 else ~value).bit_length() + 1

class NcwHeader: # struct size = 0x78
  ''' Represents the header of an NCW file '''
  def __init__(self):
    self.signature   = Magic.NCW
    self.version     = NCW_VERSION
    self.channels    = 1
    self.bits        = 16
    self.sample_rate = 44100
    self.num_samples = 0

    self.block_defs_offset = HEADER_SIZE
    self.blocks_offset     = HEADER_SIZE
    self.blocks_size       = 0

  @classmethod
  def from_bytes(cls, data: bytes):
    if len(data) < HEADER_SIZE:
      raise AudioDecodeError(f"NCW header is truncated ({len(data)} bytes)")

    self = cls()
    (
      self.signature,
      self.version,
      self.channels,
      self.bits,
      self.sample_rate,
      self.num_samples,
      self.block_defs_offset,
      self.blocks_offset,
      self.blocks_size
    ) = struct.unpack_from(HEADER_FORMAT, data, 0)

    if self.signature not in (Magic.NCW, Magic.NCW_ALTERNATIVE):
      raise AudioDecodeError(f"Not an NCW payload (signature 0x{self.signature:08X})")
    if self.bits not in SUPPORTED_DEPTHS:
      raise AudioDecodeError(f"Unsupported NCW sample depth: {self.bits} bits")
    if self.channels == 0:
      raise AudioDecodeError("NCW payload declares no channels")

    return self

  def to_bytes(self) -> bytes:
    raw = struct.pack(
      HEADER_FORMAT,
      self.signature,
      self.version,
      self.channels,
      self.bits,
      self.sample_rate,
      self.num_samples,
      self.block_defs_offset,
      self.blocks_offset,
      self.blocks_size
    )
    return raw + b'\x00' * (HEADER_SIZE - len(raw))

  @property
  def num_blocks(self) -> int:
    return (self.num_samples + SAMPLES_PER_BLOCK - 1) // SAMPLES_PER_BLOCK

class NcwBlockHeader: # struct size = 0x10
  ''' Represents the header of one channel of a block '''
  def __init__(self, base_value: int = 0, bits: int = 0, flags: int = 0):
    self.signature  = Magic.NCW_BLOCK
    self.base_value = base_value
    self.bits       = bits
    self.flags      = flags

  @classmethod
  def from_bytes(cls, data: bytes, offset: int):
    if offset + BLOCK_HEADER_SIZE > len(data):
      raise AudioDecodeError(f"NCW block header at 0x{offset:X} is truncated")

    self = cls()
    self.signature, self.base_value, self.bits, self.flags, _ = struct.unpack_from(BLOCK_HEADER_FORMAT, data, offset)

    if self.signature != Magic.NCW_BLOCK:
      raise AudioDecodeError(f"Bad NCW block signature at 0x{offset:X}")
    if abs(self.bits) > 32:
      raise AudioDecodeError(f"Bad NCW block bit width: {self.bits}")

    return self

  def to_bytes(self) -> bytes:
    return struct.pack(BLOCK_HEADER_FORMAT, self.signature, self.base_value, self.bits, self.flags, 0)

  @property
  def is_mid_side(self) -> bool:
    return bool(self.flags & FLAG_MID_SIDE)

  def data_size(self, depth: int) -> int:
    bits = abs(self.bits) if self.bits != 0 else depth
    return bits * SAMPLES_PER_BLOCK // 8

class NcwAudio:
  ''' Decoded NCW audio, one list of samples per channel '''
  def __init__(self, channels: int, bits: int, sample_rate: int, samples: list):
    self.channels    = channels
    self.bits        = bits
    self.sample_rate = sample_rate
    self.samples     = samples

  @property
  def num_samples(self) -> int:
    return len(self.samples[0]) if self.samples else 0

  def to_pcm_bytes(self) -> bytes:
    ''' Interleaved little-endian PCM '''
    width = self.bits // 8
    low  = -(1 << (self.bits - 1))
    high = (1 << (self.bits - 1)) - 1

    pcm = bytearray()
    for frame in zip(*self.samples):
      for value in frame:
        if not low <= value <= high:
          raise AudioDecodeError(f"Decoded value {value} does not fit into {self.bits} bits")
        pcm += value.to_bytes(width, 'little', signed=True)

    return bytes(pcm)

''' Decoding Functions '''
def read_header(data: bytes) -> NcwHeader:
  return NcwHeader.from_bytes(data)

def split_pcm(pcm: bytes, channels: int, bits: int) -> list[list[int]]:
  ''' Splits interleaved little-endian PCM into one list per channel '''
  width = bits // 8
  frame_size = channels * width
  pcm = bytes(pcm[:len(pcm) // frame_size * frame_size])

  if bits in PCM_FORMATS:
    values = [value for (value,) in struct.iter_unpack(PCM_FORMATS[bits], pcm)]
  else:
    values = [int.from_bytes(pcm[i:i + width], 'little', signed=True) for i in range(0, len(pcm), width)]
  return [values[channel::channels] for channel in range(channels)]

def recombine_mid_side(mid: list[int], side: list[int]) -> list[list[int]]:
  left  = [m + s for m, s in zip(mid, side)]
  right = [m - s for m, s in zip(mid, side)]
  return [left, right]

def decode_block(block_header: NcwBlockHeader, payload: bytes, depth: int) -> list[int]:
  if block_header.bits > 0:
    values = []
    accumulator = block_header.base_value
    for delta in unpack_bits(payload, block_header.bits, SAMPLES_PER_BLOCK):
      values.append(accumulator)
      accumulator += delta
    return values

  if block_header.bits < 0:
    return unpack_bits(payload, -block_header.bits, SAMPLES_PER_BLOCK)

  return unpack_bits(payload, depth, SAMPLES_PER_BLOCK)

def decode(data: bytes) -> NcwAudio:
  header = NcwHeader.from_bytes(data)
  num_blocks = header.num_blocks

  table_end = header.block_defs_offset + 4 * (num_blocks + 1)
  if table_end > len(data):
    raise AudioDecodeError("NCW block table is truncated")
  block_offsets = struct.unpack_from(f'<{num_blocks + 1}I', data, header.block_defs_offset)

  channels = [[] for _ in range(header.channels)]

  for block_index in range(num_blocks):
    position = header.blocks_offset + block_offsets[block_index]

    block_headers = []
    block_values  = []
    for _ in range(header.channels):
      block_header = NcwBlockHeader.from_bytes(data, position)
      position += BLOCK_HEADER_SIZE

      size = block_header.data_size(header.bits)
      if position + size > len(data):
        raise AudioDecodeError(f"NCW block {block_index} is truncated")

      block_headers.append(block_header)
      block_values.append(decode_block(block_header, data[position:position + size], header.bits))
      position += size

    if header.channels == 2 and block_headers[0].is_mid_side:
      block_values = recombine_mid_side(*block_values)

    remaining = header.num_samples - block_index * SAMPLES_PER_BLOCK
    for channel, values in zip(channels, block_values):
      channel.extend(values[:remaining])

  return NcwAudio(header.channels, header.bits, header.sample_rate, channels)

''' Encoding Functions '''
def encode_channel(values: list[int], depth: int, mid_side: bool) -> bytes:
  deltas = [b - a for a, b in zip(values, values[1:])] + [0]
  delta_bits    = max(signed_width(delta) for delta in deltas)
  absolute_bits = max(signed_width(value) for value in values)
  flags = FLAG_MID_SIDE if mid_side else 0

  if min(delta_bits, absolute_bits) >= depth:
    block_header = NcwBlockHeader(values[0], 0, flags)
    payload = pack_bits(values, depth)
  elif delta_bits < absolute_bits:
    block_header = NcwBlockHeader(values[0], delta_bits, flags)
    payload = pack_bits(deltas, delta_bits)
  else:
    block_header = NcwBlockHeader(values[0], -absolute_bits, flags)
    payload = pack_bits(values, absolute_bits)

  return block_header.to_bytes() + payload

def encode_block(block: list[list[int]], depth: int) -> bytes:
  plain = b''.join(encode_channel(values, depth, False) for values in block)

  if len(block) == 2 and all((left + right) % 2 == 0 for left, right in zip(*block)):
    mid  = [(left + right) // 2 for left, right in zip(*block)]
    side = [(left - right) // 2 for left, right in zip(*block)]
    encoded = encode_channel(mid, depth, True) + encode_channel(side, depth, True)
    if len(encoded) < len(plain):
      return encoded

  return plain

def encode(samples: list[list[int]], bits: int, sample_rate: int) -> bytes:
  if bits not in SUPPORTED_DEPTHS:
    raise AudioDecodeError(f"Unsupported NCW sample depth: {bits} bits")
  if not samples:
    raise AudioDecodeError("Cannot encode audio without channels")

  num_samples = len(samples[0])
  blocks = bytearray()
  block_offsets = []

  for start in range(0, num_samples, SAMPLES_PER_BLOCK):
    block_offsets.append(len(blocks))
    block = []
    for channel in samples:
      values = list(channel[start:start + SAMPLES_PER_BLOCK])
      # Repeating the last value keeps the padding at zero deltas
      values += [values[-1]] * (SAMPLES_PER_BLOCK - len(values))
      block.append(values)
    blocks += encode_block(block, bits)
  block_offsets.append(len(blocks))

  header = NcwHeader()
  header.channels          = len(samples)
  header.bits              = bits
  header.sample_rate       = sample_rate
  header.num_samples       = num_samples
  header.block_defs_offset = HEADER_SIZE
  header.blocks_offset     = HEADER_SIZE + 4 * len(block_offsets)
  header.blocks_size       = len(blocks)

  table = struct.pack(f'<{len(block_offsets)}I', *block_offsets)
  return header.to_bytes() + table + bytes(blocks)

if __name__ == '__main__':
  pass
