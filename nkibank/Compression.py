'''
### Compression Module

This module wraps the deflate codec (zlib stream format) used for the metadata blocks of the
instrument containers.

Functions:
    `compress`:
        Compresses a byte sequence with the given level (0-9).

    `decompress`:
        Decompresses a zlib stream held in memory through `read_zlib`.

    `read_zlib`:
        Reads and decompresses one zlib stream from a binary file object.

Dependencies:
    `zlib`:
        The deflate implementation.

Intended Usage:
    Container writers always compress with `DEFAULT_LEVEL` so that identical input gives
    identical output. A broken stream raises `CorruptedStreamError`, which aborts only the
    conversion of the file it belongs to.
'''

import io
import zlib

from .Errors import CorruptedStreamError

DEFAULT_LEVEL = 6
CHUNK_SIZE = 0x4000

def compress(data: bytes, level: int = DEFAULT_LEVEL) -> bytes:
  if not 0 <= level <= 9:
    raise ValueError(f"Compression level must be between 0 and 9, got {level}")

  return zlib.compress(bytes(data), level)

def decompress(data: bytes) -> bytes:
  ''' Bytes following the end of the zlib stream are ignored '''
  return read_zlib(io.BytesIO(data))

def read_zlib(stream) -> bytes:
  ''' Decompresses from the current position of the stream until the end of the zlib stream '''
  decompressor = zlib.decompressobj()
  output = bytearray()

  while not decompressor.eof:
    chunk = stream.read(CHUNK_SIZE)
    if not chunk:
      raise CorruptedStreamError("Compressed block is truncated")

    try:
      output += decompressor.decompress(chunk)
    except zlib.error as e:
      raise CorruptedStreamError(f"Compressed block is corrupted: {e}") from e

  return bytes(output)

if __name__ == '__main__':
  pass
