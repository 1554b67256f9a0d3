import io
import zlib

import pytest

from nkibank import Compression
from nkibank.Errors import CorruptedStreamError


class TestCompression:
  def test_round_trip(self):
    data = b'<programs/>' * 100
    assert Compression.decompress(Compression.compress(data)) == data

  def test_default_level_is_reproducible(self):
    data = b'metadata' * 50
    assert Compression.compress(data) == zlib.compress(data, Compression.DEFAULT_LEVEL)

  def test_invalid_level(self):
    with pytest.raises(ValueError):
      Compression.compress(b'data', 10)

  def test_corrupted_stream(self):
    with pytest.raises(CorruptedStreamError):
      Compression.decompress(b'\x00\x01\x02\x03 not a zlib stream')

  def test_truncated_stream(self):
    compressed = Compression.compress(b'abcdefgh' * 200)
    with pytest.raises(CorruptedStreamError):
      Compression.decompress(compressed[:len(compressed) // 2])

  def test_decompress_ignores_trailing_bytes(self):
    data = b'<Programs/>' * 20
    assert Compression.decompress(Compression.compress(data) + b'sample payload') == data

  def test_read_zlib_stops_at_end_of_stream(self):
    data = b'sample metadata ' * 30
    stream = io.BytesIO(Compression.compress(data) + b'trailing bytes')
    assert Compression.read_zlib(stream) == data

  def test_read_zlib_truncated(self):
    compressed = Compression.compress(b'abcdefgh' * 200)
    with pytest.raises(CorruptedStreamError):
      Compression.read_zlib(io.BytesIO(compressed[:10]))
