import pytest

from nkibank.Helpers import (
  add_padding_to_16, align_to_16, clamp, create_safe_filename, create_unique_filenames,
  pack_u16, pack_u32, unpack_u16, unpack_u32
)


class TestByteOrder:
  def test_u32_big_endian(self):
    assert pack_u32(0x01020304, True) == bytes([0x01, 0x02, 0x03, 0x04])
    assert unpack_u32(bytes([0x01, 0x02, 0x03, 0x04]), 0, True) == 0x01020304

  def test_u32_little_endian(self):
    assert pack_u32(0x01020304, False) == bytes([0x04, 0x03, 0x02, 0x01])
    assert unpack_u32(bytes([0x04, 0x03, 0x02, 0x01]), 0, False) == 0x01020304

  def test_u16_with_offset(self):
    data = b'\xff\xff' + pack_u16(0xABCD, True)
    assert unpack_u16(data, 2, True) == 0xABCD
    assert unpack_u16(data, 2, False) == 0xCDAB


class TestAlignment:
  @pytest.mark.parametrize('value, expected', [(0, 0), (1, 16), (16, 16), (17, 32)])
  def test_align_to_16(self, value, expected):
    assert align_to_16(value) == expected

  def test_padding(self):
    assert len(add_padding_to_16(b'x' * 5)) == 16
    assert add_padding_to_16(b'x' * 16) == b'x' * 16

  def test_clamp(self):
    assert clamp(5, 1, 4) == 4
    assert clamp(0, 1, 4) == 1
    assert clamp(2, 1, 4) == 2


class TestFileNames:
  def test_illegal_characters_are_replaced(self):
    assert create_safe_filename('Piano: "Grand" <v2>?') == 'Piano_ _Grand_ _v2__'

  def test_trailing_dots_and_empty_names(self):
    assert create_safe_filename('Strings...') == 'Strings'
    assert create_safe_filename('  ') == 'Unnamed'

  def test_unique_names(self):
    assert create_unique_filenames(['a', 'A', 'b', 'a'], '.wav') == ['a.wav', 'A (2).wav', 'b.wav', 'a (3).wav']
