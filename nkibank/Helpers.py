'''
### Helpers Module

This module provides low-level utility functions to assist with binary data manipulation,
alignment, and file naming, commonly used throughout the container parsing and serialization process.

Functions:
    `pack_u16` / `pack_u32`:
        Packs an unsigned integer with an explicit byte order.

    `unpack_u16` / `unpack_u32`:
        Unpacks an unsigned integer at an offset with an explicit byte order.

    `align_to_16`:
        Rounds the given integer up to the next multiple of 16.

    `add_padding_to_16`:
        Adds zero-bytes padding to a byte sequence so its length is a multiple of 16.

    `clamp`:
        Limits a value to an inclusive range.

    `create_safe_filename`:
        Replaces every character that is not allowed in a file or folder name.

    `create_unique_filenames`:
        Creates safe and unique file names for a list of sample names.

Dependencies:
    `struct`:
        Imported and exposed for byte-level packing and unpacking operations needed by other modules.

Intended Usage:
    This module is intended to be imported whenever binary data must be read or written. Every
    multi-byte integer goes through these helpers so that the byte order is always stated by the
    caller and never guessed from the data.
'''

# Import struct as it is used by /container and /codec
import struct
import re

ILLEGAL_FILENAME_CHARACTERS = re.compile(r'[\\/:*?"<>|\x00-\x1f]')

''' Byte Order Functions '''
def byte_order(big_endian: bool) -> str:
  return '>' if big_endian else '<'

def pack_u16(value: int, big_endian: bool) -> bytes:
  return struct.pack(byte_order(big_endian) + 'H', value & 0xFFFF)

def pack_u32(value: int, big_endian: bool) -> bytes:
  return struct.pack(byte_order(big_endian) + 'I', value & 0xFFFFFFFF)

def unpack_u16(data: bytes, offset: int, big_endian: bool) -> int:
  return struct.unpack_from(byte_order(big_endian) + 'H', data, offset)[0]

def unpack_u32(data: bytes, offset: int, big_endian: bool) -> int:
  return struct.unpack_from(byte_order(big_endian) + 'I', data, offset)[0]

''' Helper Functions '''
def align_to_16(data: int) -> int:
  return (data + 0x0F) & ~0x0F # or (size + 0xF) // 0x10 * 0x10

def add_padding_to_16(packed_data: bytes) -> bytes:
  padding: int = (-len(packed_data)) & 0x0F # or (0x10 - (size % 0x10)) % 0x10
  return packed_data + b'\x00' * padding

def clamp(value, low, high):
  return max(low, min(high, value))

def create_safe_filename(name: str) -> str:
  ''' Removes characters which are not allowed in file names on any of the common file systems '''
  safe = ILLEGAL_FILENAME_CHARACTERS.sub('_', name or '').strip().rstrip('.')
  return safe if safe else 'Unnamed'

def create_unique_filenames(names: list[str], extension: str) -> list[str]:
  ''' Safe file names for the given names, later duplicates get a numbered suffix '''
  used = set()
  file_names = []
  for name in names:
    base = create_safe_filename(name)
    candidate, counter = base, 2
    while candidate.lower() in used:
      candidate = f"{base} ({counter})"
      counter += 1
    used.add(candidate.lower())
    file_names.append(candidate + extension)
  return file_names

if __name__ == '__main__':
  pass
