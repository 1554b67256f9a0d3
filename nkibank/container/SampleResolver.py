'''
### SampleResolver Module

This module finds the sample files which a container references but does not embed.

Classes:
    `SampleResolver`:
        Generates the candidate paths of a sample in priority order and returns the first
        existing one.

Functions:
    `decode_relative_path`:
        Converts a stored relative path hint into a native relative path. The `@b` segment is the
        stored form of a parent directory redirection.

Functionality:
    Candidates, in this order:
        1. the declared absolute path,
        2. the declared relative path joined to the folder of the container,
        3. a file with the same name in the folder of the container.
    Candidates are produced lazily, a candidate after the first existing one is never touched.

Intended Usage:
    Each container reader creates one resolver for the folder of the file it reads. The
    `is_file` check can be replaced, e.g. to observe the probing order.
'''

import os

from ..Errors import MissingSampleError
from ..model.SampleData import FileSampleData

PARENT_MARKER = '@b'

def normalize_separators(path: str) -> str:
  return path.replace('\\', '/')

def decode_relative_path(hint: str) -> str:
  segments = ['..' if segment == PARENT_MARKER else segment for segment in normalize_separators(hint).split('/') if segment]
  return os.path.join(*segments) if segments else ''

class SampleResolver:
  ''' Resolves sample references relative to the folder of a container '''
  def __init__(self, base_folder: str, is_file=os.path.isfile):
    self.base_folder = os.fspath(base_folder)
    self.is_file = is_file

  def candidates(self, name: str, absolute_hint: str = '', relative_hint: str = ''):
    seen = set()

    def once(path: str):
      if path not in seen:
        seen.add(path)
        return True
      return False

    if absolute_hint and once(absolute_hint):
      yield absolute_hint

    if relative_hint:
      relative = decode_relative_path(relative_hint)
      if relative:
        path = os.path.normpath(os.path.join(self.base_folder, relative))
        if once(path):
          yield path

    file_name = os.path.basename(normalize_separators(name))
    if file_name:
      path = os.path.join(self.base_folder, file_name)
      if once(path):
        yield path

  def resolve(self, name: str, absolute_hint: str = '', relative_hint: str = '') -> str:
    attempted = []
    for candidate in self.candidates(name, absolute_hint, relative_hint):
      attempted.append(candidate)
      if self.is_file(candidate):
        return candidate

    raise MissingSampleError(name, attempted)

  def lookup(self, file_reference: str) -> FileSampleData:
    ''' Resolves a single stored file reference, which is either absolute or relative '''
    if os.path.isabs(file_reference) or (len(file_reference) > 2 and file_reference[1] == ':'):
      return self.lookup_hints(file_reference, absolute_hint=file_reference)
    return self.lookup_hints(file_reference, relative_hint=file_reference)

  def lookup_hints(self, name: str, absolute_hint: str = '', relative_hint: str = '') -> FileSampleData:
    return FileSampleData(self.resolve(name, absolute_hint, relative_hint))

if __name__ == '__main__':
  pass
