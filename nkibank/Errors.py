'''
### Errors Module

This module defines the exceptions raised while reading and writing instrument containers and
the `Notifier` which collects the warnings of a single conversion.

Classes:
    `ConversionError`:
        Base class of every error raised by the package.

    `CorruptedContainerError`:
        The header or table of a container is inconsistent. Aborts the conversion of that file.

    `CorruptedStreamError`:
        A compressed block could not be decompressed. Aborts the conversion of that file.

    `UnsupportedVariantError`:
        The leading signature bytes did not match any known container variant.

    `MissingSampleError`:
        A referenced sample could not be found by any lookup strategy. Only the zone is dropped.

    `AudioDecodeError`:
        A sample payload could not be decoded. Only the zone is dropped.

    `EncodingError`:
        Text with illegal characters. Recovered by substitution where it is detected.

    `Notifier`:
        Collects the warnings of one conversion and forwards them to the logger.

Intended Usage:
    File-level errors propagate to the conversion driver which reports them as a failed file.
    Zone-level errors are caught by the readers and turned into warnings on the `Notifier`.
'''

import logging

logger = logging.getLogger(__name__)

class ConversionError(Exception):
  ''' Base class of all conversion errors '''

class CorruptedContainerError(ConversionError):
  pass

class CorruptedStreamError(ConversionError):
  pass

class UnsupportedVariantError(ConversionError):
  def __init__(self, signature: bytes):
    self.signature = bytes(signature)
    super().__init__(f"Unsupported container format (signature: {self.signature.hex(' ') or 'empty'})")

class MissingSampleError(ConversionError):
  def __init__(self, name: str, attempted: list = None):
    self.name = name
    self.attempted = list(attempted or [])
    tried = ', '.join(self.attempted) if self.attempted else 'no candidates'
    super().__init__(f"Sample '{name}' could not be found (tried: {tried})")

class AudioDecodeError(ConversionError):
  pass

class EncodingError(ConversionError):
  pass

class Notifier:
  ''' Collects the warnings of one conversion unit '''
  def __init__(self, source: str = ''):
    self.source = source
    self.warnings: list[tuple[str, str]] = []

  def warn(self, message: str, source: str = None):
    source = source or self.source
    self.warnings.append((source, message))
    logger.warning("%s: %s", source, message)

  def info(self, message: str):
    logger.info("%s: %s", self.source, message)

if __name__ == '__main__':
  pass
