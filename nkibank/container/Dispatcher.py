'''
### Dispatcher Module

This module selects the container implementation for a file from its leading bytes.

Functions:
    `detect`:
        Maps the leading bytes of a file to exactly one `ContainerVariant`.

    `create_container`:
        Creates the container of a variant with the byte order of that variant.

    `read_file`:
        Detects the variant of a file and reads all instruments it holds.

Functionality:
    The monolith is recognized by its 16 byte signature, the Kontakt containers by their 4 byte
    magic in either byte order. Anything else raises `UnsupportedVariantError` with the bytes
    that were looked at.
'''

import logging
import os
from types import MappingProxyType

from .Kontakt1 import Kontakt1Container
from .Kontakt2 import Kontakt2Container
from .Monolith import SIGNATURE as MONOLITH_SIGNATURE, MonolithContainer
from ..Enums import ContainerVariant, Magic
from ..Errors import Notifier, UnsupportedVariantError
from ..Helpers import unpack_u32
from ..model.Instrument import Instrument

logger = logging.getLogger(__name__)

SIGNATURE_SIZE = 16

MAGIC_VARIANTS = MappingProxyType({
  (Magic.KONTAKT1_INSTRUMENT, False): ContainerVariant.KONTAKT1_LE,
  (Magic.KONTAKT1_INSTRUMENT, True):  ContainerVariant.KONTAKT1_BE,
  (Magic.KONTAKT2_INSTRUMENT, False): ContainerVariant.KONTAKT2_LE,
  (Magic.KONTAKT2_INSTRUMENT, True):  ContainerVariant.KONTAKT2_BE,
})

CONTAINER_CLASSES = MappingProxyType({
  ContainerVariant.KONTAKT1_LE: Kontakt1Container,
  ContainerVariant.KONTAKT1_BE: Kontakt1Container,
  ContainerVariant.KONTAKT2_LE: Kontakt2Container,
  ContainerVariant.KONTAKT2_BE: Kontakt2Container,
  ContainerVariant.MONOLITH:    MonolithContainer,
})

def detect(leading_bytes: bytes) -> ContainerVariant:
  leading_bytes = bytes(leading_bytes[:SIGNATURE_SIZE])

  if leading_bytes == MONOLITH_SIGNATURE:
    return ContainerVariant.MONOLITH

  if len(leading_bytes) >= 4:
    for (magic, big_endian), variant in MAGIC_VARIANTS.items():
      if unpack_u32(leading_bytes, 0, big_endian) == magic:
        return variant

  raise UnsupportedVariantError(leading_bytes)

def create_container(variant: ContainerVariant):
  return CONTAINER_CLASSES[variant](big_endian=variant.is_big_endian)

def read_file(path, notifier: Notifier = None) -> list[Instrument]:
  path = os.fspath(path)
  notifier = notifier or Notifier(os.path.basename(path))

  with open(path, 'rb') as f:
    variant = detect(f.read(SIGNATURE_SIZE))
    f.seek(0)
    data = f.read()

  logger.info("%s: detected %s container", path, variant.value)
  return create_container(variant).read(data, path, notifier)

if __name__ == '__main__':
  pass
