'''
### Converter Module

This module drives the conversion of files: it reads every instrument of a source file into the
canonical model and writes each one in the selected output format.

Classes:
    `Settings`:
        The conversion options, usually created from the command line arguments.

    `ConversionResult`:
        The outcome of one source file: written files, warnings and the error if it failed.

Functions:
    `read_instruments`:
        Reads a container or a YAML file into instruments.

    `write_instrument`:
        Writes one instrument in the selected format together with its samples.

    `write_monolith`:
        Writes all instruments of a source file into one monolith.

    `convert_file`:
        Converts one file. A `ConversionError` only fails the file it belongs to.

    `convert_files`:
        Converts several files, optionally with a pool of worker threads.

Dependencies:
    `concurrent.futures`:
        The thread pool for independent conversions.

    `yaml`:
        Via `YAMLSerializer`, for the YAML output and input.

Intended Usage:
    Each conversion has its own `Notifier`, model and file handles, so conversions can run in
    parallel. Existing output files are never overwritten unless the settings allow it.
'''

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from . import SfzCreator
from .Compression import DEFAULT_LEVEL
from .container import Dispatcher
from .container.Kontakt1 import Kontakt1Container
from .container.Kontakt2 import Kontakt2Container
from .container.Monolith import MonolithContainer
from .Errors import AudioDecodeError, ConversionError, Notifier
from .Helpers import create_unique_filenames
from .model.Instrument import Instrument
from .YAMLSerializer import dump_instrument_dict, load_instrument_dict

logger = logging.getLogger(__name__)

SAMPLE_FOLDER_POSTFIX = ' Samples'

class OutputFormat(Enum):
  NKI  = 'nki'
  NKI2 = 'nki2'
  NKM  = 'nkm'
  SFZ  = 'sfz'
  YAML = 'yaml'

FILE_EXTENSIONS = MappingProxyType({
  OutputFormat.NKI:  '.nki',
  OutputFormat.NKI2: '.nki',
  OutputFormat.NKM:  '.nkm',
  OutputFormat.SFZ:  '.sfz',
  OutputFormat.YAML: '.yaml',
})

@dataclass
class Settings:
  output_format: OutputFormat = OutputFormat.NKI2
  output_folder: str = ''
  big_endian: bool = False
  compression_level: int = DEFAULT_LEVEL
  workers: int = 1
  overwrite: bool = False

@dataclass
class ConversionResult:
  source: str
  outputs: list[str] = field(default_factory=list)
  warnings: list[tuple[str, str]] = field(default_factory=list)
  error: str = ''

  @property
  def succeeded(self) -> bool:
    return not self.error

def read_instruments(path: str, notifier: Notifier) -> list[Instrument]:
  if path.lower().endswith(('.yaml', '.yml')):
    with open(path, 'r', encoding='utf-8') as f:
      yaml_dict = load_instrument_dict(f)
    return [Instrument.from_yaml(yaml_dict, os.path.dirname(path))]

  return Dispatcher.read_file(path, notifier)

def write_samples(instrument: Instrument, folder: str, notifier: Notifier) -> dict:
  '''
  Stores every sample of the instrument as a WAV file, returns the file name of each stored sample.
  The zones of a sample which cannot be decoded are removed from the instrument.
  '''
  samples = instrument.sample_data()
  file_names = {}

  os.makedirs(folder, exist_ok=True)
  for sample, file_name in zip(samples, create_unique_filenames([sample.name for sample in samples], '.wav')):
    try:
      sample.write_wave(os.path.join(folder, file_name))
    except AudioDecodeError as e:
      for zone in instrument.remove_sample(sample):
        notifier.warn(f"Zone '{zone.name}' dropped: {e}")
      continue
    file_names[sample] = file_name

  return file_names

def write_instrument(instrument: Instrument, settings: Settings, notifier: Notifier):
  ''' Returns the path of the written file, or None if it already exists '''
  output_format = settings.output_format
  safe_name = instrument.safe_name
  path = os.path.join(settings.output_folder, safe_name + FILE_EXTENSIONS[output_format])

  if os.path.exists(path) and not settings.overwrite:
    notifier.warn(f"{path} already exists, skipped")
    return None

  if output_format is OutputFormat.NKM:
    return write_monolith([instrument], settings, notifier)

  sample_folder_name = safe_name + SAMPLE_FOLDER_POSTFIX
  file_names = write_samples(instrument, os.path.join(settings.output_folder, sample_folder_name), notifier)

  if output_format is OutputFormat.SFZ:
    text = SfzCreator.create_metadata(instrument, sample_folder_name, file_names, notifier)
    with open(path, 'w', encoding='utf-8', newline='\n') as f:
      f.write(text)
    return path

  if output_format is OutputFormat.YAML:
    yaml_dict = instrument.to_yaml({sample: f"{sample_folder_name}/{name}" for sample, name in file_names.items()})
    with open(path, 'w', encoding='utf-8') as f:
      dump_instrument_dict(yaml_dict, f)
    return path

  container_class = Kontakt1Container if output_format is OutputFormat.NKI else Kontakt2Container
  samples_size = sum(sample.payload_size for sample in file_names)
  data = container_class(settings.big_endian).write(
    instrument, sample_folder_name, samples_size, file_names=file_names, notifier=notifier, level=settings.compression_level
  )

  with open(path, 'wb') as f:
    f.write(data)
  return path

def write_monolith(instruments: list[Instrument], settings: Settings, notifier: Notifier):
  ''' Bundles the instruments into one monolith named after the first one, returns None if it already exists '''
  path = os.path.join(settings.output_folder, instruments[0].safe_name + FILE_EXTENSIONS[OutputFormat.NKM])

  if os.path.exists(path) and not settings.overwrite:
    notifier.warn(f"{path} already exists, skipped")
    return None

  data = MonolithContainer().write(instruments, notifier=notifier, level=settings.compression_level)
  with open(path, 'wb') as f:
    f.write(data)
  return path

def convert_file(path: str, settings: Settings) -> ConversionResult:
  path = os.fspath(path)
  result = ConversionResult(path)
  notifier = Notifier(os.path.basename(path))

  try:
    instruments = read_instruments(path, notifier)
    if settings.output_format is OutputFormat.NKM and instruments:
      outputs = [write_monolith(instruments, settings, notifier)]
    else:
      outputs = [write_instrument(instrument, settings, notifier) for instrument in instruments]

    for output in outputs:
      if output is not None:
        result.outputs.append(output)
        notifier.info(f"Stored {output}")
  except ConversionError as e:
    logger.error("%s: %s", path, e)
    result.error = str(e)
  except OSError as e:
    logger.error("%s: %s", path, e)
    result.error = f"{type(e).__name__}: {e}"

  result.warnings = list(notifier.warnings)
  return result

def convert_files(paths: list[str], settings: Settings) -> list[ConversionResult]:
  ''' Converts the files in the given order, the results keep that order '''
  if settings.output_folder:
    os.makedirs(settings.output_folder, exist_ok=True)

  if settings.workers <= 1 or len(paths) <= 1:
    return [convert_file(path, settings) for path in paths]

  with ThreadPoolExecutor(max_workers=settings.workers) as executor:
    return list(executor.map(lambda path: convert_file(path, settings), paths))

if __name__ == '__main__':
  pass
