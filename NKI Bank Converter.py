''' A script for converting sampled instruments between Kontakt 1 and Kontakt 2 containers, monoliths, SFZ and a YAML format '''

# Define current version
CURRENT_VERSION = '2026.10.17'

# Imports
import os
import sys
import logging
import argparse
from typing import Final

# Ensure /nkibank is present and can be imported
try:
  import nkibank

  # Import the conversion driver
  from nkibank.Converter import OutputFormat, Settings, convert_files
  from nkibank.Compression import DEFAULT_LEVEL

except ImportError as e:
  print("Error: One or more required modules are missing.")
  print(f"Details: {e}")
  print("\nPlease ensure the 'nkibank' package is correctly installed and all its dependencies are available.")
  sys.exit(1)

# Create ANSI formatting for terminal messages
# ANSI COLORS: https://talyian.github.io/ansicolors/
# TERMINAL TEXT COLORS
RED        : Final = '\x1b[31m'
PINK_204   : Final = '\x1b[38;5;204m'
YELLOW     : Final = '\x1b[33m'
YELLOW_229 : Final = '\x1b[38;5;229m'
BLUE_39    : Final = '\x1b[38;5;39m'
GRAY_245   : Final = '\x1b[38;5;245m'
GRAY_248   : Final = '\x1b[38;5;248m'
GREEN_79   : Final = '\x1b[38;5;79m'

# TERMINAL TEXT STYLES
BOLD  : Final = '\x1b[1m'
RESET : Final = '\x1b[0m' # Resets all text styles and colors

LEVEL_COLORS: Final = {
  logging.DEBUG:    GRAY_245,
  logging.INFO:     GRAY_248,
  logging.WARNING:  YELLOW,
  logging.ERROR:    RED,
  logging.CRITICAL: RED + BOLD,
}

class ColorFormatter(logging.Formatter):
  ''' Colors each record by its level '''
  def format(self, record: logging.LogRecord) -> str:
    return f"{LEVEL_COLORS.get(record.levelno, '')}{super().format(record)}{RESET}"

def setup_logging(verbose: bool) -> None:
  handler = logging.StreamHandler()
  handler.setFormatter(ColorFormatter('%(levelname)s: %(message)s'))

  root = logging.getLogger()
  root.addHandler(handler)
  # Warnings are printed with the summary of each file
  root.setLevel(logging.DEBUG if verbose else logging.ERROR)

# Argument Parser
def parse_args():
  parser = argparse.ArgumentParser(
    formatter_class=argparse.RawDescriptionHelpFormatter,
    usage=f'{GRAY_248}[>_]{RESET} {YELLOW_229}python{RESET} {BLUE_39}"{os.path.basename(sys.argv[0])}"{RESET} {GRAY_245}[-h]{RESET} {BLUE_39}file [files ...]{RESET} {GRAY_245}-o {{nki, nki2, nkm, sfz, yaml}}{RESET}',
    description='''This script converts sampled instruments between Kontakt containers, monoliths, SFZ and YAML.'''
  )

  parser.add_argument(
    'files',
    nargs='+',
    help="instrument files (.nki, .nkm or .yaml)"
  )
  parser.add_argument(
    '-o',
    '--output',
    choices=[output_format.value for output_format in OutputFormat],
    default=OutputFormat.NKI2.value,
    help="specifies the output format (defaults to nki2, the Kontakt 2 container)"
  )
  parser.add_argument(
    '-d',
    '--destination',
    default='',
    help="the folder the converted files are written to (defaults to the current folder)"
  )
  parser.add_argument(
    '--big-endian',
    action='store_true',
    help="writes Kontakt containers in big-endian byte order"
  )
  parser.add_argument(
    '-l',
    '--level',
    type=int,
    choices=range(0, 10),
    default=DEFAULT_LEVEL,
    metavar='{0-9}',
    help=f"the compression level of the metadata (defaults to {DEFAULT_LEVEL})"
  )
  parser.add_argument(
    '-j',
    '--workers',
    type=int,
    default=1,
    help="the number of files converted in parallel"
  )
  parser.add_argument(
    '--overwrite',
    action='store_true',
    help="overwrites existing output files instead of skipping them"
  )
  parser.add_argument(
    '-v',
    '--verbose',
    action='store_true',
    help="prints every step of the conversion"
  )
  parser.add_argument(
    '--version',
    action='version',
    version=f'%(prog)s {CURRENT_VERSION}'
  )

  return parser.parse_args()

''' Main Function '''
def main() -> None:
  args = parse_args()
  setup_logging(args.verbose)

  settings = Settings(
    output_format=OutputFormat(args.output),
    output_folder=args.destination,
    big_endian=args.big_endian,
    compression_level=args.level,
    workers=max(1, args.workers),
    overwrite=args.overwrite
  )

  results = convert_files(args.files, settings)

  failed = 0
  for result in results:
    if result.succeeded:
      print(f"{GREEN_79}{BOLD}Converted{RESET} {BLUE_39}{result.source}{RESET}")
      for output in result.outputs:
        print(f"  {GRAY_248}-> {output}{RESET}")
    else:
      failed += 1
      print(f"{RED}{BOLD}Failed{RESET}    {BLUE_39}{result.source}{RESET}: {PINK_204}{result.error}{RESET}")

    for source, message in result.warnings:
      print(f"  {YELLOW}Warning ({source}): {message}{RESET}")

  print(f"\n{len(results) - failed} of {len(results)} file(s) converted.")
  sys.exit(1 if failed else 0)

if __name__ == '__main__':
  main()
