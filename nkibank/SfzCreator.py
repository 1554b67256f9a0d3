'''
### SfzCreator Module

This module creates the text of an SFZ file from an instrument. The samples are expected in a
sibling folder, which the `Converter` fills with WAV files.

Functions:
    `create_metadata`:
        Creates the complete SFZ text of an instrument.

    `create_region`:
        Creates the opcodes of one zone.

Functionality:
    - A zone whose root, low and high key are identical is written with the single `key` opcode.
    - Round-robin groups get `seq_length`, their zones `seq_position`.
    - Only the first loop of a zone is written. The loop crossfade is converted from a fraction
      of the loop length into seconds using the sample rate of the zone's sample.
    - Envelope values are limited to 0..100, resonance to 40 dB. Unset envelope values and the
      envelopes of inactive modulators are not written.

Intended Usage:
    Called by the `Converter` for the 'sfz' output format.
'''

from types import MappingProxyType

from .Enums import FilterType, LoopType, PlayLogic, TriggerType
from .Errors import AudioDecodeError, Notifier
from .Helpers import clamp, create_unique_filenames
from .model.Envelope import Envelope, Modulator
from .model.Instrument import Instrument
from .model.Zone import Zone

SFZ_HEADER     = '/////////////////////////////////////////////////////////////////////////////\n////\n'
COMMENT_PREFIX = '//// '

FILTER_TYPES = MappingProxyType({
  FilterType.LOW_PASS: 'lpf',
  FilterType.HIGH_PASS: 'hpf',
  FilterType.BAND_PASS: 'bpf',
  FilterType.BAND_REJECTION: 'brf',
})

LOOP_TYPES = MappingProxyType({
  LoopType.FORWARD: 'forward',
  LoopType.BACKWARDS: 'backward',
  LoopType.ALTERNATING: 'alternate',
})

ENVELOPE_OPCODES = ('delay', 'attack', 'hold', 'decay', 'release', 'start', 'sustain')

def format_value(value: float) -> str:
  return f"{value:.2f}"

def opcode(name: str, value) -> str:
  return f"{name}={value}"

def envelope_opcodes(prefix: str, envelope: Envelope) -> list[str]:
  opcodes = []
  for name, value in envelope.values().items():
    if not Envelope.is_set(value):
      continue
    # Levels are stored as fractions, SFZ expects percent
    if name in ('start', 'sustain'):
      value = value * 100.0
    opcodes.append(opcode(f"{prefix}_{name}", float(clamp(value, 0.0, 100.0))))
  return opcodes

def modulator_lines(prefix: str, modulator: Modulator) -> list[str]:
  if not modulator.is_active():
    return []

  lines = [opcode(f"{prefix}_depth", int(modulator.depth))]
  opcodes = envelope_opcodes(prefix, modulator.source)
  if opcodes:
    lines.append(' '.join(opcodes))
  return lines

def loop_crossfade_seconds(zone: Zone, notifier: Notifier):
  ''' Returns None if no crossfade can be written '''
  loop = zone.loops[0]
  if loop.crossfade <= 0 or loop.length <= 0 or zone.sample is None:
    return None

  try:
    sample_rate = zone.sample.get_audio_metadata().sample_rate
  except AudioDecodeError as e:
    notifier.warn(f"No loop crossfade for zone '{zone.name}': {e}")
    return None

  return round(loop.crossfade * loop.length / sample_rate)

def create_loop(zone: Zone, notifier: Notifier) -> str:
  if not zone.loops:
    return opcode('loop_mode', 'no_loop')

  loop = zone.loops[0]
  opcodes = [opcode('loop_mode', 'loop_continuous')]
  if loop.type is not LoopType.FORWARD:
    opcodes.append(opcode('loop_type', LOOP_TYPES[loop.type]))
  opcodes.append(opcode('loop_start', loop.start))
  opcodes.append(opcode('loop_end', loop.end))

  crossfade = loop_crossfade_seconds(zone, notifier)
  if crossfade is not None:
    opcodes.append(opcode('loop_crossfade', crossfade))

  return ' '.join(opcodes)

def create_region(zone: Zone, file_name: str, sequence_number: int, notifier: Notifier) -> list[str]:
  lines = ['', '<region>', opcode('sample', file_name)]

  if zone.trigger is not TriggerType.ATTACK:
    lines.append(opcode('trigger', zone.trigger.value))
  if zone.reversed:
    lines.append(opcode('direction', 'reverse'))
  if zone.play_logic is PlayLogic.ROUND_ROBIN:
    lines.append(opcode('seq_position', sequence_number))

  ''' Key range '''
  if zone.has_single_key():
    lines.append(opcode('key', zone.key_root))
  else:
    lines.append(opcode('pitch_keycenter', zone.key_root))
    lines.append(f"{opcode('lokey', clamp(zone.key_low, 0, 127))} {opcode('hikey', clamp(zone.key_high, 0, 127))}")

  low, high = zone.crossfaded_key_range()
  if zone.note_crossfade_low > 0:
    lines.append(f"{opcode('xfin_lokey', low)} {opcode('xfin_hikey', zone.key_low)}")
  if zone.note_crossfade_high > 0:
    lines.append(f"{opcode('xfout_lokey', zone.key_high)} {opcode('xfout_hikey', high)}")

  ''' Velocity '''
  velocity = []
  if zone.velocity_low > 1:
    velocity.append(opcode('lovel', zone.velocity_low))
  if 0 < zone.velocity_high < 127:
    velocity.append(opcode('hivel', zone.velocity_high))
  if velocity:
    lines.append(' '.join(velocity))

  low, high = zone.crossfaded_velocity_range()
  if zone.velocity_crossfade_low > 0:
    lines.append(f"{opcode('xfin_lovel', low)} {opcode('xfin_hivel', zone.velocity_low)}")
  if zone.velocity_crossfade_high > 0:
    lines.append(f"{opcode('xfout_lovel', zone.velocity_high)} {opcode('xfout_hivel', high)}")

  ''' Start, end, tune, volume '''
  position = []
  if zone.start >= 0:
    position.append(opcode('offset', zone.start))
  if zone.stop >= 0:
    position.append(opcode('end', zone.stop))
  if position:
    lines.append(' '.join(position))

  if zone.tune != 0:
    lines.append(opcode('tune', round(zone.tune)))

  key_tracking = round(zone.key_tracking * 100.0)
  if key_tracking != 100:
    lines.append(opcode('pitch_keytrack', key_tracking))

  if zone.gain != 0:
    lines.append(opcode('volume', format_value(zone.gain)))
  if zone.panorama != 0:
    lines.append(opcode('pan', round(zone.panorama * 100)))

  if zone.amplitude_modulator.is_active():
    opcodes = envelope_opcodes('ampeg', zone.amplitude_modulator.source)
    if opcodes:
      lines.append(' '.join(opcodes))

  ''' Pitch bend and pitch envelope '''
  if zone.bend_up != 0:
    lines.append(opcode('bend_up', zone.bend_up * 100))
  if zone.bend_down != 0:
    lines.append(opcode('bend_down', -abs(zone.bend_down) * 100))

  lines += modulator_lines('pitcheg', zone.pitch_modulator)

  lines.append(create_loop(zone, notifier))

  ''' Filter '''
  if zone.filter is not None:
    lines.append(' '.join([
      opcode('fil_type', f"{FILTER_TYPES[zone.filter.type]}_{zone.filter.clamped_poles}p"),
      opcode('cutoff', format_value(zone.filter.cutoff)),
      opcode('resonance', format_value(min(40.0, zone.filter.resonance)))
    ]))
    lines += modulator_lines('fileg', zone.filter.cutoff_modulator)

  return lines

def create_metadata(instrument: Instrument, sample_folder: str, file_names: dict = None, notifier: Notifier = None) -> str:
  '''
  Creates the SFZ text. `file_names` maps the sample data of the zones to their file names in
  `sample_folder`, unique names are created from the sample names otherwise.
  '''
  notifier = notifier or Notifier(instrument.name)
  samples = instrument.sample_data()
  names = dict(zip(samples, create_unique_filenames([sample.name for sample in samples], '.wav')))
  names.update(file_names or {})

  lines = [SFZ_HEADER.rstrip('\n')]

  # SFZ has no opcodes for these, they are kept as comments
  metadata = instrument.metadata
  if metadata.creator.strip():
    lines.append(f"{COMMENT_PREFIX}Creator : {metadata.creator}")
  if metadata.category.strip():
    lines.append(f"{COMMENT_PREFIX}Category: {metadata.category}")
  if metadata.description.strip():
    lines.append(COMMENT_PREFIX + metadata.description.replace('\n', '\n' + COMMENT_PREFIX))
  lines.append('')

  lines.append('<global>')
  if instrument.name.strip():
    lines.append(opcode('global_label', instrument.name))

  for group in instrument.non_empty_groups():
    lines += ['', '<group>']
    if group.name.strip():
      lines.append(opcode('group_label', group.name))
    if group.has_round_robin():
      lines.append(opcode('seq_length', group.round_robin_count()))
    if group.trigger is not TriggerType.ATTACK:
      lines.append(opcode('trigger', group.trigger.value))

    sequence = 1
    for zone in group.zones:
      file_name = names.get(zone.sample, zone.sample_name + '.wav')
      lines += create_region(zone, f"{sample_folder}/{file_name}" if sample_folder else file_name, sequence, notifier)
      if zone.play_logic is PlayLogic.ROUND_ROBIN:
        sequence += 1

  return '\n'.join(lines) + '\n'

if __name__ == '__main__':
  pass
