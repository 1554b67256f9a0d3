'''
### MetadataHandler Module

This module converts the XML metadata block of a Kontakt container into the canonical instrument
model and back. The element names come from the `TagSet` of the container generation.

Classes:
    `MetadataHandler`:
        Parses the metadata of one container ('parse') and creates it for one instrument ('create').

Functions:
    `decode_text`:
        Decodes the decompressed metadata block, strips a byte order mark and replaces illegal
        characters.

    `find_value`:
        Looks up a key in the ordered name/value pairs of an element.

    `parse_number`:
        Converts an attribute or value text into a float, falling back to a default.

Functionality:
    - Accepts a single program element or a root container holding any number of programs.
    - Reconstructs the modulation routing (volume, pitch, cutoff, pitch bend) from the name/value
      pairs of every modulator. A missing target is ignored, a missing intensity counts as zero.
    - Resolves the sample of every zone through the given lookup. A zone whose sample is missing
      or cannot be decoded is dropped and reported on the notifier.

Dependencies:
    `xml.etree.ElementTree`:
        Used for parsing and building the XML tree.

Intended Usage:
    Created by the Kontakt containers with their tag set. Floats are written with `repr` so that
    every value reads back exactly.
'''

import logging
import xml.etree.ElementTree as xml

from .Tags import TagSet
from ..Enums import FilterType, LoopType, PlayLogic, TriggerType
from ..Errors import AudioDecodeError, CorruptedContainerError, EncodingError, MissingSampleError, Notifier
from ..Helpers import create_unique_filenames
from ..model.Envelope import UNSET, Envelope, Filter, Modulator
from ..model.Instrument import Group, Instrument, Metadata
from ..model.Zone import Loop, Zone

logger = logging.getLogger(__name__)

UTF8_BOM        = b'\xef\xbb\xbf'
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'

ENVELOPE_ATTRIBUTES = ('delay', 'attack', 'hold', 'decay', 'release', 'start', 'sustain')
TRUE_VALUES         = ('true', 'yes', '1')

def decode_text(data: bytes, notifier: Notifier) -> str:
  if data.startswith(UTF8_BOM):
    data = data[len(UTF8_BOM):]

  try:
    return data.decode('utf-8')
  except UnicodeDecodeError as e:
    error = EncodingError(f"Metadata contains illegal characters at byte {e.start}, they were replaced")
    notifier.warn(str(error))
    return data.decode('utf-8', errors='replace')

def find_value(pairs: list[tuple[str, str]], key: str, default=None):
  for name, value in pairs:
    if name == key:
      return value
  return default

def parse_number(text, default: float = 0.0) -> float:
  try:
    return float(text)
  except (TypeError, ValueError):
    return default

def format_number(value) -> str:
  return repr(float(value))

class MetadataHandler:
  ''' Reads and writes the XML metadata of one container generation '''
  def __init__(self, tags: TagSet, notifier: Notifier):
    self.tags = tags
    self.notifier = notifier

  ''' Reading '''
  def parse(self, text: str, sample_lookup) -> list[Instrument]:
    '''
    Parses the metadata text. `sample_lookup` is called with the file reference of a sample
    element and returns its `SampleData`, raising `MissingSampleError` if there is none.
    '''
    try:
      top = xml.fromstring(text.lstrip('\ufeff'))
    except xml.ParseError as e:
      raise CorruptedContainerError(f"Malformed metadata XML: {e}") from e

    return [self.read_program(element, sample_lookup) for element in self.find_program_elements(top)]

  def find_program_elements(self, top) -> list:
    if top.tag == self.tags.program:
      return [top]
    if top.tag == self.tags.root_container:
      return top.findall(self.tags.program)

    raise CorruptedContainerError(f"Unexpected top-level element <{top.tag}>")

  def read_value_pairs(self, element) -> list[tuple[str, str]]:
    return [
      (child.get(self.tags.value_name_attribute, ''), child.get(self.tags.value_value_attribute, ''))
      for child in element.findall(self.tags.value)
    ]

  def read_program(self, element, sample_lookup) -> Instrument:
    keywords = element.get('keywords', '')
    metadata = Metadata(
      creator=element.get('creator', ''),
      category=element.get('category', ''),
      description=element.get('description', ''),
      keywords=[keyword.strip() for keyword in keywords.split(',') if keyword.strip()]
    )
    instrument = Instrument(element.get('name', ''), metadata)

    references = {}
    samples_element = element.find(self.tags.samples)
    if samples_element is not None:
      for sample_element in samples_element.findall(self.tags.sample):
        references[self._int(sample_element, 'index', -1)] = sample_element.get('file', '')

    resolved = {}
    def resolve(index: int):
      if index not in resolved:
        try:
          if index not in references:
            raise MissingSampleError(f"#{index}")
          sample = sample_lookup(references[index])
          sample.get_audio_metadata()
          resolved[index] = sample
        except (MissingSampleError, AudioDecodeError) as e:
          resolved[index] = e

      if isinstance(resolved[index], Exception):
        raise resolved[index]
      return resolved[index]

    groups_element = element.find(self.tags.groups)
    if groups_element is None:
      return instrument

    for group_element in groups_element.findall(self.tags.group):
      group = instrument.add_group(Group(
        group_element.get('name', ''),
        self._enum(TriggerType, group_element.get('trigger'), TriggerType.ATTACK)
      ))
      for zone_element in group_element.findall(self.tags.zone):
        zone = self.read_zone(zone_element, resolve)
        if zone is not None:
          group.add_zone(zone)

    return instrument

  def read_zone(self, element, resolve):
    name = element.get('name', '')
    try:
      sample = resolve(self._int(element, 'sample', -1))
    except (MissingSampleError, AudioDecodeError) as e:
      self.notifier.warn(f"Zone '{name}' dropped: {e}")
      return None

    zone = Zone(name=name, sample=sample)
    zone.key_root      = self._int(element, 'rootKey', 60)
    zone.key_low       = self._int(element, 'lowKey', 0)
    zone.key_high      = self._int(element, 'highKey', 127)
    zone.velocity_low  = self._int(element, 'lowVelocity', 0)
    zone.velocity_high = self._int(element, 'highVelocity', 127)

    zone.note_crossfade_low      = self._int(element, 'fadeLowKey', 0)
    zone.note_crossfade_high     = self._int(element, 'fadeHighKey', 0)
    zone.velocity_crossfade_low  = self._int(element, 'fadeLowVelocity', 0)
    zone.velocity_crossfade_high = self._int(element, 'fadeHighVelocity', 0)

    zone.reversed          = element.get('reverse', 'false').lower() in TRUE_VALUES
    zone.play_logic        = self._enum(PlayLogic, element.get('playLogic'), PlayLogic.ALWAYS)
    zone.sequence_position = self._int(element, 'sequence', 0)
    zone.trigger           = self._enum(TriggerType, element.get('trigger'), TriggerType.ATTACK)

    zone.tune         = parse_number(element.get('tune'), 0.0)
    zone.key_tracking = parse_number(element.get('keyTracking'), 1.0)
    zone.gain         = parse_number(element.get('volume'), 0.0)
    if element.get('pan') is not None:
      zone.panorama = self.tags.normalize_panning(parse_number(element.get('pan'), self.tags.denormalize_panning(0.0)))

    zone.start = self._int(element, 'start', -1)
    zone.stop  = self._int(element, 'stop', -1)

    for loop_element in element.findall(self.tags.loop):
      zone.loops.append(Loop(
        self._enum(LoopType, loop_element.get('mode'), LoopType.FORWARD),
        self._int(loop_element, 'start', 0),
        self._int(loop_element, 'end', 0),
        parse_number(loop_element.get('crossfade'), 0.0)
      ))

    # The cutoff modulator is attached to the filter, so the filter comes first
    filter_element = element.find(self.tags.filter)
    if filter_element is not None:
      zone.filter = Filter(
        self._enum(FilterType, filter_element.get('type'), FilterType.LOW_PASS),
        self._int(filter_element, 'poles', 2),
        parse_number(filter_element.get('cutoff'), 20000.0),
        parse_number(filter_element.get('resonance'), 0.0)
      )

    modulators_element = element.find(self.tags.modulators)
    if modulators_element is not None:
      for modulator_element in modulators_element.findall(self.tags.modulator):
        self.read_modulator(modulator_element, zone)

    for problem in zone.validate():
      self.notifier.warn(f"Zone '{name}': {problem}")

    return zone

  def read_modulator(self, element, zone: Zone):
    pairs = self.read_value_pairs(element)
    target = find_value(pairs, self.tags.target_param)
    intensity = parse_number(find_value(pairs, self.tags.intensity_param), 0.0)

    if element.get(self.tags.source_attribute, self.tags.envelope_source) == self.tags.pitch_bend_source:
      if target == self.tags.pitch_value:
        zone.bend_up   = int(round(intensity))
        zone.bend_down = int(round(parse_number(find_value(pairs, self.tags.intensity_low_param), 0.0)))
      return

    modulator = Modulator(intensity, self.read_envelope(element.find(self.tags.envelope)))

    if target == self.tags.volume_value:
      zone.amplitude_modulator = modulator
    elif target == self.tags.pitch_value:
      zone.pitch_modulator = modulator
    elif target == self.tags.cutoff_value and zone.filter is not None:
      zone.filter.cutoff_modulator = modulator
    else:
      logger.debug("Ignoring modulator with target %r in zone '%s'", target, zone.name)

  def read_envelope(self, element) -> Envelope:
    if element is None:
      return Envelope()
    return Envelope(**{name: parse_number(element.get(name), UNSET) for name in ENVELOPE_ATTRIBUTES})

  def _int(self, element, attribute: str, default: int) -> int:
    text = element.get(attribute)
    if text is None:
      return default
    try:
      return int(text)
    except ValueError:
      try:
        return int(round(float(text)))
      except ValueError:
        self.notifier.warn(f"Attribute '{attribute}' of <{element.tag}> is not a number: {text!r}")
        return default

  def _enum(self, enum_class, text, default):
    if text is None:
      return default
    try:
      return enum_class(text)
    except ValueError:
      self.notifier.warn(f"Unknown {enum_class.__name__} '{text}', using '{default.value}'")
      return default

  ''' Writing '''
  def create(self, instrument: Instrument, sample_folder: str = '', file_names: dict = None) -> str:
    '''
    Creates the metadata text of one instrument. `file_names` maps the sample data to the file
    name stored in the sample folder, unique names are created from the sample names otherwise.
    '''
    tags = self.tags
    samples = instrument.sample_data()
    names = dict(zip(samples, create_unique_filenames([sample.name for sample in samples], '.wav')))
    names.update(file_names or {})

    root = xml.Element(tags.root_container)
    program = xml.SubElement(root, tags.program, {
      'name': instrument.name,
      'creator': instrument.metadata.creator,
      'category': instrument.metadata.category,
      'description': instrument.metadata.description,
      'keywords': ', '.join(instrument.metadata.keywords)
    })

    indices = {}
    samples_element = xml.SubElement(program, tags.samples)
    for index, sample in enumerate(samples):
      indices[id(sample)] = index
      file_name = names[sample]
      xml.SubElement(samples_element, tags.sample, {
        'index': str(index),
        'file': f"{sample_folder}/{file_name}" if sample_folder else file_name,
        'offset': str(sample.offset),
        'length': str(sample.length)
      })

    groups_element = xml.SubElement(program, tags.groups)
    for group in instrument.non_empty_groups():
      group_element = xml.SubElement(groups_element, tags.group, {'name': group.name, 'trigger': group.trigger.value})
      for zone in group.zones:
        self.create_zone(group_element, zone, indices.get(id(zone.sample), -1))

    xml.indent(root, space='  ')
    return XML_DECLARATION + xml.tostring(root, encoding='unicode') + '\n'

  def create_zone(self, parent, zone: Zone, sample_index: int):
    tags = self.tags
    element = xml.SubElement(parent, tags.zone, {
      'sample': str(sample_index),
      'name': zone.name,
      'rootKey': str(zone.key_root),
      'lowKey': str(zone.key_low),
      'highKey': str(zone.key_high),
      'lowVelocity': str(zone.velocity_low),
      'highVelocity': str(zone.velocity_high),
      'fadeLowKey': str(zone.note_crossfade_low),
      'fadeHighKey': str(zone.note_crossfade_high),
      'fadeLowVelocity': str(zone.velocity_crossfade_low),
      'fadeHighVelocity': str(zone.velocity_crossfade_high),
      'reverse': 'true' if zone.reversed else 'false',
      'playLogic': zone.play_logic.value,
      'sequence': str(zone.sequence_position),
      'trigger': zone.trigger.value,
      'tune': format_number(zone.tune),
      'keyTracking': format_number(zone.key_tracking),
      'pan': format_number(tags.denormalize_panning(zone.panorama)),
      'volume': format_number(zone.gain),
      'start': str(zone.start),
      'stop': str(zone.stop)
    })

    # Only one loop per zone can be stored
    if zone.loops:
      loop = zone.loops[0]
      xml.SubElement(element, tags.loop, {
        'mode': loop.type.value,
        'start': str(loop.start),
        'end': str(loop.end),
        'crossfade': format_number(loop.crossfade)
      })

    if zone.filter is not None:
      xml.SubElement(element, tags.filter, {
        'type': zone.filter.type.value,
        'poles': str(zone.filter.clamped_poles),
        'cutoff': format_number(zone.filter.cutoff),
        'resonance': format_number(zone.filter.resonance)
      })

    modulators = xml.SubElement(element, tags.modulators)
    self.create_modulator(modulators, zone.amplitude_modulator, tags.volume_value)
    self.create_modulator(modulators, zone.pitch_modulator, tags.pitch_value)
    if zone.filter is not None:
      self.create_modulator(modulators, zone.filter.cutoff_modulator, tags.cutoff_value)

    if zone.bend_up or zone.bend_down:
      bend = xml.SubElement(modulators, tags.modulator, {tags.source_attribute: tags.pitch_bend_source})
      self.create_value(bend, tags.target_param, tags.pitch_value)
      self.create_value(bend, tags.intensity_param, str(zone.bend_up))
      self.create_value(bend, tags.intensity_low_param, str(zone.bend_down))

  def create_modulator(self, parent, modulator: Modulator, target: str):
    element = xml.SubElement(parent, self.tags.modulator, {self.tags.source_attribute: self.tags.envelope_source})

    if modulator.is_active():
      xml.SubElement(element, self.tags.envelope, {
        name: format_number(value) for name, value in modulator.source.values().items() if Envelope.is_set(value)
      })

    self.create_value(element, self.tags.target_param, target)
    self.create_value(element, self.tags.intensity_param, format_number(modulator.depth))

  def create_value(self, parent, name: str, value: str):
    xml.SubElement(parent, self.tags.value, {self.tags.value_name_attribute: name, self.tags.value_value_attribute: value})

if __name__ == '__main__':
  pass
