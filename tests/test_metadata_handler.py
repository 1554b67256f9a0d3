import math
import random
import xml.etree.ElementTree as xml

import pytest

from nkibank.container.MetadataHandler import MetadataHandler, decode_text, find_value, parse_number
from nkibank.container.Tags import K2Tags, NiSSTags
from nkibank.Errors import CorruptedContainerError, MissingSampleError
from nkibank.model.AudioMetadata import AudioMetadata
from nkibank.model.Envelope import UNSET
from nkibank.model.Instrument import Group, Instrument
from nkibank.model.SampleData import MemorySampleData
from nkibank.model.Zone import Zone


def memory_lookup(file_reference: str):
  return MemorySampleData(file_reference, AudioMetadata(1, 16, 44100), b'\x00\x00' * 10)


def missing_lookup(file_reference: str):
  raise MissingSampleError(file_reference, [file_reference])


PROGRAM = '''
<program name="Single" creator="Me" keywords="a, b">
  <samples><sample index="0" file="Single Samples/x.wav" offset="0" length="20"/></samples>
  <groups>
    <group name="g" trigger="attack">
      <zone sample="0" name="z" rootKey="60" lowKey="60" highKey="60">
        <modulators>
          <modulator source="envelope">
            <envelope attack="0.25"/>
            <value name="target" value="volume"/>
            <value name="intensity" value="0.5"/>
          </modulator>
          <modulator source="envelope">
            <value name="intensity" value="3.0"/>
          </modulator>
          <modulator source="pitchbend">
            <value name="target" value="pitch"/>
            <value name="intensity" value="2"/>
          </modulator>
        </modulators>
      </zone>
    </group>
  </groups>
</program>
'''


class TestPanning:
  @pytest.mark.parametrize('tags', [NiSSTags, K2Tags])
  def test_normalize_is_inverse_of_denormalize(self, tags):
    generator = random.Random(1234)
    for _ in range(1000):
      value = generator.uniform(-1.0, 1.0)
      assert math.isclose(tags.normalize_panning(tags.denormalize_panning(value)), value, abs_tol=1e-12)

  def test_stored_ranges(self):
    assert NiSSTags.denormalize_panning(0.0) == 0.5
    assert NiSSTags.denormalize_panning(-1.0) == 0.0
    assert K2Tags.denormalize_panning(1.0) == 100.0


class TestValuePairs:
  def test_pairs_keep_their_order(self, notifier):
    element = xml.fromstring('<Modulator><V n="target" v="pitch"/><V n="intensity" v="x"/><V n="target" v="volume"/></Modulator>')
    pairs = MetadataHandler(K2Tags, notifier).read_value_pairs(element)
    assert pairs == [('target', 'pitch'), ('intensity', 'x'), ('target', 'volume')]
    assert find_value(pairs, 'target') == 'pitch'

  def test_absent_values(self):
    assert find_value([], 'target') is None
    assert parse_number(find_value([], 'intensity'), 0.0) == 0.0
    assert parse_number('not a number', 0.0) == 0.0

  def test_modulators_without_target_or_intensity(self, notifier):
    [instrument] = MetadataHandler(NiSSTags, notifier).parse(PROGRAM, memory_lookup)
    zone = instrument.groups[0].zones[0]

    assert zone.amplitude_modulator.depth == 0.5
    assert zone.amplitude_modulator.source.attack == 0.25
    assert zone.amplitude_modulator.source.release == UNSET
    assert zone.pitch_modulator.depth == 0.0
    assert (zone.bend_up, zone.bend_down) == (2, 0)


class TestParse:
  def test_single_program(self, notifier):
    [instrument] = MetadataHandler(NiSSTags, notifier).parse(PROGRAM, memory_lookup)
    assert instrument.name == 'Single'
    assert instrument.metadata.keywords == ['a', 'b']
    assert instrument.groups[0].zones[0].has_single_key()

  def test_root_container_with_programs(self, notifier):
    text = f"<programs>{PROGRAM}{PROGRAM.replace('Single', 'Second')}</programs>"
    instruments = MetadataHandler(NiSSTags, notifier).parse(text, memory_lookup)
    assert [instrument.name for instrument in instruments] == ['Single', 'Second']

  def test_empty_root_container(self, notifier):
    assert MetadataHandler(K2Tags, notifier).parse('<Programs/>', memory_lookup) == []

  def test_unexpected_top_level_element(self, notifier):
    with pytest.raises(CorruptedContainerError):
      MetadataHandler(NiSSTags, notifier).parse('<bank/>', memory_lookup)

  def test_malformed_xml(self, notifier):
    with pytest.raises(CorruptedContainerError):
      MetadataHandler(NiSSTags, notifier).parse('<programs><program>', memory_lookup)

  def test_missing_sample_drops_zone(self, notifier):
    [instrument] = MetadataHandler(NiSSTags, notifier).parse(PROGRAM, missing_lookup)
    assert instrument.groups[0].zones == []
    assert any("dropped" in message for _, message in notifier.warnings)

  def test_invalid_zone_is_kept_with_warning(self, notifier):
    text = PROGRAM.replace('rootKey="60" lowKey="60"', 'rootKey="50" lowKey="60"')
    [instrument] = MetadataHandler(NiSSTags, notifier).parse(text, memory_lookup)
    assert len(instrument.groups[0].zones) == 1
    assert notifier.warnings


class TestDecodeText:
  def test_byte_order_mark_is_removed(self, notifier):
    assert decode_text(b'\xef\xbb\xbf<programs/>', notifier) == '<programs/>'
    assert notifier.warnings == []

  def test_illegal_characters_are_replaced(self, notifier):
    text = decode_text(b'<program name="caf\xe9"/>', notifier)
    assert '\ufffd' in text
    assert notifier.warnings

  def test_parse_accepts_leading_bom_character(self, notifier):
    assert MetadataHandler(K2Tags, notifier).parse('\ufeff<Programs/>', memory_lookup) == []


class TestCreate:
  def test_unset_envelope_fields_are_omitted(self, notifier):
    sample = memory_lookup('s')
    instrument = Instrument('x')
    instrument.add_group(Group('g', zones=[Zone(name='z', sample=sample)]))
    instrument.add_group(Group('empty'))

    root = xml.fromstring(MetadataHandler(K2Tags, notifier).create(instrument, 'x Samples'))
    program = root.find('Program')

    assert len(program.find('Groups').findall('Group')) == 1
    assert program.find('Samples/Sample').get('file') == 'x Samples/s.wav'

    modulators = program.findall('Groups/Group/Zone/Modulators/Modulator')
    amplitude, pitch = modulators
    assert amplitude.find('Envelope').attrib == {}
    assert pitch.find('Envelope') is None

  def test_only_first_loop_and_clamped_poles(self, notifier, instrument):
    from nkibank.model.Zone import Loop
    zone = instrument.groups[0].zones[0]
    zone.loops.append(Loop(start=1, end=2))
    zone.filter.poles = 9

    root = xml.fromstring(MetadataHandler(NiSSTags, notifier).create(instrument))
    zone_element = root.find('program/groups/group/zone')
    assert len(zone_element.findall('loop')) == 1
    assert zone_element.find('filter').get('poles') == '4'
