import os
import threading

import pytest
import yaml

from nkibank.Enums import MetadataState, PlayLogic
from nkibank.Errors import AudioDecodeError
from nkibank.model.AudioMetadata import AudioMetadata
from nkibank.model.Envelope import UNSET, Envelope, Filter, Modulator
from nkibank.model.Instrument import Group, Instrument
from nkibank.model.SampleData import FileSampleData, MemorySampleData, SampleData
from nkibank.model.Zone import Zone
from nkibank.YAMLSerializer import dump_instrument_dict, load_instrument_dict


class CountingSampleData(SampleData):
  def __init__(self, fail: bool = False):
    super().__init__('counting')
    self.fail = fail
    self.calls = 0

  def _create_audio_metadata(self):
    self.calls += 1
    if self.fail:
      raise AudioDecodeError("broken payload")
    return AudioMetadata(1, 16, 44100, 10)


class TestZone:
  def test_single_key(self):
    assert Zone(key_root=60, key_low=60, key_high=60).has_single_key()
    assert not Zone(key_root=60, key_low=55, key_high=65).has_single_key()

  def test_crossfaded_ranges_stay_in_midi_range(self):
    zone = Zone(key_low=2, key_high=125, note_crossfade_low=5, note_crossfade_high=5,
                velocity_low=1, velocity_high=126, velocity_crossfade_low=3, velocity_crossfade_high=3)
    assert zone.crossfaded_key_range() == (0, 127)
    assert zone.crossfaded_velocity_range() == (0, 127)

  def test_validate(self):
    assert Zone().validate() == []
    problems = Zone(key_root=70, key_low=0, key_high=60, velocity_low=100, velocity_high=10).validate()
    assert len(problems) == 2

  def test_default_modulators(self):
    zone = Zone()
    assert zone.amplitude_modulator.is_active()
    assert not zone.pitch_modulator.is_active()
    assert Filter().cutoff_modulator.depth == 0


class TestEnvelope:
  def test_unset_fields_are_not_serialized(self):
    envelope = Envelope(attack=0.5, sustain=0.0)
    assert envelope.to_yaml() == {'attack': 0.5, 'sustain': 0.0}
    assert Envelope.from_yaml({'attack': 0.5}).release == UNSET

  def test_inactive_modulator_has_no_envelope_data(self):
    assert Modulator(0.0, Envelope(attack=1.0)).to_yaml() == {'depth': 0.0}


class TestInstrument:
  def test_round_robin_queries(self):
    group = Group('rr')
    group.add_zone(Zone(play_logic=PlayLogic.ROUND_ROBIN))
    group.add_zone(Zone())
    group.add_zone(Zone(play_logic=PlayLogic.ROUND_ROBIN))
    assert group.has_round_robin()
    assert group.round_robin_count() == 2
    assert not Group('plain', zones=[Zone()]).has_round_robin()

  def test_sample_data_is_unique_in_first_use_order(self):
    first  = MemorySampleData('first', AudioMetadata(1, 16, 44100), b'\x00\x00')
    second = MemorySampleData('second', AudioMetadata(1, 16, 44100), b'\x00\x00')
    instrument = Instrument('x')
    instrument.add_group(Group('a', zones=[Zone(sample=second), Zone(sample=first)]))
    instrument.add_group(Group('b', zones=[Zone(sample=second)]))
    assert instrument.sample_data() == [second, first]

  def test_remove_sample(self):
    kept   = MemorySampleData('kept', AudioMetadata(1, 16, 44100), b'\x00\x00')
    broken = MemorySampleData('broken', AudioMetadata(1, 16, 44100), b'\x00')
    instrument = Instrument('x')
    instrument.add_group(Group('a', zones=[Zone('one', sample=broken), Zone('two', sample=kept)]))
    instrument.add_group(Group('b', zones=[Zone('three', sample=broken)]))

    removed = instrument.remove_sample(broken)

    assert [zone.name for zone in removed] == ['one', 'three']
    assert [zone.name for zone in instrument.zones()] == ['two']
    assert instrument.sample_data() == [kept]
    assert [group.name for group in instrument.non_empty_groups()] == ['a']

  def test_empty_groups(self):
    instrument = Instrument('x')
    instrument.add_group(Group('empty'))
    full = instrument.add_group(Group('full', zones=[Zone()]))
    assert instrument.non_empty_groups() == [full]

  def test_safe_name(self):
    assert Instrument('Bass / Synth?').safe_name == 'Bass _ Synth_'

  def test_yaml_round_trip(self, tmp_path, instrument, sample_files):
    file_names = {sample: f"Test Piano Samples/{name}.wav" for name, (sample, _) in sample_files.items()}
    text = dump_instrument_dict(instrument.to_yaml(file_names))

    assert 'keys: [55, 60, 65]' in text

    loaded = Instrument.from_yaml(load_instrument_dict(text), str(tmp_path))
    assert loaded == instrument
    assert loaded.groups[0].zones[0].sample is loaded.groups[1].zones[0].sample
    assert loaded.groups[0].zones[0].sample.path == sample_files['a'][0].path

  def test_yaml_without_instrument(self):
    from nkibank.Errors import CorruptedContainerError
    with pytest.raises(CorruptedContainerError):
      load_instrument_dict(yaml.dump({'bank': {}}))


class TestSampleData:
  def test_metadata_is_computed_once(self):
    sample = CountingSampleData()
    threads = [threading.Thread(target=sample.get_audio_metadata) for _ in range(8)]
    for thread in threads:
      thread.start()
    for thread in threads:
      thread.join()

    assert sample.calls == 1
    assert sample.state is MetadataState.RESOLVED
    assert sample.get_audio_metadata().sample_rate == 44100

  def test_failure_is_memoized(self):
    sample = CountingSampleData(fail=True)
    for _ in range(3):
      with pytest.raises(AudioDecodeError):
        sample.get_audio_metadata()

    assert sample.calls == 1
    assert sample.state is MetadataState.FAILED

  def test_missing_file(self, tmp_path):
    sample = FileSampleData(tmp_path / 'missing.wav')
    assert sample.name == 'missing'
    with pytest.raises(AudioDecodeError):
      sample.get_audio_metadata()

  def test_file_length_is_set_with_the_metadata(self, sample_files):
    sample = FileSampleData(sample_files['a'][0].path)
    sample.read_pcm()
    assert sample.length == 0

    sample.get_audio_metadata()
    assert sample.length == os.path.getsize(sample.path)

  def test_wav_file(self, sample_files):
    sample, pcm = sample_files['b']
    metadata = sample.get_audio_metadata()
    assert (metadata.channels, metadata.bits, metadata.num_samples) == (2, 16, 700)
    assert sample.payload_size == len(pcm)
    assert sample.read_pcm()[1] == pcm

  def test_memory_sample_with_partial_frame(self):
    sample = MemorySampleData('odd', AudioMetadata(2, 16, 44100), b'\x00' * 6)
    with pytest.raises(AudioDecodeError):
      sample.get_audio_metadata()
