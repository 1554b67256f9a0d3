'''
Shared fixtures: deterministic PCM data, WAV files on disk and a fully populated instrument.
'''

import os

import pytest

from nkibank.codec import Wave
from nkibank.Enums import FilterType, LoopType, PlayLogic, TriggerType
from nkibank.Errors import Notifier
from nkibank.model.AudioMetadata import AudioMetadata
from nkibank.model.Envelope import Envelope, Filter, Modulator
from nkibank.model.Instrument import Group, Instrument, Metadata
from nkibank.model.SampleData import FileSampleData
from nkibank.model.Zone import Loop, Zone

SAMPLE_FOLDER = 'Test Piano Samples'


def make_channels(frames: int, channels: int = 1, bits: int = 16, step: int = 37) -> list[list[int]]:
  limit = min(1 << (bits - 2), 20000)
  return [
    [((i * (step + channel)) % (2 * limit)) - limit for i in range(frames)]
    for channel in range(channels)
  ]


def interleave(channels: list[list[int]], bits: int) -> bytes:
  width = bits // 8
  pcm = bytearray()
  for frame in zip(*channels):
    for value in frame:
      pcm += value.to_bytes(width, 'little', signed=True)
  return bytes(pcm)


def write_wav(path, frames: int = 1000, channels: int = 1, bits: int = 16, sample_rate: int = 44100, step: int = 37) -> bytes:
  ''' Writes a WAV file with deterministic content and returns its PCM data '''
  pcm = interleave(make_channels(frames, channels, bits, step), bits)
  os.makedirs(os.path.dirname(os.fspath(path)) or '.', exist_ok=True)
  Wave.write_wave(path, AudioMetadata(channels, bits, sample_rate, frames), pcm)
  return pcm


def build_instrument(sample_a, sample_b) -> Instrument:
  ''' An instrument using every field which survives the container formats '''
  instrument = Instrument('Test Piano', Metadata('Someone', 'Piano', 'A test instrument', ['acoustic', 'test']))

  sustain = instrument.add_group(Group('Sustain', TriggerType.ATTACK))
  sustain.add_zone(Zone(
    name='C4',
    sample=sample_a,
    key_root=60, key_low=55, key_high=65,
    velocity_low=10, velocity_high=100,
    note_crossfade_low=2, note_crossfade_high=3,
    velocity_crossfade_low=4, velocity_crossfade_high=5,
    reversed=True,
    play_logic=PlayLogic.ROUND_ROBIN,
    sequence_position=1,
    trigger=TriggerType.FIRST,
    tune=-12.5,
    key_tracking=0.5,
    panorama=0.25,
    gain=-3.0,
    bend_up=2, bend_down=12,
    start=10, stop=900,
    filter=Filter(FilterType.HIGH_PASS, 4, 1234.5, 12.0, Modulator(0.75, Envelope(0.0, 0.01, 0.02, 0.5, 1.5, 0.0, 0.8))),
    amplitude_modulator=Modulator(1.0, Envelope(attack=0.005, decay=1.0, sustain=0.5, release=0.3)),
    pitch_modulator=Modulator(12.0, Envelope(attack=0.1, sustain=0.0)),
    loops=[Loop(LoopType.ALTERNATING, 100, 800, 0.25)]
  ))
  sustain.add_zone(Zone(
    name='D4',
    sample=sample_b,
    key_root=62, key_low=62, key_high=62,
    play_logic=PlayLogic.ROUND_ROBIN,
    sequence_position=2
  ))

  release = instrument.add_group(Group('Release', TriggerType.RELEASE))
  release.add_zone(Zone(name='C4 release', sample=sample_a))

  return instrument


@pytest.fixture
def notifier():
  return Notifier('test')


@pytest.fixture
def sample_files(tmp_path):
  ''' Two WAV files in the sample folder next to where the containers are written '''
  folder = tmp_path / SAMPLE_FOLDER
  pcm_a = write_wav(folder / 'a.wav', frames=1000, channels=1, bits=16)
  pcm_b = write_wav(folder / 'b.wav', frames=700, channels=2, bits=16, step=11)
  return {
    'a': (FileSampleData(folder / 'a.wav'), pcm_a),
    'b': (FileSampleData(folder / 'b.wav'), pcm_b),
  }


@pytest.fixture
def instrument(sample_files):
  return build_instrument(sample_files['a'][0], sample_files['b'][0])


@pytest.fixture
def file_names(sample_files):
  return {sample: os.path.basename(sample.path) for sample, _ in sample_files.values()}
