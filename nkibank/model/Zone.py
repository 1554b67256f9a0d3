'''
### Zone Module

This module defines the `Zone` and `Loop` classes of the canonical instrument model.

Classes:
    `Loop`:
        A sample loop (type, start and end frame, crossfade as a fraction of the loop length).

    `Zone`:
        Maps one sample to a key and velocity range together with all playback parameters.

Functionality:
    - Answer the derived questions the writers need, e.g. whether the key range collapses to a
      single key ('has_single_key') or the crossfaded ranges ('crossfaded_key_range').
    - Report out-of-range keys and velocities ('validate').
    - Convert into and from the dictionaries used by the YAML format ('to_yaml', 'from_yaml').

Intended Usage:
    Zones are created by a container reader and read by a writer. The sample data of a zone can
    be shared with other zones and is never modified through the zone.
'''
from dataclasses import dataclass, field
from typing import Optional

from .Envelope import Envelope, Modulator, Filter
from .SampleData import SampleData
from ..Enums import LoopType, PlayLogic, TriggerType
from ..YAMLSerializer import FlowStyleList

MIN_VALUE = 0
MAX_VALUE = 127

@dataclass
class Loop:
  type: LoopType = LoopType.FORWARD
  start: int = 0
  end: int = 0
  crossfade: float = 0.0

  @property
  def length(self) -> int:
    return self.end - self.start

  def to_yaml(self) -> dict:
    return {"type": self.type.value, "range": FlowStyleList([self.start, self.end]), "crossfade": self.crossfade}

  @classmethod
  def from_yaml(cls, loop_dict: dict):
    start, end = loop_dict.get('range', [0, 0])
    return cls(LoopType(loop_dict.get('type', LoopType.FORWARD.value)), int(start), int(end), float(loop_dict.get('crossfade', 0.0)))

@dataclass
class Zone:
  name: str = ''
  sample: Optional[SampleData] = field(default=None, compare=False, repr=False)

  key_root: int = 60
  key_low: int = 0
  key_high: int = 127
  velocity_low: int = 0
  velocity_high: int = 127

  note_crossfade_low: int = 0
  note_crossfade_high: int = 0
  velocity_crossfade_low: int = 0
  velocity_crossfade_high: int = 0

  reversed: bool = False
  play_logic: PlayLogic = PlayLogic.ALWAYS
  sequence_position: int = 0
  trigger: TriggerType = TriggerType.ATTACK

  tune: float = 0.0           # cents
  key_tracking: float = 1.0   # 1.0 = 100%
  panorama: float = 0.0       # -1.0 .. 1.0
  gain: float = 0.0           # dB
  bend_up: int = 0            # semitones
  bend_down: int = 0

  start: int = -1
  stop: int = -1

  filter: Optional[Filter] = None
  amplitude_modulator: Modulator = field(default_factory=lambda: Modulator(depth=1.0))
  pitch_modulator: Modulator = field(default_factory=Modulator)
  loops: list[Loop] = field(default_factory=list)

  @property
  def sample_name(self) -> str:
    return self.sample.name if self.sample is not None else self.name

  def has_single_key(self) -> bool:
    return self.key_low == self.key_root == self.key_high

  def crossfaded_key_range(self) -> tuple[int, int]:
    return max(MIN_VALUE, self.key_low - self.note_crossfade_low), min(MAX_VALUE, self.key_high + self.note_crossfade_high)

  def crossfaded_velocity_range(self) -> tuple[int, int]:
    return max(MIN_VALUE, self.velocity_low - self.velocity_crossfade_low), min(MAX_VALUE, self.velocity_high + self.velocity_crossfade_high)

  def validate(self) -> list[str]:
    problems = []

    for attribute in ('key_root', 'key_low', 'key_high', 'velocity_low', 'velocity_high'):
      value = getattr(self, attribute)
      if not MIN_VALUE <= value <= MAX_VALUE:
        problems.append(f"{attribute} {value} is outside of {MIN_VALUE}-{MAX_VALUE}")

    if not self.key_low <= self.key_root <= self.key_high:
      problems.append(f"root key {self.key_root} is outside of the key range {self.key_low}-{self.key_high}")
    if self.velocity_low > self.velocity_high:
      problems.append(f"velocity range {self.velocity_low}-{self.velocity_high} is inverted")

    return problems

  def to_yaml(self, file_name: str) -> dict:
    zone_dict = {
      "name": self.name,
      "sample": file_name,
      "keys": FlowStyleList([self.key_low, self.key_root, self.key_high]),
      "velocities": FlowStyleList([self.velocity_low, self.velocity_high]),
      "key crossfades": FlowStyleList([self.note_crossfade_low, self.note_crossfade_high]),
      "velocity crossfades": FlowStyleList([self.velocity_crossfade_low, self.velocity_crossfade_high]),
      "reversed": self.reversed,
      "play logic": self.play_logic.value,
      "sequence position": self.sequence_position,
      "trigger": self.trigger.value,
      "tune": self.tune,
      "key tracking": self.key_tracking,
      "panorama": self.panorama,
      "gain": self.gain,
      "pitch bend": FlowStyleList([self.bend_up, self.bend_down]),
      "start": self.start,
      "stop": self.stop,
      "amplitude modulator": self.amplitude_modulator.to_yaml(),
      "pitch modulator": self.pitch_modulator.to_yaml(),
      "loops": [loop.to_yaml() for loop in self.loops]
    }

    if self.filter is not None:
      zone_dict["filter"] = self.filter.to_yaml()

    return zone_dict

  @classmethod
  def from_yaml(cls, zone_dict: dict, sample: SampleData = None):
    self = cls(name=zone_dict.get('name', ''), sample=sample)

    self.key_low, self.key_root, self.key_high = (int(v) for v in zone_dict.get('keys', [0, 60, 127]))
    self.velocity_low, self.velocity_high = (int(v) for v in zone_dict.get('velocities', [0, 127]))
    self.note_crossfade_low, self.note_crossfade_high = (int(v) for v in zone_dict.get('key crossfades', [0, 0]))
    self.velocity_crossfade_low, self.velocity_crossfade_high = (int(v) for v in zone_dict.get('velocity crossfades', [0, 0]))

    self.reversed          = bool(zone_dict.get('reversed', False))
    self.play_logic        = PlayLogic(zone_dict.get('play logic', PlayLogic.ALWAYS.value))
    self.sequence_position = int(zone_dict.get('sequence position', 0))
    self.trigger           = TriggerType(zone_dict.get('trigger', TriggerType.ATTACK.value))

    self.tune         = float(zone_dict.get('tune', 0.0))
    self.key_tracking = float(zone_dict.get('key tracking', 1.0))
    self.panorama     = float(zone_dict.get('panorama', 0.0))
    self.gain         = float(zone_dict.get('gain', 0.0))
    self.bend_up, self.bend_down = (int(v) for v in zone_dict.get('pitch bend', [0, 0]))

    self.start = int(zone_dict.get('start', -1))
    self.stop  = int(zone_dict.get('stop', -1))

    self.amplitude_modulator = Modulator.from_yaml(zone_dict.get('amplitude modulator'), default_depth=1.0)
    self.pitch_modulator     = Modulator.from_yaml(zone_dict.get('pitch modulator'))
    self.loops = [Loop.from_yaml(loop) for loop in zone_dict.get('loops', [])]

    if 'filter' in zone_dict:
      self.filter = Filter.from_yaml(zone_dict['filter'])

    return self

if __name__ == '__main__':
  pass
