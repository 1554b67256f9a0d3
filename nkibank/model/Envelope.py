'''
### Envelope Module

This module defines the `Envelope`, `Modulator` and `Filter` classes of the canonical instrument model.

Classes:
    `Envelope`:
        A DAHDSR envelope. Times are in seconds, start and sustain levels are fractions (0..1).
        A negative value means the field is not set and the target format uses its own default.

    `Modulator`:
        A modulation depth together with its source envelope. A modulator with a depth of zero
        or less is inactive and contributes no envelope data to any output.

    `Filter`:
        Filter type, pole count, cutoff and resonance plus the cutoff envelope modulator.

Functionality:
    - Convert into and from the dictionaries used by the YAML format ('to_yaml', 'from_yaml').
'''
from dataclasses import dataclass, field, fields

from ..Enums import FilterType
from ..Helpers import clamp

UNSET = -1.0

@dataclass
class Envelope:
  delay: float   = UNSET
  attack: float  = UNSET
  hold: float    = UNSET
  decay: float   = UNSET
  release: float = UNSET
  start: float   = UNSET
  sustain: float = UNSET

  @staticmethod
  def is_set(value: float) -> bool:
    return value >= 0

  def values(self) -> dict:
    return {f.name: getattr(self, f.name) for f in fields(self)}

  def is_empty(self) -> bool:
    return not any(self.is_set(value) for value in self.values().values())

  def to_yaml(self) -> dict:
    return {name: value for name, value in self.values().items() if self.is_set(value)}

  @classmethod
  def from_yaml(cls, envelope_dict: dict):
    envelope_dict = envelope_dict or {}
    return cls(**{f.name: float(envelope_dict.get(f.name, UNSET)) for f in fields(cls)})

@dataclass
class Modulator:
  depth: float = 0.0
  source: Envelope = field(default_factory=Envelope)

  def is_active(self) -> bool:
    return self.depth > 0

  def to_yaml(self) -> dict:
    if not self.is_active():
      return {"depth": self.depth}
    return {"depth": self.depth, "envelope": self.source.to_yaml()}

  @classmethod
  def from_yaml(cls, modulator_dict: dict, default_depth: float = 0.0):
    modulator_dict = modulator_dict or {}
    return cls(
      depth=float(modulator_dict.get('depth', default_depth)),
      source=Envelope.from_yaml(modulator_dict.get('envelope'))
    )

@dataclass
class Filter:
  type: FilterType = FilterType.LOW_PASS
  poles: int = 2
  cutoff: float = 20000.0
  resonance: float = 0.0
  cutoff_modulator: Modulator = field(default_factory=Modulator)

  @property
  def clamped_poles(self) -> int:
    return clamp(self.poles, 1, 4)

  def to_yaml(self) -> dict:
    return {
      "type": self.type.value,
      "poles": self.poles,
      "cutoff": self.cutoff,
      "resonance": self.resonance,
      "cutoff modulator": self.cutoff_modulator.to_yaml()
    }

  @classmethod
  def from_yaml(cls, filter_dict: dict):
    return cls(
      type=FilterType(filter_dict.get('type', FilterType.LOW_PASS.value)),
      poles=int(filter_dict.get('poles', 2)),
      cutoff=float(filter_dict.get('cutoff', 20000.0)),
      resonance=float(filter_dict.get('resonance', 0.0)),
      cutoff_modulator=Modulator.from_yaml(filter_dict.get('cutoff modulator'))
    )

if __name__ == '__main__':
  pass
