'''
### Instrument Module

This module defines the root of the canonical instrument model.

Classes:
    `Metadata`:
        Creator, category, description and keywords of an instrument.

    `Group`:
        An ordered list of zones sharing a name and a trigger.

    `Instrument`:
        The instrument name, its metadata and its ordered groups.

Functionality:
    - Build the model group by group and zone by zone ('add_group', 'add_zone').
    - Answer the questions of the writers, e.g. round-robin use ('has_round_robin') or the
      unique samples in first-use order ('sample_data').
    - Drop the zones of a sample which turned out to be unreadable ('remove_sample').
    - Convert into and from the dictionaries used by the YAML format ('to_yaml', 'from_yaml').

Intended Usage:
    One reader builds an instrument, one writer consumes it. Groups without zones are kept in
    the model but skipped by every writer ('non_empty_groups').
'''
import os
from dataclasses import dataclass, field

from .SampleData import SampleData, FileSampleData
from .Zone import Zone
from ..Enums import PlayLogic, TriggerType
from ..Helpers import create_safe_filename

@dataclass
class Metadata:
  creator: str = ''
  category: str = ''
  description: str = ''
  keywords: list[str] = field(default_factory=list)

  def to_yaml(self) -> dict:
    return {
      "creator": self.creator,
      "category": self.category,
      "description": self.description,
      "keywords": list(self.keywords)
    }

  @classmethod
  def from_yaml(cls, metadata_dict: dict):
    metadata_dict = metadata_dict or {}
    return cls(
      creator=str(metadata_dict.get('creator', '')),
      category=str(metadata_dict.get('category', '')),
      description=str(metadata_dict.get('description', '')),
      keywords=[str(keyword) for keyword in metadata_dict.get('keywords', [])]
    )

@dataclass
class Group:
  name: str = ''
  trigger: TriggerType = TriggerType.ATTACK
  zones: list[Zone] = field(default_factory=list)

  def add_zone(self, zone: Zone) -> Zone:
    self.zones.append(zone)
    return zone

  def has_round_robin(self) -> bool:
    return any(zone.play_logic is PlayLogic.ROUND_ROBIN for zone in self.zones)

  def round_robin_count(self) -> int:
    ''' Number of zones taking part in the round-robin sequence of this group '''
    return sum(1 for zone in self.zones if zone.play_logic is PlayLogic.ROUND_ROBIN)

  def to_yaml(self, file_names: dict) -> dict:
    return {
      "name": self.name,
      "trigger": self.trigger.value,
      "zones": [zone.to_yaml(file_names.get(zone.sample, zone.sample_name)) for zone in self.zones]
    }

  @classmethod
  def from_yaml(cls, group_dict: dict, sample_lookup):
    self = cls(group_dict.get('name', ''), TriggerType(group_dict.get('trigger', TriggerType.ATTACK.value)))
    for zone_dict in group_dict.get('zones', []):
      self.add_zone(Zone.from_yaml(zone_dict, sample_lookup(zone_dict.get('sample', ''))))
    return self

@dataclass
class Instrument:
  name: str = ''
  metadata: Metadata = field(default_factory=Metadata)
  groups: list[Group] = field(default_factory=list)

  def add_group(self, group: Group) -> Group:
    self.groups.append(group)
    return group

  def non_empty_groups(self) -> list[Group]:
    return [group for group in self.groups if group.zones]

  def zones(self) -> list[Zone]:
    return [zone for group in self.groups for zone in group.zones]

  def sample_data(self) -> list[SampleData]:
    ''' Unique sample data of all zones in the order of first use '''
    samples = {}
    for zone in self.zones():
      if zone.sample is not None and id(zone.sample) not in samples:
        samples[id(zone.sample)] = zone.sample
    return list(samples.values())

  def remove_sample(self, sample: SampleData) -> list[Zone]:
    ''' Removes every zone playing the sample, returns the removed zones '''
    removed = []
    for group in self.groups:
      removed += [zone for zone in group.zones if zone.sample is sample]
      group.zones = [zone for zone in group.zones if zone.sample is not sample]
    return removed

  @property
  def safe_name(self) -> str:
    return create_safe_filename(self.name)

  def to_yaml(self, file_names: dict = None) -> dict:
    ''' `file_names` maps sample data to the path stored for it, defaults to the sample name '''
    file_names = file_names or {}
    return {
      "instrument": {
        "name": self.name,
        "metadata": self.metadata.to_yaml(),
        "groups": [group.to_yaml(file_names) for group in self.non_empty_groups()]
      }
    }

  @classmethod
  def from_yaml(cls, yaml_dict: dict, base_folder: str = ''):
    ''' Sample paths are resolved against `base_folder`, zones with the same path share one sample '''
    instrument_dict = yaml_dict.get('instrument', yaml_dict)
    samples = {}

    def sample_lookup(file_name: str):
      if not file_name:
        return None
      path = os.path.normpath(os.path.join(base_folder, file_name))
      if path not in samples:
        samples[path] = FileSampleData(path)
      return samples[path]

    self = cls(str(instrument_dict.get('name', '')), Metadata.from_yaml(instrument_dict.get('metadata')))
    for group_dict in instrument_dict.get('groups', []):
      self.add_group(Group.from_yaml(group_dict, sample_lookup))

    return self

if __name__ == '__main__':
  pass
