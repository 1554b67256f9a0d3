'''
### YAMLSerializer Module

This module configures PyYAML for the YAML representation of the canonical instrument model.

Classes:
    `FlowStyleList`:
        A list which is dumped in flow style, e.g. `keys: [0, 60, 127]`.

Functions:
    `dump_instrument_dict`:
        Dumps a dictionary produced by `Instrument.to_yaml` without reordering its keys.

    `load_instrument_dict`:
        Loads a YAML document and checks that it describes an instrument.

Dependencies:
    `yaml`:
        PyYAML, used for reading and writing YAML files.
'''

import yaml

from .Errors import CorruptedContainerError


class FlowStyleList(list):
  pass


def represent_flow_style_list(dumper, data):
  return dumper.represent_sequence('tag:yaml.org,2002:seq', data, flow_style=True)


yaml.add_representer(FlowStyleList, represent_flow_style_list)


def dump_instrument_dict(instrument_dict: dict, stream=None):
  return yaml.dump(instrument_dict, stream, sort_keys=False, allow_unicode=True)


def load_instrument_dict(text) -> dict:
  try:
    data = yaml.safe_load(text)
  except yaml.YAMLError as e:
    raise CorruptedContainerError(f"Malformed YAML document: {e}") from e

  if not isinstance(data, dict) or 'instrument' not in data:
    raise CorruptedContainerError("YAML document does not describe an instrument")

  return data


if __name__ == '__main__':
  pass
