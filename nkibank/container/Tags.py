'''
### Tags Module

This module defines the XML vocabularies of the two Kontakt container generations. Both share one
document structure; only the element names, the name/value pair element and the stored panning
range differ.

Classes:
    `TagSet`:
        The capability set every generation provides, together with the panning conversion pair.

    `NiSSTags`:
        Kontakt 1 (NiSS): lowercase element names, `<value name=".." value=".."/>` pairs and
        panning stored from 0 to 1 with the centre at 0.5.

    `K2Tags`:
        Kontakt 2: CamelCase element names, `<V n=".." v=".."/>` pairs and panning stored from
        -100 to 100.

Intended Usage:
    A container instance selects its tag set, the `MetadataHandler` reads every element and
    attribute name from it. Adding a generation means adding one subclass.
'''

class TagSet:
  ''' Element and attribute names of one container generation '''
  # Elements
  root_container = ''
  program        = ''
  samples        = ''
  sample         = ''
  groups         = ''
  group          = ''
  zone           = ''
  loop           = ''
  filter         = ''
  modulators     = ''
  modulator      = ''
  envelope       = ''

  # Name/value pairs
  value                 = ''
  value_name_attribute  = ''
  value_value_attribute = ''

  # Modulation routing
  source_attribute    = 'source'
  target_param        = 'target'
  intensity_param     = 'intensity'
  intensity_low_param = 'intensityLow'
  volume_value        = 'volume'
  pitch_value         = 'pitch'
  cutoff_value        = 'cutoff'
  envelope_source     = 'envelope'
  pitch_bend_source   = 'pitchbend'

  @staticmethod
  def normalize_panning(value: float) -> float:
    ''' Converts the stored panning into the model range -1..1 '''
    raise NotImplementedError

  @staticmethod
  def denormalize_panning(value: float) -> float:
    ''' Converts the model panning -1..1 into the stored range '''
    raise NotImplementedError

class NiSSTags(TagSet):
  root_container = 'programs'
  program        = 'program'
  samples        = 'samples'
  sample         = 'sample'
  groups         = 'groups'
  group          = 'group'
  zone           = 'zone'
  loop           = 'loop'
  filter         = 'filter'
  modulators     = 'modulators'
  modulator      = 'modulator'
  envelope       = 'envelope'

  value                 = 'value'
  value_name_attribute  = 'name'
  value_value_attribute = 'value'

  @staticmethod
  def normalize_panning(value: float) -> float:
    return (value - 0.5) / 0.5

  @staticmethod
  def denormalize_panning(value: float) -> float:
    return 0.5 + value * 0.5

class K2Tags(TagSet):
  root_container = 'Programs'
  program        = 'Program'
  samples        = 'Samples'
  sample         = 'Sample'
  groups         = 'Groups'
  group          = 'Group'
  zone           = 'Zone'
  loop           = 'Loop'
  filter         = 'Filter'
  modulators     = 'Modulators'
  modulator      = 'Modulator'
  envelope       = 'Envelope'

  value                 = 'V'
  value_name_attribute  = 'n'
  value_value_attribute = 'v'

  @staticmethod
  def normalize_panning(value: float) -> float:
    return value / 100.0

  @staticmethod
  def denormalize_panning(value: float) -> float:
    return value * 100.0

if __name__ == '__main__':
  pass
