'''
### AudioMetadata Module

This module defines the `AudioMetadata` class, which describes the format of a sample payload.

Classes:
    `AudioMetadata`:
        Channel count, bit depth, sample rate and number of sample frames.

Intended Usage:
    Produced by the codecs and cached by the sample data classes of the model.
'''
from dataclasses import dataclass


@dataclass(frozen=True)
class AudioMetadata:
  channels: int
  bits: int
  sample_rate: int
  num_samples: int = 0

  @property
  def frame_size(self) -> int:
    return self.channels * self.bits // 8

  @property
  def payload_size(self) -> int:
    ''' Size of the raw sample data without any file headers '''
    return self.num_samples * self.frame_size

if __name__ == '__main__':
  pass
