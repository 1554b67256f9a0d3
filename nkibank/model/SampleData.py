'''
### SampleData Module

This module defines the sample payload classes which are referenced by the zones of an instrument.

Classes:
    `SampleData`:
        Base class. Holds the name and byte range of the payload and caches its audio metadata.

    `FileSampleData`:
        A WAV or NCW file on disk.

    `EmbeddedSampleData`:
        A WAV or NCW payload embedded in a monolith container.

    `MemorySampleData`:
        Interleaved little-endian PCM data which is already in memory.

Functionality:
    - Compute the audio metadata at most once per instance (`get_audio_metadata`). A failure is
      remembered and reported again on every later access without reading the payload again.
    - Read the payload as interleaved PCM (`read_pcm`) and store it as a WAV file (`write_wave`).

Dependencies:
    `threading`:
        The lock which guards the one-time metadata computation, a sample can be shared by
        several zones.

    `NCW` / `Wave`:
        The codecs for the two supported payload formats.

Intended Usage:
    Sample data instances are created by the container readers and never modified afterwards.
'''

import os
import threading

from .AudioMetadata import AudioMetadata
from ..codec import NCW, Wave
from ..Enums import Magic, MetadataState
from ..Errors import AudioDecodeError
from ..Helpers import unpack_u32

def is_ncw_payload(data: bytes) -> bool:
  return len(data) >= 4 and unpack_u32(data, 0, False) in (Magic.NCW, Magic.NCW_ALTERNATIVE)

def payload_metadata(data: bytes) -> AudioMetadata:
  if is_ncw_payload(data):
    header = NCW.read_header(data)
    return AudioMetadata(header.channels, header.bits, header.sample_rate, header.num_samples)
  if data[:4] == Wave.RIFF_SIGNATURE:
    return Wave.read_wave_metadata(data)
  raise AudioDecodeError("Unknown sample payload format")

def payload_pcm(data: bytes) -> tuple[AudioMetadata, bytes]:
  if is_ncw_payload(data):
    audio = NCW.decode(data)
    metadata = AudioMetadata(audio.channels, audio.bits, audio.sample_rate, audio.num_samples)
    return metadata, audio.to_pcm_bytes()
  if data[:4] == Wave.RIFF_SIGNATURE:
    return Wave.read_wave(data)
  raise AudioDecodeError("Unknown sample payload format")

class SampleData:
  ''' Represents the audio payload of one sample '''
  def __init__(self, name: str, path: str = '', offset: int = 0, length: int = 0):
    self.name   = name
    self.path   = path
    self.offset = offset
    self.length = length

    self._lock     = threading.Lock()
    self._state    = MetadataState.UNRESOLVED
    self._metadata = None
    self._error    = None

  @property
  def state(self) -> MetadataState:
    return self._state

  def get_audio_metadata(self) -> AudioMetadata:
    with self._lock:
      if self._state is MetadataState.UNRESOLVED:
        try:
          self._metadata = self._create_audio_metadata()
          self._state = MetadataState.RESOLVED
        except AudioDecodeError as e:
          self._error = e
          self._state = MetadataState.FAILED
        except OSError as e:
          self._error = AudioDecodeError(f"Could not read sample '{self.name}': {e}")
          self._state = MetadataState.FAILED

    if self._state is MetadataState.FAILED:
      raise AudioDecodeError(str(self._error)) from self._error

    return self._metadata

  def _create_audio_metadata(self) -> AudioMetadata:
    raise NotImplementedError

  def read_pcm(self) -> tuple[AudioMetadata, bytes]:
    raise NotImplementedError

  @property
  def payload_size(self) -> int:
    return self.get_audio_metadata().payload_size

  def write_wave(self, path) -> None:
    metadata, pcm = self.read_pcm()
    Wave.write_wave(path, metadata, pcm)

  def __repr__(self):
    return f"{type(self).__name__}({self.name!r})"

class FileSampleData(SampleData):
  ''' A sample stored in a WAV or NCW file '''
  def __init__(self, path: str, name: str = None):
    path = os.fspath(path)
    if name is None:
      name = os.path.splitext(os.path.basename(path))[0]
    super().__init__(name, path, 0, 0)

  def _read_bytes(self) -> bytes:
    with open(self.path, 'rb') as f:
      return f.read()

  def _create_audio_metadata(self) -> AudioMetadata:
    # Called under the lock of get_audio_metadata
    self.length = os.path.getsize(self.path)
    with open(self.path, 'rb') as f:
      leading = f.read(NCW.HEADER_SIZE)
    if is_ncw_payload(leading):
      return payload_metadata(leading)
    return Wave.read_wave_metadata(self.path)

  def read_pcm(self) -> tuple[AudioMetadata, bytes]:
    try:
      return payload_pcm(self._read_bytes())
    except OSError as e:
      raise AudioDecodeError(f"Could not read sample '{self.name}': {e}") from e

class EmbeddedSampleData(SampleData):
  ''' A sample payload embedded in a container '''
  def __init__(self, name: str, payload: bytes, offset: int = 0, path: str = ''):
    super().__init__(name, path, offset, len(payload))
    self.payload = bytes(payload)

  def _create_audio_metadata(self) -> AudioMetadata:
    return payload_metadata(self.payload)

  def read_pcm(self) -> tuple[AudioMetadata, bytes]:
    return payload_pcm(self.payload)

class MemorySampleData(SampleData):
  ''' Interleaved PCM which is already decoded '''
  def __init__(self, name: str, metadata: AudioMetadata, pcm: bytes):
    super().__init__(name, '', 0, len(pcm))
    self.metadata = metadata
    self.pcm = bytes(pcm)

  def _create_audio_metadata(self) -> AudioMetadata:
    frame_size = self.metadata.frame_size
    if frame_size == 0 or len(self.pcm) % frame_size != 0:
      raise AudioDecodeError(f"PCM data of '{self.name}' does not match its format")
    return AudioMetadata(self.metadata.channels, self.metadata.bits, self.metadata.sample_rate, len(self.pcm) // frame_size)

  def read_pcm(self) -> tuple[AudioMetadata, bytes]:
    return self.get_audio_metadata(), self.pcm

if __name__ == '__main__':
  pass
