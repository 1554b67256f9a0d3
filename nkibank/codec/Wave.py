'''
### Wave Module

This module reads and writes uncompressed PCM WAV files, which is how samples are stored next to
the Kontakt 1 and Kontakt 2 containers and how embedded samples are extracted.

Functions:
    `read_wave_metadata`:
        Reads channel count, depth, sample rate and length without loading the sample data.

    `read_wave`:
        Reads the metadata and the interleaved little-endian PCM data.

    `write_wave`:
        Writes interleaved little-endian PCM data as a WAV file.

Dependencies:
    `wave`:
        The standard library RIFF/WAVE reader and writer.

Intended Usage:
    Any error while reading is reported as `AudioDecodeError`, which lets the container readers
    drop only the affected zone.
'''

import io
import wave

from ..Errors import AudioDecodeError
from ..model.AudioMetadata import AudioMetadata

RIFF_SIGNATURE = b'RIFF'

def _open(source):
  if isinstance(source, (bytes, bytearray)):
    return wave.open(io.BytesIO(source), 'rb')
  return wave.open(source, 'rb')

def read_wave_metadata(source) -> AudioMetadata:
  try:
    with _open(source) as w:
      return AudioMetadata(
        channels=w.getnchannels(),
        bits=w.getsampwidth() * 8,
        sample_rate=w.getframerate(),
        num_samples=w.getnframes()
      )
  except (wave.Error, EOFError, OSError) as e:
    raise AudioDecodeError(f"Could not read WAV data: {e}") from e

def read_wave(source) -> tuple[AudioMetadata, bytes]:
  try:
    with _open(source) as w:
      metadata = AudioMetadata(
        channels=w.getnchannels(),
        bits=w.getsampwidth() * 8,
        sample_rate=w.getframerate(),
        num_samples=w.getnframes()
      )
      pcm = w.readframes(w.getnframes())
  except (wave.Error, EOFError, OSError) as e:
    raise AudioDecodeError(f"Could not read WAV data: {e}") from e

  return metadata, pcm

def write_wave(path, metadata: AudioMetadata, pcm: bytes) -> None:
  target = path if hasattr(path, 'write') else str(path)
  with wave.open(target, 'wb') as w:
    w.setnchannels(metadata.channels)
    w.setsampwidth(metadata.bits // 8)
    w.setframerate(metadata.sample_rate)
    w.writeframes(pcm)

if __name__ == '__main__':
  pass
