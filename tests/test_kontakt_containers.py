import pytest

from nkibank import Compression
from nkibank.container import Dispatcher
from nkibank.container.Kontakt1 import Kontakt1Container, Kontakt1Header
from nkibank.container.Kontakt2 import Kontakt2Container, Kontakt2Header
from nkibank.Errors import CorruptedContainerError, CorruptedStreamError
from nkibank.Helpers import pack_u32

from conftest import SAMPLE_FOLDER

CONTAINERS = [
  pytest.param(Kontakt1Container, False, id='kontakt1-le'),
  pytest.param(Kontakt1Container, True, id='kontakt1-be'),
  pytest.param(Kontakt2Container, False, id='kontakt2-le'),
  pytest.param(Kontakt2Container, True, id='kontakt2-be'),
]


def write_container(path, container, instrument, file_names):
  data = container.write(instrument, SAMPLE_FOLDER, 1234, timestamp=1700000000, file_names=file_names)
  path.write_bytes(data)
  return data


@pytest.mark.parametrize('container_class, big_endian', CONTAINERS)
class TestRoundTrip:
  def test_every_field_survives(self, tmp_path, instrument, file_names, container_class, big_endian):
    path = tmp_path / 'Test Piano.nki'
    write_container(path, container_class(big_endian), instrument, file_names)

    [loaded] = Dispatcher.read_file(path)

    assert loaded == instrument
    assert [zone.sample.path for zone in loaded.zones()] == [zone.sample.path for zone in instrument.zones()]

  def test_shared_samples_stay_shared(self, tmp_path, instrument, file_names, container_class, big_endian):
    path = tmp_path / 'Test Piano.nki'
    write_container(path, container_class(big_endian), instrument, file_names)

    [loaded] = Dispatcher.read_file(path)
    assert loaded.groups[0].zones[0].sample is loaded.groups[1].zones[0].sample
    assert len(loaded.sample_data()) == 2

  def test_data_after_the_metadata_is_ignored(self, tmp_path, instrument, file_names, container_class, big_endian):
    path = tmp_path / 'Test Piano.nki'
    data = container_class(big_endian).write(instrument, SAMPLE_FOLDER, 1234, file_names=file_names)
    path.write_bytes(data + bytes(range(64)))

    [loaded] = Dispatcher.read_file(path)
    assert loaded == instrument

  def test_header_fields(self, instrument, file_names, container_class, big_endian):
    data = container_class(big_endian).write(instrument, SAMPLE_FOLDER, 1234, timestamp=1700000000, file_names=file_names)
    header = container_class.HEADER_CLASS.from_bytes(data, big_endian)

    assert header.timestamp == 1700000000
    assert header.samples_size == 1234
    assert header.metadata_offset == header.SIZE
    assert data[:4] == pack_u32(header.MAGIC, big_endian)


class TestHeaderLayout:
  def test_kontakt1_constants(self):
    header = Kontakt1Header(big_endian=False)
    data = header.to_bytes()
    assert len(data) == 0x24
    assert data[:4] == bytes.fromhex('b36ee55e')
    assert data[4:8] == pack_u32(0x24, False)
    assert data[8:10] == b'\x50\x00'

  def test_kontakt2_constants(self):
    header = Kontakt2Header(big_endian=True)
    data = header.to_bytes()
    assert len(data) == 0x38
    assert data[:4] == bytes.fromhex('7fa89012')
    assert data[4:8] == pack_u32(0x30, True)
    assert data[8:10] == b'\x01\x10'
    assert data[0x20:0x24] == pack_u32(0x02010002, True)
    assert data[0x24:0x34] == bytes(16)


class TestCorruptedContainers:
  def test_truncated_header(self, notifier):
    with pytest.raises(CorruptedContainerError):
      Kontakt2Container().read(pack_u32(0x7FA89012, False) + bytes(10), 'x.nki', notifier)

  def test_wrong_byte_order(self, instrument, notifier):
    data = Kontakt1Container(big_endian=True).write(instrument, SAMPLE_FOLDER, 0)
    with pytest.raises(CorruptedContainerError):
      Kontakt1Container(big_endian=False).read(data, 'x.nki', notifier)

  def test_offset_outside_of_file(self, notifier):
    header = Kontakt1Header()
    header.offset = 0x1000
    with pytest.raises(CorruptedContainerError):
      Kontakt1Container().read(header.to_bytes() + bytes(16), 'x.nki', notifier)

  def test_implausible_samples_size(self, notifier):
    header = Kontakt2Header()
    header.samples_size = 0x80000000
    with pytest.raises(CorruptedContainerError):
      Kontakt2Container().read(header.to_bytes() + Compression.compress(b'<Programs/>'), 'x.nki', notifier)

  def test_corrupted_metadata_stream(self, notifier):
    with pytest.raises(CorruptedStreamError):
      Kontakt2Container().read(Kontakt2Header().to_bytes() + b'\x78\x9c garbage', 'x.nki', notifier)
