import json

import pytest

from balerkit.common import DeviceConfig, MachineType, SpiffsParamType
from balerkit.config_store import ConfigStore, ConfigStoreError


@pytest.fixture
def store(tmp_path):
    return ConfigStore(tmp_path / "config.json")


def _stored(store):
    return json.loads(store.path.read_text(encoding="utf-8"))


def test_setup_without_file_writes_defaults(store):
    config = DeviceConfig()
    assert store.setup(config) is False
    assert _stored(store) == {
        "machinetype": 255,
        "loadcellcalib": 0.0,
        "wrapcount": 0,
        "tareoffset": 0,
    }


def test_setup_with_existing_file_loads_it(store):
    store.path.write_text('{"machinetype":1,"loadcellcalib":3.5,"wrapcount":16,"tareoffset":86293}')
    config = DeviceConfig()
    assert store.setup(config) is True
    assert config.machine_type is MachineType.MSB
    assert config.load_cell_calib_factor == 3.5
    assert config.threshold_wrap_count == 16
    assert config.tare_offset == 86293


def test_setup_with_corrupt_file_keeps_config(store):
    store.path.write_text("{not json")
    config = DeviceConfig(machine_type=MachineType.ASB)
    assert store.setup(config) is True
    assert config.machine_type is MachineType.ASB


def test_default_write_then_load_round_trip(store):
    original = DeviceConfig(
        load_cell_calib_factor=2.25,
        machine_type=MachineType.ASB,
        threshold_wrap_count=12,
        tare_offset=-4096,
    )
    store.write(SpiffsParamType.UPDATE_DEFAULT, original)
    loaded = store.load(DeviceConfig())
    assert loaded == DeviceConfig(
        load_cell_calib_factor=2.25,
        machine_type=MachineType.ASB,
        threshold_wrap_count=12,
        tare_offset=-4096,
    )


def test_machine_type_write_keeps_other_keys(store):
    store.write(SpiffsParamType.UPDATE_DEFAULT, DeviceConfig(tare_offset=9, threshold_wrap_count=4))
    config = DeviceConfig(machine_type=MachineType.MSB, tare_offset=100, threshold_wrap_count=7)
    document = store.write(SpiffsParamType.MACHINE_TYPE, config)
    assert document == _stored(store)
    assert document["machinetype"] == 1
    assert document["tareoffset"] == 9
    assert document["wrapcount"] == 4


def test_calib_write_changes_only_calibration(store):
    store.write(SpiffsParamType.UPDATE_DEFAULT, DeviceConfig(tare_offset=5))
    store.write(SpiffsParamType.CALIB_FACTOR, DeviceConfig(load_cell_calib_factor=1.5, tare_offset=77))
    stored = _stored(store)
    assert stored["loadcellcalib"] == 1.5
    assert stored["tareoffset"] == 5


def test_wrap_count_write_also_stores_tare_offset(store):
    store.write(SpiffsParamType.UPDATE_DEFAULT, DeviceConfig(tare_offset=5))
    config = DeviceConfig(threshold_wrap_count=20, tare_offset=777)
    store.write(SpiffsParamType.WRAP_COUNT, config)
    stored = _stored(store)
    assert stored["wrapcount"] == 20
    assert stored["tareoffset"] == 777
    assert stored["machinetype"] == 255


def test_invalid_param_rewrites_document_unchanged(store):
    store.write(SpiffsParamType.UPDATE_DEFAULT, DeviceConfig(threshold_wrap_count=3))
    before = _stored(store)
    store.write(SpiffsParamType.INVALID, DeviceConfig(threshold_wrap_count=9))
    assert _stored(store) == before


def test_load_missing_keys_read_as_zero(store):
    store.path.write_text("{}")
    config = store.load(DeviceConfig(threshold_wrap_count=16, tare_offset=3))
    assert config.machine_type is MachineType.ASB
    assert config.threshold_wrap_count == 0
    assert config.tare_offset == 0
    assert config.load_cell_calib_factor == 0.0


def test_load_out_of_range_wrap_count_reads_as_zero(store):
    store.path.write_text('{"wrapcount":300,"machinetype":7}')
    config = store.load(DeviceConfig())
    assert config.threshold_wrap_count == 0
    assert config.machine_type == 7


def test_load_missing_file_raises(store):
    with pytest.raises(ConfigStoreError):
        store.load(DeviceConfig())


def test_load_invalid_json_raises(store):
    store.path.write_text("[1, 2")
    with pytest.raises(ConfigStoreError):
        store.load(DeviceConfig())


def test_partial_write_without_file_raises(store):
    with pytest.raises(ConfigStoreError):
        store.write(SpiffsParamType.MACHINE_TYPE, DeviceConfig())
    assert not store.path.exists()


def test_write_into_missing_directory_raises(tmp_path):
    store = ConfigStore(tmp_path / "absent" / "config.json")
    with pytest.raises(ConfigStoreError):
        store.write(SpiffsParamType.UPDATE_DEFAULT, DeviceConfig())