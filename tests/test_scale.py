import json

import pytest

from balerkit.common import DeviceConfig, Pin, SerialCmd, SpiffsParamType
from balerkit.config_store import ConfigStore
from balerkit.hx711 import HIGH, HX711, LOW, PinMode
from balerkit.scale import LoadCell, round_off_weight

SCK = int(Pin.LOADCELL_SCK)
DOUT = int(Pin.LOADCELL_DOUT)


class FakeChip:
    """Simulates the HX711 serial interface on two pins."""

    def __init__(self, samples=()):
        self.samples = [s & 0xFFFFFF for s in samples]
        self.modes = {}
        self._sck = LOW
        self._bits = []
        self._shifting = False
        self._out = HIGH

    def pin_mode(self, pin, mode):
        self.modes[pin] = mode

    def digital_write(self, pin, level):
        if pin == SCK:
            if level and not self._sck and self._shifting:
                if self._bits:
                    self._out = self._bits.pop(0)
                else:
                    self._shifting = False
            self._sck = level

    def digital_read(self, pin):
        if pin != DOUT:
            return LOW
        if self._shifting:
            return self._out
        if not self.samples:
            return HIGH
        sample = self.samples.pop(0)
        self._bits = [(sample >> shift) & 1 for shift in range(23, -1, -1)]
        self._shifting = True
        self._out = LOW
        return LOW


def make(samples=(), config=None, store=None):
    chip = FakeChip(samples)
    cell = LoadCell(HX711(chip, delay=lambda ms: None), config or DeviceConfig(), store)
    cell.init()
    return chip, cell


@pytest.mark.parametrize("weight", [50, -50, 0, 98.9, -98.9])
def test_small_weights_round_to_zero(weight):
    assert round_off_weight(weight) == 0.0


@pytest.mark.parametrize("weight", [99, -99, 500, -1200.5])
def test_large_weights_pass_through(weight):
    assert round_off_weight(weight) == weight


def test_init_applies_config():
    chip, cell = make(config=DeviceConfig(load_cell_calib_factor=2.5, tare_offset=10))
    assert cell.hx711.scale == 2.5
    assert cell.hx711.offset == 10
    assert chip.modes[SCK] == PinMode.OUTPUT


def test_weight_is_zero_without_scale_factor():
    _, cell = make()
    cell.set_scale(0)
    assert cell.weight_grams(1) == 0.0


def test_weight_reads_units():
    _, cell = make([1000], DeviceConfig(load_cell_calib_factor=1.0))
    assert cell.weight_grams(1) == 1000.0


def test_set_tare_updates_config_and_store(tmp_path):
    config = DeviceConfig(load_cell_calib_factor=1.0)
    store = ConfigStore(tmp_path / "config.json")
    store.write(SpiffsParamType.UPDATE_DEFAULT, config)
    _, cell = make([77] * 10, config, store)
    cell.set_tare()
    assert config.tare_offset == 77
    stored = json.loads((tmp_path / "config.json").read_text())
    assert stored["tareoffset"] == 77


def test_calibrate_computes_factor():
    samples = [1000] * 10 + [3000] * 10 + [1000] * 10
    config = DeviceConfig()
    _, cell = make(samples, config)
    asked = []

    def wait_for(cmd, prompt):
        asked.append(cmd)
        return 500 if cmd == SerialCmd.WEIGHT else "ok"

    factor = cell.calibrate(wait_for)
    assert factor == 4.0
    assert cell.hx711.scale == factor
    assert cell.known_weight == 500
    assert config.tare_offset == 1000
    assert asked == [SerialCmd.OK, SerialCmd.WEIGHT, SerialCmd.OK, SerialCmd.OK]


def test_calibrate_without_chip_returns_zero():
    _, cell = make()
    asked = []
    assert cell.calibrate(lambda cmd, prompt: asked.append(cmd)) == 0.0
    assert asked == []


def test_calibrate_rejects_non_positive_weight():
    _, cell = make([1000] * 10)
    with pytest.raises(ValueError):
        cell.calibrate(lambda cmd, prompt: 0 if cmd == SerialCmd.WEIGHT else "ok")


def test_power_flags():
    _, cell = make()
    cell.power_up()
    assert cell.powered_up is True
    cell.power_down()
    assert cell.powered_up is False