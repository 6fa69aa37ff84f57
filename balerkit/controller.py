"""Main control logic of the baler add-on: events, indicators, weighing and serial setup."""

from __future__ import annotations

import logging
import re
import time
from enum import IntEnum
from typing import Any, Callable, Protocol

from .common import (
    GPS_ENABLE,
    NUM_OF_READINGS,
    BaleInformation,
    BalerPayload,
    DevDataType,
    DeviceConfig,
    MachineEvent,
    MachineStateEvent,
    MachineType,
    Pin,
    SerialCmd,
    SpiffsParamType,
)
from .config_store import ConfigStore, ConfigStoreError
from .display import LcdScreen, render_screen
from .hx711 import HIGH, LOW, PinIO, PinMode
from .interrupts import MachineEventLatch
from .machine_state import MachineStateTracker
from .payload import transmit_payload
from .timer import PROX_SENSOR_PERIOD_MS, OneShotTimer

logger = logging.getLogger(__name__)

TARE_BTN_DEBOUNCE_TIME_MS = 50
BALE_WRAP_STATUS_BZR_ON_TIME = 3000
POWER_UP_DELAY_HX711 = 100
MULTI_FUNC_BTN_LONG_PRESS_TIME = 5000
MULTI_FUNC_STATUS_LED_INTERVAL = 100
SETTLE_DELAY_MS = 100
RELAY_PULSE_MS = 2

_U32 = 0xFFFFFFFF
_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")


class BaleWrapState(IntEnum):
    """Progress of the wrap-count alert."""

    COUNT_REACHED = 0
    BZR_HIGH = 1
    BZR_LOW = 2
    UNDEFINED = 255


class SerialLine(Protocol):
    """Line-oriented serial link; ``readline`` returns '' when no more input comes."""

    def readline(self) -> str: ...

    def write(self, text: str) -> Any: ...


def _millis() -> int:
    return (time.monotonic_ns() // 1_000_000) & _U32


def _sleep_ms(milliseconds: float) -> None:
    time.sleep(milliseconds / 1000.0)


def _to_int(text: str) -> int:
    """Leading integer of ``text``, 0 when there is none."""
    match = _INT_PREFIX.match(text)
    return int(match.group(1)) if match else 0


class BalerController:
    """Ties sensors, load cell, GPS, indicators and the serial link together."""

    def __init__(
        self,
        config: DeviceConfig,
        store: ConfigStore | None,
        load_cell: Any,
        gps: Any,
        pins: PinIO,
        serial: SerialLine,
        screen: LcdScreen | None = None,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self.config = config
        self.store = store
        self.load_cell = load_cell
        self.gps = gps
        self.pins = pins
        self.serial = serial
        self.screen = screen
        self._clock = clock or _millis
        self.delay: Callable[[float], None] = _sleep_ms

        self.latch = MachineEventLatch()
        self.timer = OneShotTimer(PROX_SENSOR_PERIOD_MS, self._clock)
        self.tracker = MachineStateTracker()
        self.payload = BalerPayload()

        self.prox_event_count = 0
        self.bale_count = 0
        self.total_bale_weight = 0.0
        self.wrap_state = BaleWrapState.UNDEFINED
        self.serial_cmd = SerialCmd.UNDEFINED
        self.in_cmd_mode = False
        self.fetch_pending = False
        self.prox_event_detected = False
        self.led_on = False
        self.led_on_due_to_wrap_count = False

        self._button_state = LOW
        self._button_last_state = LOW
        self._button_pressed = False
        self._button_long_press = False
        self._button_press_start = 0
        self._prev_bale_wrap = 0
        self._prev_power_up = 0
        self._prev_led = 0

        self._configure_pins()

    # -- helpers -------------------------------------------------------------

    def _now(self) -> int:
        return self._clock()

    def _since(self, then: int) -> int:
        return (self._now() - then) & _U32

    def _write_line(self, text: str) -> None:
        self.serial.write(text + "\n")

    def _read_line(self) -> str | None:
        line = self.serial.readline()
        if not line:
            return None
        if isinstance(line, bytes):
            line = line.decode("utf-8", errors="replace")
        return line.removesuffix("\n")

    def _persist(self, param: SpiffsParamType) -> None:
        if self.store is None:
            return
        try:
            self.store.write(param, self.config)
        except ConfigStoreError as exc:
            logger.warning("%s", exc)

    def _display(self, info: BaleInformation) -> None:
        if self.screen is not None:
            render_screen(self.screen, info, self.payload, self.config)

    def _configure_pins(self) -> None:
        self.pins.pin_mode(int(Pin.MULTI_FUNC_BTN), PinMode.INPUT_PULLUP)
        self.pins.pin_mode(int(Pin.MULTI_FUNC_STATUS_LED), PinMode.OUTPUT)
        self.pins.digital_write(int(Pin.MULTI_FUNC_STATUS_LED), LOW)
        self.pins.pin_mode(int(Pin.BALE_WRAP_STATUS_BZR_RELAY_1), PinMode.OUTPUT)
        self.pins.digital_write(int(Pin.BALE_WRAP_STATUS_BZR_RELAY_1), LOW)
        self.pins.pin_mode(int(Pin.RELAY_2), PinMode.OUTPUT)
        self.pins.digital_write(int(Pin.RELAY_2), LOW)
        self.pins.pin_mode(int(Pin.RELAY_A_RPI_POWER), PinMode.OUTPUT)
        self.pins.pin_mode(int(Pin.RELAY_B_RPI_POWER), PinMode.OUTPUT)

    # -- machine events ------------------------------------------------------

    def handle_events(self) -> None:
        """One pass of the main loop: events, timer, indicators and weighing."""
        event = self.latch.take()
        if event is not None:
            if event == MachineEvent.HR_WRAP_STARTED:
                self.tracker.set_state(MachineStateEvent.HR_WRAP_STARTED)
            elif event == MachineEvent.BALE_UNLOADING_DOWN:
                self.tracker.set_state(MachineStateEvent.BALE_UNLOADING_DOWN)
                self.fetch_pending = True
            elif event == MachineEvent.PROXIMITY_SENSOR:
                self.on_proximity_event()
            else:
                self.tracker.set_state(MachineStateEvent.UNDEFINED)

        if self.timer.expired():
            self.timer.stop()
            self.on_timer_expired()

        self.wrap_count_indicator()
        self.fetch_stable_weight()

    def on_proximity_event(self) -> None:
        """Count one wrap and (re)start the end-of-wrapping timer."""
        self.prox_event_count = (self.prox_event_count + 1) & 0xFF
        logger.debug("proximity event, count %s", self.prox_event_count)
        if self.config.machine_type == MachineType.MSB:
            if self.prox_event_count == 1:
                self.tracker.set_state(MachineStateEvent.HR_WRAP_STARTED)
            elif self.prox_event_count == self.config.threshold_wrap_count:
                self.wrap_state = BaleWrapState.COUNT_REACHED
                logger.debug("wrap count reached target %s", self.prox_event_count)

        self.prox_event_detected = True
        self.timer.reset()
        if self.timer.stopped:
            self.timer.start()

    def on_timer_expired(self) -> None:
        """Wrapping has stopped: count the bale and schedule weighing."""
        if self.prox_event_count >= self.config.threshold_wrap_count:
            logger.debug("assuming horizontal wrap completed")
            self.tracker.set_state(MachineStateEvent.HR_WRAP_COMPLETED)
        else:
            logger.debug(
                "wrap stopped short of target: wraps %s, bales %s",
                self.prox_event_count,
                self.bale_count,
            )
        self.bale_count = (self.bale_count + 1) & 0xFFFF
        self.fetch_pending = True

    def update_payload_and_transmit(self) -> str:
        """Weigh the bale, update the analytics, send and show them."""
        weight = self.load_cell.weight_grams(NUM_OF_READINGS)
        self.total_bale_weight += weight

        self.payload.curr_bale_weight_grams = weight
        self.payload.total_bale_weight_grams = self.total_bale_weight
        self.payload.curr_bale_wrap_count = self.prox_event_count
        self.payload.total_bale_count = self.bale_count
        if GPS_ENABLE and self.gps is not None:
            self.payload.latitude = self.gps.latitude
            self.payload.longitude = self.gps.longitude
            self.payload.gps_heartbeat = self.gps.heartbeat
        sentence = self.transmit(DevDataType.ANALYTICS)
        self._display(BaleInformation.WEIGHT)

        self.prox_event_count = 0
        return sentence

    def wrap_count_indicator(self) -> None:
        """Drive the status LED and buzzer for wraps and the reached wrap count."""
        led = int(Pin.MULTI_FUNC_STATUS_LED)
        buzzer = int(Pin.BALE_WRAP_STATUS_BZR_RELAY_1)
        if self.wrap_state == BaleWrapState.COUNT_REACHED:
            self.pins.digital_write(led, HIGH)
            self.pins.digital_write(buzzer, HIGH)
            self._prev_bale_wrap = self._now()
            self.wrap_state = BaleWrapState.BZR_HIGH
            self.led_on_due_to_wrap_count = True

        if (
            self.wrap_state == BaleWrapState.BZR_HIGH
            and self._since(self._prev_bale_wrap) >= BALE_WRAP_STATUS_BZR_ON_TIME
        ):
            self.pins.digital_write(buzzer, LOW)
            self.wrap_state = BaleWrapState.BZR_LOW

        if self.prox_event_detected and not self.led_on_due_to_wrap_count:
            if not self.led_on:
                self.pins.digital_write(led, HIGH)
                self.led_on = True
                self._prev_led = self._now()
            if self.led_on and self._since(self._prev_led) >= MULTI_FUNC_STATUS_LED_INTERVAL:
                self.led_on = False
                self.pins.digital_write(led, LOW)
                self.prox_event_detected = False

    def fetch_stable_weight(self) -> None:
        """Power the load cell when weighing is due, then weigh once it settles."""
        if self.fetch_pending:
            self.load_cell.power_up()
            self._prev_power_up = self._now()
            self.fetch_pending = False

        if self.load_cell.powered_up and self._since(self._prev_power_up) >= POWER_UP_DELAY_HX711:
            self.update_payload_and_transmit()
            if self.config.machine_type == MachineType.MSB:
                self.pins.digital_write(int(Pin.MULTI_FUNC_STATUS_LED), LOW)
                self.led_on_due_to_wrap_count = False
            self.load_cell.power_down()

    # -- multi-function button and LED ---------------------------------------

    def button_handler(self) -> None:
        """Detect short presses (tare) and long presses (setup menu)."""
        self._button_state = self.pins.digital_read(int(Pin.MULTI_FUNC_BTN))

        if self._button_state == LOW and self._button_last_state == HIGH:
            self._button_press_start = self._now()
            self._button_pressed = True
            self._button_long_press = False

        if self._button_state == HIGH and self._button_last_state == LOW:
            if self._button_pressed:
                if self._since(self._button_press_start) < MULTI_FUNC_BTN_LONG_PRESS_TIME:
                    self.on_short_press()
                self._button_pressed = False
            self._button_press_start = 0

        if (
            self._button_pressed
            and self._since(self._button_press_start) >= MULTI_FUNC_BTN_LONG_PRESS_TIME
            and not self._button_long_press
        ):
            self._button_long_press = True
            self.on_long_press()

        self._button_last_state = self._button_state

    def led_state_handler(self) -> None:
        """Blink the status LED in command mode, keep it off otherwise."""
        led = int(Pin.MULTI_FUNC_STATUS_LED)
        if self.in_cmd_mode:
            now = self._now()
            if (now - self._prev_led) & _U32 >= MULTI_FUNC_STATUS_LED_INTERVAL:
                self._prev_led = now
                self.pins.digital_write(led, LOW if self.pins.digital_read(led) else HIGH)
        elif self.pins.digital_read(led) == HIGH:
            self.pins.digital_write(led, LOW)

    def on_short_press(self) -> None:
        """Tare the scale and report the attributes."""
        self.load_cell.power_up()
        self.delay(SETTLE_DELAY_MS)
        self.load_cell.set_tare()
        self.transmit(DevDataType.ATTRIBUTES)
        self.load_cell.power_down()
        self.delay(SETTLE_DELAY_MS)

    def on_long_press(self) -> None:
        """Enter the serial setup menu."""
        self.serial_cmd = SerialCmd.MAIN_MENU_OPT_SEL
        self.serial.write(self.main_menu_text())
        self.load_cell.power_up()
        self.delay(SETTLE_DELAY_MS)
        self.serial_commands()
        self.load_cell.power_down()
        self.delay(SETTLE_DELAY_MS)

    # -- serial setup dialogue -----------------------------------------------

    def main_menu_text(self) -> str:
        """Current configuration followed by the main menu options."""
        lines = [
            "",
            "****************CURRENT CONFIGURATIONS****************",
            "[INFO]Current Configurations:",
            f"[INFO]MachineType:{int(self.config.machine_type)}",
            f"[INFO]LoadCellCalibFactor:{self.config.load_cell_calib_factor:.2f}",
            f"[INFO]ThresholdWrapCount:{int(self.config.threshold_wrap_count)}",
            f"[INFO]TareOffsetVal:{int(self.config.tare_offset)}",
            "****************CURRENT CONFIGURATIONS****************",
            "",
            "[INFO]Please Select any option below:",
            "[Ex: Enter '2' to update weight calibration factor]",
            "1. Update machine type",
            "2. Update weight calibration factor",
            "3. Update wrap count",
            "4. Exit",
        ]
        return "\n".join(lines) + "\n"

    def _command_prompt(self) -> None:
        self._write_line("[INFO]Please select any option:")
        self._write_line("1. Main Menu")
        self._write_line("2. Exit")
        self.serial_cmd = SerialCmd.MAIN_MENU_OPT

    def _main_menu(self) -> None:
        self.serial.write(self.main_menu_text())
        self.serial_cmd = SerialCmd.MAIN_MENU_OPT_SEL

    def _machine_type_menu(self) -> None:
        self._write_line("[INFO]Select the machine type:")
        self._write_line("[Ex: Enter '1' to select machine type as MSB]")
        self._write_line("1. MSB")
        self._write_line("2. ASB")
        self._write_line("3. Exit")
        self.serial_cmd = SerialCmd.MACH_TYPE

    def _calibration_prompt(self, cmd: SerialCmd, prompt: str) -> float | None:
        self._write_line(f"[INFO]{prompt}")
        return self.wait_for_user_command(cmd)

    def _update_machine_type(self, machine_type: MachineType) -> None:
        self._write_line(f"[INFO]MachineType updating as {machine_type.name}...!")
        self.config.machine_type = machine_type
        self._persist(SpiffsParamType.MACHINE_TYPE)
        self._display(BaleInformation.ATTRIBUTES)
        self._command_prompt()

    def _dispatch(self, line: str) -> bool:
        """Handle one line of the dialogue; True when the dialogue ends."""
        cmd = self.serial_cmd
        if cmd == SerialCmd.CMD_PROMPT:
            self._command_prompt()
        elif cmd == SerialCmd.MAIN_MENU_OPT:
            if line == "1":
                self._main_menu()
            elif line == "2":
                return True
            else:
                self._write_line("[INFO]Please enter a valid command")
                self._command_prompt()
        elif cmd == SerialCmd.MAIN_MENU_OPT_SEL:
            if line == "1":
                self._machine_type_menu()
            elif line == "2":
                factor = self.load_cell.calibrate(self._calibration_prompt)
                self.config.load_cell_calib_factor = factor
                self.load_cell.set_scale(factor)
                self._persist(SpiffsParamType.CALIB_FACTOR)
                self.transmit(DevDataType.ATTRIBUTES)
                self._display(BaleInformation.ATTRIBUTES)
                self._command_prompt()
            elif line == "3":
                self._write_line("[INFO]Please enter the bale wrap count")
                self.serial_cmd = SerialCmd.WRAP_COUNT
            elif line == "4":
                return True
            else:
                self._write_line("[INFO]Please enter a valid option")
                self._main_menu()
        elif cmd == SerialCmd.WRAP_COUNT:
            count = _to_int(line) & 0xFF
            if count > 0:
                self.config.threshold_wrap_count = count
                self._persist(SpiffsParamType.WRAP_COUNT)
                self._display(BaleInformation.ATTRIBUTES)
                self._command_prompt()
            else:
                self._write_line("[INFO]Please enter a valid non-zero positive value")
        elif cmd == SerialCmd.MACH_TYPE:
            if line == "1":
                self._update_machine_type(MachineType.MSB)
            elif line == "2":
                self._update_machine_type(MachineType.ASB)
            elif line == "3":
                return True
            else:
                self._write_line("[INFO]Please enter a valid option")
                self._machine_type_menu()
        else:
            self._write_line("[INFO]Invalid command")
            return True
        return False

    def serial_commands(self) -> None:
        """Run the setup dialogue until the user exits or input ends."""
        while True:
            self.in_cmd_mode = True
            self.led_state_handler()
            line = self._read_line()
            if line is None:
                break
            self._write_line(f"[INFO]Serial Data Received:{line}")
            if self._dispatch(line):
                break
        self.in_cmd_mode = False
        self._write_line("[INFO]Loop Exited...!")
        self.led_state_handler()

    def wait_for_user_command(self, cmd: SerialCmd) -> float | None:
        """Block until the user confirms with 'ok' or, for WEIGHT, enters grams.

        Returns the entered weight for ``SerialCmd.WEIGHT`` and None for
        ``SerialCmd.OK``. Raises EOFError when input ends first.
        """
        while True:
            self.led_state_handler()
            line = self._read_line()
            if line is None:
                raise EOFError("serial input ended while waiting for the user")
            self._write_line(f"[INFO]Serial Data Received:{line}")
            if cmd == SerialCmd.OK:
                if line == "ok":
                    return None
            elif cmd == SerialCmd.WEIGHT:
                grams = _to_int(line) & _U32
                if grams > 0:
                    self.load_cell.known_weight = float(grams)
                    return float(grams)
                self._write_line("[INFO]Please enter a valid non-zero positive value in grams")
            else:
                self._write_line("[INFO]Invalid command")

    # -- outputs -------------------------------------------------------------

    def transmit(self, data_type: DevDataType) -> str:
        """Send the sentence for ``data_type`` over the serial link."""
        return transmit_payload(self.serial, data_type, self.config, self.payload)

    def _pulse(self, pin: Pin) -> None:
        self.pins.digital_write(int(pin), HIGH)
        self.delay(RELAY_PULSE_MS)
        self.pins.digital_write(int(pin), LOW)

    def turn_on_relay(self) -> None:
        """Pulse the relay that powers the host computer on."""
        self._pulse(Pin.RELAY_A_RPI_POWER)

    def turn_off_relay(self) -> None:
        """Pulse the relay that powers the host computer off."""
        self._pulse(Pin.RELAY_B_RPI_POWER)