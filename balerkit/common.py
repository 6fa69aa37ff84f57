"""Shared enumerations, pin assignments and data records of the baler add-on."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

ENABLE_DEBUG = True
ENABLE_SERIAL_COMMAND_DEBUG = True
GPS_ENABLE = True

MAX_BALE_WRAP_COUNT = 16
NUM_OF_READINGS = 10

BALER_DEVICE_NAME = "SBDT0001"
PAYLOAD_BEGIN_HDR_ANL = "SBDAN"
PAYLOAD_BEGIN_HDR_ATTR = "SBDAT"
GRAMS = "G"
KILOGRAMS = "Kg"
MOISTURE_LEVEL_PERCENT = "%"
COMMA_SEPARATOR = ","
PAYLOAD_BEGIN = "$"
PAYLOAD_ASTERISK = "*"
PAYLOAD_END = "\r\n"
DATA_VALID = "A"
DEGREES = "°"


class MachineType(IntEnum):
    """Kind of baler the add-on is fitted to."""

    ASB = 0
    MSB = 1
    UNDEFINED = 255


class MachineStateEvent(IntEnum):
    """States the baling machine moves through."""

    IDLE = 0
    FEEDING_STARTED = 1
    FEEDING_COMPLETE = 2
    VR_WRAP_SQUEEZE = 3
    VR_WRAP_EXPAND = 4
    CHAMBER_OPENED = 5
    CHAMBER_CLOSED = 6
    HR_WRAP_STARTED = 7
    HR_WRAP_COMPLETED = 8
    WRAP_CUT_UP = 9
    WRAP_CUT_DOWN = 10
    BALE_UNLOADING_DOWN = 11
    BALE_LOADING_UP = 12
    UNDEFINED = 255


class MachineEvent(IntEnum):
    """Events signalled by the machine's sensors."""

    PROXIMITY_SENSOR = 0
    HR_WRAP_STARTED = 1
    BALE_UNLOADING_DOWN = 2
    UNDEFINED = 255


class OperationMode(IntEnum):
    """Automatic or manual operation of an ASB machine."""

    AUTO = 0
    MANUAL = 1
    UNDEFINED = 255


class SerialCmd(IntEnum):
    """Steps of the serial configuration dialogue."""

    CMD_PROMPT = 0
    MAIN_MENU_OPT = 1
    MAIN_MENU_OPT_SEL = 2
    MACH_TYPE = 3
    WRAP_COUNT = 4
    OK = 5
    WEIGHT = 6
    UNDEFINED = 255


class SpiffsParamType(IntEnum):
    """Which part of the stored configuration a write updates."""

    MACHINE_TYPE = 0
    CALIB_FACTOR = 1
    WRAP_COUNT = 2
    TARE_OFFSET = 3
    UPDATE_DEFAULT = 4
    INVALID = 255


class DevDataType(IntEnum):
    """Kind of sentence sent to the host."""

    ATTRIBUTES = 0
    ANALYTICS = 1
    UNDEFINED = 255


class BaleInformation(IntEnum):
    """Screens the display can show."""

    DEFAULT = 0
    WEIGHT = 1
    COUNT = 2
    MOISTURE = 3
    ERROR = 4
    ATTRIBUTES = 5
    UNDEFINED = 255


class Pin(IntEnum):
    """GPIO assignments of the controller board."""

    MULTI_FUNC_BTN = 0
    BATTERY_MONITOR = 1
    PROX_SEN_EVENT = 4
    HRZ_WRAP_START_EVENT = 5
    UNLOADING_EVENT = 6
    ASB_AUTO_MANUAL_OPMODE = 7
    GPS_PWR_EN = 10
    GPS_RST_EN = 11
    BALE_WRAP_STATUS_BZR_RELAY_1 = 12
    RELAY_2 = 13
    GPS_RX = 17
    GPS_TX = 18
    MAX485_DE_RE = 21
    MULTI_FUNC_STATUS_LED = 38
    LOADCELL_DOUT = 39
    LOADCELL_SCK = 40
    RASPBERRY_PI_RX = 43
    RASPBERRY_PI_TX = 44
    RELAY_A_RPI_POWER = 47
    RELAY_B_RPI_POWER = 48


@dataclass
class BalerPayload:
    """Analytics reported for the bales produced so far."""

    latitude: float = 0.0
    longitude: float = 0.0
    moisture_level: float = 0.0
    curr_bale_weight_grams: float = 0.0
    total_bale_weight_grams: float = 0.0
    total_bale_count: int = 0
    curr_bale_wrap_count: int = 0
    gps_heartbeat: bool = False


@dataclass
class DeviceConfig:
    """Persistent device configuration."""

    load_cell_calib_factor: float = 0.0
    machine_type: int = MachineType.UNDEFINED
    threshold_wrap_count: int = 0
    vin: str = ""
    buzzer_on_interval: int = 0
    wrap_event_wait_interval: int = 0
    tare_offset: int = 0