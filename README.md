# balerkit

Control logic for a silage baler add-on. It counts bale wraps from a
proximity sensor, weighs each bale through an HX711 load-cell amplifier,
tracks GPS position from NMEA sentences, and reports the results as
checksummed serial sentences. Hardware is reached only through objects you
pass in (pin access, serial streams, clocks), so the controller runs and is
tested on an ordinary machine.

The package also holds a few small utilities: a four-function calculator, a
stopwatch, a SQLite-backed user sign-up/log-in store, and a plain-text
document with clipboard, undo and redo.

## Installation

Python 3.10 or later; no third-party dependencies. The `test` extra installs
pytest.

## Modules

| Module | Contents |
| --- | --- |
| `balerkit.common` | Enumerations (`MachineType`, `MachineStateEvent`, `MachineEvent`, `OperationMode`, `SerialCmd`, `SpiffsParamType`, `DevDataType`, `BaleInformation`), pin numbers (`Pin`), and the `BalerPayload` and `DeviceConfig` dataclasses |
| `balerkit.payload` | `payload_checksum`, `attributes_sentence`, `analytics_sentence`, `build_sentence`, `transmit_payload` |
| `balerkit.config_store` | `ConfigStore` for the JSON configuration file, `ConfigStoreError` |
| `balerkit.gps_fields` | Decoded GPS values (`Location`, `GpsDate`, `GpsTime`, `Speed`, `Course`, `Altitude`, `Hdop`, `Satellites`, `IntegerField`, `CustomField`), `parse_decimal`, `parse_degrees`, `distance_between`, `course_to`, `cardinal` |
| `balerkit.nmea` | `NmeaParser`, a character-at-a-time NMEA 0183 decoder |
| `balerkit.gps_module` | `GpsModule`, which polls a serial port once per second and keeps a data heartbeat |
| `balerkit.display` | `LcdScreen` (a character display model, 20x4 by default), `render_screen`, `machine_type_label` |
| `balerkit.hx711` | `HX711` amplifier driver over a `PinIO` interface |
| `balerkit.scale` | `LoadCell` (weighing, tare, interactive calibration) and `round_off_weight` |
| `balerkit.timer` | `OneShotTimer`, the wrap-inactivity alarm |
| `balerkit.interrupts` | `InterruptConfig`, `machine_event_pins`, `attach_interrupts`, `MachineEventLatch` |
| `balerkit.machine_state` | `MachineStateTracker` and `describe_state` |
| `balerkit.controller` | `BalerController`: machine events, status LED and buzzer, button, weighing and the serial setup menu |
| `balerkit.calculator` | `Calculator` |
| `balerkit.stopwatch` | `Stopwatch` |
| `balerkit.userdb` | `UserDatabase`, `sign_up`, `log_in`, `SignUpError`, `LoginError` |
| `balerkit.notepad` | `Document` |

## Examples

### Payload sentences

```python
from balerkit.common import BalerPayload, DeviceConfig, DevDataType, MachineType
from balerkit.payload import analytics_sentence, attributes_sentence, build_sentence

config = DeviceConfig(machine_type=MachineType.MSB, threshold_wrap_count=16)
print(attributes_sentence(config))       # "$SBDAT,1,0.00,16,0,A*<checksum>\r\n"

payload = BalerPayload(curr_bale_weight_grams=52000.0, total_bale_count=3)
print(analytics_sentence(payload))

sentence = build_sentence(DevDataType.ATTRIBUTES, config, payload)
```

Every sentence starts with `$` and ends with `A*`, the lower-case hexadecimal
XOR of the bytes between `$` and `*`, and `\r\n`. `payload_checksum` computes
that checksum for any text. `transmit_payload(stream, data_type, config, payload)`
writes the sentence to a text stream and returns it.

### Decoding NMEA

```python
from balerkit.nmea import NmeaParser

parser = NmeaParser(clock=lambda: 0)     # clock returns milliseconds
count = parser.feed(nmea_text)           # number of sentences that passed the checksum
if parser.location.valid:
    print(parser.location.lat(), parser.location.lng())
print(parser.passed_checksum, parser.failed_checksum)
```

`parser.add_custom("GPRMC", 12)` returns a `CustomField` holding the raw text of
that term of each validated sentence. `distance_between`, `course_to` and
`cardinal` in `balerkit.gps_fields` work on signed decimal degrees.

### Configuration storage

```python
from balerkit.common import DeviceConfig, SpiffsParamType
from balerkit.config_store import ConfigStore

store = ConfigStore("config.json")
config = DeviceConfig()
store.setup(config)                      # loads the file, or writes the defaults
config.threshold_wrap_count = 12
store.write(SpiffsParamType.WRAP_COUNT, config)
```

The file holds the keys `machinetype`, `loadcellcalib`, `wrapcount` and
`tareoffset`; missing keys load as 0. A write of `WRAP_COUNT` also records the
tare offset. Read, parse and write failures raise `ConfigStoreError`.

### The controller

`BalerController(config, store, load_cell, gps, pins, serial, screen, clock)`
takes a `DeviceConfig`, a `ConfigStore` (or `None`), a `LoadCell`, a
`GpsModule` (or `None`), an object with `pin_mode`, `digital_write` and
`digital_read`, a serial object with `readline` and `write`, an optional
`LcdScreen` and a millisecond clock. Sensor callbacks call
`controller.latch.signal(event)`; your loop calls `handle_events()` and
`button_handler()` repeatedly. A long button press opens the serial menu
(machine type, calibration, wrap count), which runs until the user exits or
`readline` returns an empty string.

### Utilities

```python
from balerkit.calculator import Calculator
from balerkit.stopwatch import Stopwatch

calc = Calculator()
calc.press_operator("+", "2")
print(calc.equals("3"))                  # 5

watch = Stopwatch()
watch.toggle()                           # start
print(watch.tick())                      # 00 : 00 : 00 : 010
watch.reset()
```

```python
from balerkit.userdb import UserDatabase, log_in, sign_up

password = "password"
with UserDatabase("users.db") as db:
    sign_up(db, "alice", password, password)   # raises SignUpError on failure
    log_in(db, "alice", password)              # raises LoginError on failure
```

```python
from balerkit.notepad import Document

doc = Document()
doc.set_text("hello world")
doc.cut(0, 6)
doc.paste(5)                             # "worldhello "
doc.undo()
doc.save_as("notes")                     # writes notes.txt
```

## What the package does not do

There is no command-line program, no graphical window and no built-in main
loop: you drive `BalerController`, `Calculator`, `Stopwatch` and `Document`
from your own code. Nothing talks to real GPIO, LCD, timer or serial hardware
by itself; you supply those objects. Passwords in `UserDatabase` are stored as
given, without hashing.

## Running the tests

Install the `test` extra and run `pytest` from the project root.