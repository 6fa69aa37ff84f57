"""Baler add-on control logic with GPS and load-cell handling, plus small desktop-style utilities."""

__version__ = "0.1.0"

__all__ = [
    "common",
    "payload",
    "config_store",
    "gps_fields",
    "nmea",
    "gps_module",
    "display",
    "hx711",
    "scale",
    "timer",
    "interrupts",
    "machine_state",
    "controller",
    "calculator",
    "stopwatch",
    "userdb",
    "notepad",
]