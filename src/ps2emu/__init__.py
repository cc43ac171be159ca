"""ps2emu: record and replay PS/2 traffic through a virtual i8042 port."""

__version__ = "0.4.0"

# Highest replay log version this package reads and writes.
LOG_VERSION = 1
