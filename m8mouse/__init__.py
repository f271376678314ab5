"""Read and change the DPI and LED settings of M8 gaming mice over HID feature reports."""

__version__ = "0.1.0"