"""Contracts, ports, test fakes and a USB HID host adapter for a USB-to-BLE gamepad bridge."""

__version__ = "0.1.0"
__all__ = ["contracts", "ports", "usb_contexts", "fakes", "usb_host_adapter"]