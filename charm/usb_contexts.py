"""Book-keeping records the USB host adapter keeps per device and interface."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from charm.contracts import (
    Checked,
    DeviceHandle,
    HubPath,
    InterfaceHandle,
    InterfaceScope,
    blob,
    part,
    uint,
)

DEVICE_DESCRIPTOR_LENGTH = 18
DEVICE_DESCRIPTOR_TYPE = 0x01


@dataclass
class HidInterfaceContext(InterfaceScope):
    """One opened HID interface and what is known about it."""

    interface_number: int = uint(8)
    device_address: int = uint(8)
    hid_handle: Any = None
    report_descriptor: bytes = blob()


@dataclass
class DeviceContext(Checked):
    """One enumerated USB device and the interfaces claimed on it."""

    device_handle: DeviceHandle = part(DeviceHandle)
    device_address: int = uint(8)
    vendor_id: int = uint(16)
    product_id: int = uint(16)
    hub_path: HubPath = part(HubPath)
    claimed_interfaces: dict[int, InterfaceHandle] = field(default_factory=dict)

    def device_descriptor_bytes(self) -> bytes:
        """A standard 18-byte device descriptor carrying the vendor and product ids."""
        descriptor = bytearray(DEVICE_DESCRIPTOR_LENGTH)
        descriptor[0] = DEVICE_DESCRIPTOR_LENGTH
        descriptor[1] = DEVICE_DESCRIPTOR_TYPE
        descriptor[8:10] = self.vendor_id.to_bytes(2, "little")
        descriptor[10:12] = self.product_id.to_bytes(2, "little")
        return bytes(descriptor)