"""USB host adapter that turns HID driver events into port listener callbacks."""

from __future__ import annotations

import threading
import time
from typing import Any, Protocol

from charm.contracts import (
    AdapterState,
    ContractStatus,
    DeviceHandle,
    ErrorCategory,
    FaultCode,
    InterfaceHandle,
    RawDescriptorRef,
    RawHidReportRef,
    ReportMeta,
    StartRequest,
    StartResult,
    StopRequest,
    StopResult,
    Timestamp,
)
from charm.ports import (
    ClaimInterfaceRequest,
    ClaimInterfaceResult,
    DeviceDescriptorRef,
    InterfaceDescriptorRef,
    UsbEnumerationInfo,
    UsbHostPort,
    UsbHostPortListener,
    UsbHostStatus,
)
from charm.usb_contexts import DeviceContext, HidInterfaceContext

MAX_INPUT_REPORT_BYTES = 128

FAULT_START_INSTALL_FAILED = 100
FAULT_START_DRIVER_INSTALL_FAILED = 101
FAULT_HOST_EVENT_LOOP_FAULT = 102
FAULT_OPEN_DEVICE_FAILED = 103
FAULT_OPEN_INTERFACE_FAILED = 104
FAULT_INPUT_REPORT_READ_FAILED = 105
FAULT_TRANSFER_ERROR = 106


class HostStack(Protocol):
    """The USB host and HID driver stack the adapter brings up and tears down."""

    def install(self) -> bool: ...

    def uninstall(self) -> None: ...


def _now_micros() -> Timestamp:
    return Timestamp(time.monotonic_ns() // 1000)


class UsbHostAdapter(UsbHostPort):
    """USB host port backed by HID driver events.

    Without a host stack the adapter runs in simulation mode: starting always
    succeeds and every interface claim is granted a fresh handle. With a host
    stack, claims only succeed for interfaces the driver has reported.
    """

    def __init__(self, host_stack: HostStack | None = None) -> None:
        self._lock = threading.RLock()
        self._host_stack = host_stack
        self._listener: UsbHostPortListener | None = None
        self._started = False
        self._next_interface_handle_id = 1
        self._next_device_handle_id = 1
        self._devices_by_address: dict[int, DeviceContext] = {}
        self._interfaces_by_handle: dict[Any, HidInterfaceContext] = {}
        self._device_handle_to_address: dict[int, int] = {}

    # --- lifecycle ----------------------------------------------------------

    def __enter__(self) -> UsbHostAdapter:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Detach the listener and stop the adapter if it is running."""
        with self._lock:
            self._listener = None
        self.stop(StopRequest())

    @property
    def started(self) -> bool:
        with self._lock:
            return self._started

    def start(self, request: StartRequest) -> StartResult:
        with self._lock:
            if self._started:
                return StartResult(status=ContractStatus.REJECTED)
            if not self._install_host_stack():
                self._emit_status(
                    ContractStatus.FAILED,
                    AdapterState.FAULTED,
                    ErrorCategory.ADAPTER_FAILURE,
                    FAULT_START_INSTALL_FAILED,
                )
                return StartResult(
                    status=ContractStatus.FAILED,
                    fault_code=FaultCode(
                        ErrorCategory.ADAPTER_FAILURE, FAULT_START_INSTALL_FAILED
                    ),
                )
            self._started = True
            self._emit_status(
                ContractStatus.OK,
                AdapterState.READY,
                ErrorCategory.CONTRACT_VIOLATION,
                0,
            )
            return StartResult(status=ContractStatus.OK)

    def stop(self, request: StopRequest) -> StopResult:
        with self._lock:
            if not self._started:
                return StopResult(status=ContractStatus.REJECTED)
            self._started = False
            if self._host_stack is not None:
                self._host_stack.uninstall()
            self._devices_by_address.clear()
            self._device_handle_to_address.clear()
            self._interfaces_by_handle.clear()
            self._emit_status(
                ContractStatus.OK,
                AdapterState.STOPPED,
                ErrorCategory.CONTRACT_VIOLATION,
                0,
            )
            return StopResult(status=ContractStatus.OK)

    def claim_interface(self, request: ClaimInterfaceRequest) -> ClaimInterfaceResult:
        with self._lock:
            if not self._started:
                return ClaimInterfaceResult(status=ContractStatus.REJECTED)
            if self._host_stack is None:
                handle = InterfaceHandle(self._next_interface_handle_id)
                self._next_interface_handle_id += 1
                return ClaimInterfaceResult(
                    status=ContractStatus.OK, interface_handle=handle
                )
            handle = self._resolve_interface_handle(
                request.device_handle, request.interface_number
            )
            if handle.value == 0:
                return ClaimInterfaceResult(
                    status=ContractStatus.REJECTED,
                    fault_code=FaultCode(
                        ErrorCategory.INVALID_REQUEST, FAULT_OPEN_INTERFACE_FAILED
                    ),
                    interface_handle=handle,
                )
            return ClaimInterfaceResult(status=ContractStatus.OK, interface_handle=handle)

    def set_listener(self, listener: UsbHostPortListener | None) -> None:
        with self._lock:
            self._listener = listener

    # --- simulated dispatch -------------------------------------------------

    def _listener_if_started(self) -> UsbHostPortListener | None:
        with self._lock:
            return self._listener if self._started else None

    def simulate_device_connected(
        self, info: UsbEnumerationInfo, desc: DeviceDescriptorRef
    ) -> None:
        listener = self._listener_if_started()
        if listener is not None:
            listener.on_device_connected(info, desc)

    def simulate_device_disconnected(self, device_handle: DeviceHandle) -> None:
        listener = self._listener_if_started()
        if listener is not None:
            listener.on_device_disconnected(device_handle)

    def simulate_interface_descriptor_available(
        self, desc: InterfaceDescriptorRef
    ) -> None:
        listener = self._listener_if_started()
        if listener is not None:
            listener.on_interface_descriptor_available(desc)

    def simulate_report_received(self, report_ref: RawHidReportRef) -> None:
        listener = self._listener_if_started()
        if listener is not None:
            listener.on_report_received(report_ref)

    def simulate_status_changed(self, status: UsbHostStatus) -> None:
        with self._lock:
            listener = self._listener
        if listener is not None:
            listener.on_status_changed(status)

    # --- HID driver events --------------------------------------------------

    def handle_driver_connected(
        self,
        hid_handle: Any,
        address: int,
        interface_number: int,
        vendor_id: int,
        product_id: int,
        report_descriptor: bytes | None,
    ) -> InterfaceHandle | None:
        """Record a newly opened HID interface and announce it.

        Returns the interface handle assigned to it, or None when stopped.
        """
        with self._lock:
            if not self._started:
                return None

            device = self._devices_by_address.get(address)
            if device is None:
                device = DeviceContext(
                    device_handle=DeviceHandle(self._next_device_handle_id),
                    device_address=address,
                    vendor_id=vendor_id,
                    product_id=product_id,
                )
                self._next_device_handle_id += 1
                self._device_handle_to_address[device.device_handle.value] = address
                self._devices_by_address[address] = device
                if self._listener is not None:
                    self._listener.on_device_connected(
                        UsbEnumerationInfo(
                            device_handle=device.device_handle,
                            vendor_id=device.vendor_id,
                            product_id=device.product_id,
                            hub_path=device.hub_path,
                        ),
                        DeviceDescriptorRef(
                            device_handle=device.device_handle,
                            descriptor=RawDescriptorRef(
                                data=device.device_descriptor_bytes()
                            ),
                        ),
                    )

            interface = HidInterfaceContext(
                device_handle=device.device_handle,
                interface_handle=InterfaceHandle(self._next_interface_handle_id),
                interface_number=interface_number,
                device_address=address,
                hid_handle=hid_handle,
                report_descriptor=report_descriptor or b"",
            )
            self._next_interface_handle_id += 1
            device.claimed_interfaces[interface_number] = interface.interface_handle
            self._interfaces_by_handle[hid_handle] = interface

            if self._listener is not None:
                self._listener.on_interface_descriptor_available(
                    InterfaceDescriptorRef(
                        device_handle=interface.device_handle,
                        interface_handle=interface.interface_handle,
                        interface_number=interface.interface_number,
                        descriptor=RawDescriptorRef(data=interface.report_descriptor),
                    )
                )
            return interface.interface_handle

    def handle_input_report(
        self,
        hid_handle: Any,
        data: bytes | None,
        timestamp: Timestamp | None = None,
    ) -> None:
        """Forward an input report; ``data`` of None means the read failed."""
        if data is None:
            with self._lock:
                self._emit_status(
                    ContractStatus.FAILED,
                    AdapterState.RUNNING,
                    ErrorCategory.TRANSPORT_FAILURE,
                    FAULT_INPUT_REPORT_READ_FAILED,
                )
            return

        payload = bytes(data[:MAX_INPUT_REPORT_BYTES])
        with self._lock:
            interface = self._interfaces_by_handle.get(hid_handle)
            if not self._started or self._listener is None or interface is None:
                return
            report = RawHidReportRef(
                device_handle=interface.device_handle,
                interface_handle=interface.interface_handle,
                report_meta=ReportMeta(report_id=payload[0] if payload else 0),
                timestamp=timestamp if timestamp is not None else _now_micros(),
                data=payload,
            )
            self._listener.on_report_received(report)

    def handle_transfer_error(self, hid_handle: Any) -> None:
        with self._lock:
            if not self._started:
                return
            self._emit_status(
                ContractStatus.FAILED,
                AdapterState.RUNNING,
                ErrorCategory.TRANSPORT_FAILURE,
                FAULT_TRANSFER_ERROR,
            )

    def handle_disconnected(self, hid_handle: Any) -> None:
        with self._lock:
            interface = self._interfaces_by_handle.pop(hid_handle, None)
            if interface is None:
                return
            device = self._devices_by_address.get(interface.device_address)
            if device is None:
                return
            device.claimed_interfaces.pop(interface.interface_number, None)
            if device.claimed_interfaces:
                return
            if self._listener is not None:
                self._listener.on_device_disconnected(interface.device_handle)
            self._device_handle_to_address.pop(interface.device_handle.value, None)
            del self._devices_by_address[interface.device_address]

    # --- internals ----------------------------------------------------------

    def _install_host_stack(self) -> bool:
        if self._host_stack is None:
            return True
        return bool(self._host_stack.install())

    def _emit_status(
        self,
        status: ContractStatus,
        state: AdapterState,
        category: ErrorCategory,
        reason: int,
    ) -> None:
        if self._listener is None:
            return
        self._listener.on_status_changed(
            UsbHostStatus(
                status=status, fault_code=FaultCode(category, reason), state=state
            )
        )

    def _resolve_interface_handle(
        self, device_handle: DeviceHandle, interface_number: int
    ) -> InterfaceHandle:
        address = self._device_handle_to_address.get(device_handle.value)
        if address is None:
            return InterfaceHandle()
        device = self._devices_by_address.get(address)
        if device is None:
            return InterfaceHandle()
        return device.claimed_interfaces.get(interface_number, InterfaceHandle())