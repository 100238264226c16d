"""Scriptable in-memory port implementations for exercising the core."""

from __future__ import annotations

import dataclasses

from charm.contracts import (
    ContractStatus,
    DeviceHandle,
    FaultCode,
    LoadConfigRequest,
    LoadConfigResult,
    PersistConfigRequest,
    PersistConfigResult,
    RawHidReportRef,
    StartRequest,
    StartResult,
    StopRequest,
    StopResult,
    Timestamp,
)
from charm.ports import (
    BlePeerInfo,
    BleTransportPort,
    BleTransportPortListener,
    BleTransportStatus,
    ClaimInterfaceRequest,
    ClaimInterfaceResult,
    ClearConfigRequest,
    ClearConfigResult,
    ConfigStorePort,
    DeviceDescriptorRef,
    GetTimeRequest,
    GetTimeResult,
    InterfaceDescriptorRef,
    NotifyInputReportRequest,
    NotifyInputReportResult,
    PersistedConfigRecord,
    TimePort,
    UsbEnumerationInfo,
    UsbHostPort,
    UsbHostPortListener,
    UsbHostStatus,
)


class FakeBleTransportPort(BleTransportPort):
    """BLE transport that returns preset results and emits events on demand."""

    def __init__(self) -> None:
        self.start_result = StartResult()
        self.stop_result = StopResult()
        self.notify_result = NotifyInputReportResult()
        self.listener: BleTransportPortListener | None = None

    def emit_peer_connected(self, peer_info: BlePeerInfo) -> None:
        if self.listener is not None:
            self.listener.on_peer_connected(peer_info)

    def emit_peer_disconnected(self, peer_info: BlePeerInfo) -> None:
        if self.listener is not None:
            self.listener.on_peer_disconnected(peer_info)

    def emit_status(self, status: BleTransportStatus) -> None:
        if self.listener is not None:
            self.listener.on_status_changed(status)

    def start(self, request: StartRequest) -> StartResult:
        return self.start_result

    def stop(self, request: StopRequest) -> StopResult:
        return self.stop_result

    def notify_input_report(
        self, request: NotifyInputReportRequest
    ) -> NotifyInputReportResult:
        return self.notify_result

    def set_listener(self, listener: BleTransportPortListener | None) -> None:
        self.listener = listener


class FakeConfigStorePort(ConfigStorePort):
    """Config store that counts calls and keeps the last persisted config."""

    def __init__(self) -> None:
        self.load_result = LoadConfigResult()
        self.persist_result = PersistConfigResult()
        self.clear_result = ClearConfigResult()
        self.persisted_config = PersistedConfigRecord()
        self.last_persist_request = PersistConfigRequest()
        self.load_calls = 0
        self.persist_calls = 0
        self.clear_calls = 0

    def load_config(self, request: LoadConfigRequest) -> LoadConfigResult:
        self.load_calls += 1
        return self.load_result

    def persist_config(self, request: PersistConfigRequest) -> PersistConfigResult:
        self.persist_calls += 1
        self.last_persist_request = request
        if self.persist_result.status == ContractStatus.OK:
            self.persisted_config = dataclasses.replace(
                self.persisted_config,
                mapping_bundle=request.mapping_bundle,
                profile_id=request.profile_id,
                bonding_material=request.bonding_material,
            )
        return self.persist_result

    def clear_config(self, request: ClearConfigRequest) -> ClearConfigResult:
        self.clear_calls += 1
        return self.clear_result

    def peek_persisted_config(self) -> PersistedConfigRecord:
        return self.persisted_config


class FakeTimePort(TimePort):
    """Clock that reports a preset time and status."""

    def __init__(self) -> None:
        self.next_time = Timestamp()
        self.status = ContractStatus.OK
        self.fault_code = FaultCode()

    def get_time(self, request: GetTimeRequest) -> GetTimeResult:
        return GetTimeResult(
            status=self.status, fault_code=self.fault_code, timestamp=self.next_time
        )


class FakeUsbHostPort(UsbHostPort):
    """USB host that returns preset results and emits events on demand."""

    def __init__(self) -> None:
        self.start_result = StartResult()
        self.stop_result = StopResult()
        self.claim_result = ClaimInterfaceResult()
        self.listener: UsbHostPortListener | None = None

    def emit_device_connected(
        self, info: UsbEnumerationInfo, descriptor: DeviceDescriptorRef
    ) -> None:
        if self.listener is not None:
            self.listener.on_device_connected(info, descriptor)

    def emit_device_disconnected(self, device_handle: DeviceHandle) -> None:
        if self.listener is not None:
            self.listener.on_device_disconnected(device_handle)

    def emit_interface_descriptor(self, descriptor: InterfaceDescriptorRef) -> None:
        if self.listener is not None:
            self.listener.on_interface_descriptor_available(descriptor)

    def emit_report(self, report_ref: RawHidReportRef) -> None:
        if self.listener is not None:
            self.listener.on_report_received(report_ref)

    def emit_status(self, status: UsbHostStatus) -> None:
        if self.listener is not None:
            self.listener.on_status_changed(status)

    def start(self, request: StartRequest) -> StartResult:
        return self.start_result

    def stop(self, request: StopRequest) -> StopResult:
        return self.stop_result

    def claim_interface(self, request: ClaimInterfaceRequest) -> ClaimInterfaceResult:
        return self.claim_result

    def set_listener(self, listener: UsbHostPortListener | None) -> None:
        self.listener = listener