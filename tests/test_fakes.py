from charm.contracts import (
    ContractStatus,
    DeviceHandle,
    ErrorCategory,
    FaultCode,
    InterfaceHandle,
    LoadConfigRequest,
    LoadConfigResult,
    MappingBundleRef,
    PersistConfigRequest,
    PersistConfigResult,
    ProfileId,
    RawHidReportRef,
    StartRequest,
    StartResult,
    StopRequest,
    StopResult,
    Timestamp,
)
from charm.fakes import (
    FakeBleTransportPort,
    FakeConfigStorePort,
    FakeTimePort,
    FakeUsbHostPort,
)
from charm.ports import (
    BlePeerInfo,
    BleTransportPortListener,
    BleTransportStatus,
    ClaimInterfaceRequest,
    ClaimInterfaceResult,
    ClearConfigRequest,
    ClearConfigResult,
    DeviceDescriptorRef,
    GetTimeRequest,
    InterfaceDescriptorRef,
    NotifyInputReportRequest,
    NotifyInputReportResult,
    UsbEnumerationInfo,
    UsbHostPortListener,
    UsbHostStatus,
)


class RecordingBleListener(BleTransportPortListener):
    def __init__(self):
        self.events = []

    def on_peer_connected(self, peer_info):
        self.events.append(("connected", peer_info))

    def on_peer_disconnected(self, peer_info):
        self.events.append(("disconnected", peer_info))

    def on_status_changed(self, status):
        self.events.append(("status", status))


class RecordingUsbListener(UsbHostPortListener):
    def __init__(self):
        self.events = []

    def on_device_connected(self, enumeration_info, device_descriptor):
        self.events.append(("connected", enumeration_info, device_descriptor))

    def on_device_disconnected(self, device_handle):
        self.events.append(("disconnected", device_handle))

    def on_interface_descriptor_available(self, interface_descriptor):
        self.events.append(("interface", interface_descriptor))

    def on_report_received(self, report_ref):
        self.events.append(("report", report_ref))

    def on_status_changed(self, status):
        self.events.append(("status", status))


# --- BLE transport ----------------------------------------------------------


def test_ble_fake_returns_preset_results():
    port = FakeBleTransportPort()
    port.start_result = StartResult(status=ContractStatus.OK)
    port.stop_result = StopResult(status=ContractStatus.REJECTED)
    port.notify_result = NotifyInputReportResult(status=ContractStatus.FAILED)
    assert port.start(StartRequest()).status == ContractStatus.OK
    assert port.stop(StopRequest()).status == ContractStatus.REJECTED
    assert (
        port.notify_input_report(NotifyInputReportRequest()).status
        == ContractStatus.FAILED
    )


def test_ble_fake_defaults_are_unspecified():
    port = FakeBleTransportPort()
    assert port.start(StartRequest()).status == ContractStatus.UNSPECIFIED


def test_ble_fake_forwards_events_to_listener_in_order():
    port = FakeBleTransportPort()
    listener = RecordingBleListener()
    port.set_listener(listener)
    peer = BlePeerInfo()
    status = BleTransportStatus(status=ContractStatus.OK)
    port.emit_peer_connected(peer)
    port.emit_peer_disconnected(peer)
    port.emit_status(status)
    assert [kind for kind, _ in listener.events] == [
        "connected",
        "disconnected",
        "status",
    ]
    assert listener.events[2][1] is status


def test_ble_fake_drops_events_without_listener():
    port = FakeBleTransportPort()
    listener = RecordingBleListener()
    port.set_listener(listener)
    port.set_listener(None)
    port.emit_peer_connected(BlePeerInfo())
    assert listener.events == []


# --- config store -----------------------------------------------------------


def test_config_store_counts_calls():
    store = FakeConfigStorePort()
    store.load_config(LoadConfigRequest())
    store.load_config(LoadConfigRequest())
    store.clear_config(ClearConfigRequest())
    store.persist_config(PersistConfigRequest())
    assert store.load_calls == 2
    assert store.clear_calls == 1
    assert store.persist_calls == 1


def test_config_store_returns_preset_load_and_clear_results():
    store = FakeConfigStorePort()
    store.load_result = LoadConfigResult(
        status=ContractStatus.OK,
        mapping_bundle=MappingBundleRef(bundle_id=42),
        profile_id=ProfileId(1337),
    )
    store.clear_result = ClearConfigResult(
        status=ContractStatus.FAILED,
        fault_code=FaultCode(ErrorCategory.PERSISTENCE_FAILURE, 5),
    )
    loaded = store.load_config(LoadConfigRequest())
    assert loaded.mapping_bundle.bundle_id == 42
    assert loaded.profile_id == ProfileId(1337)
    cleared = store.clear_config(ClearConfigRequest())
    assert cleared.fault_code.category == ErrorCategory.PERSISTENCE_FAILURE


def test_config_store_persists_on_ok():
    store = FakeConfigStorePort()
    store.persist_result = PersistConfigResult(status=ContractStatus.OK)
    request = PersistConfigRequest(
        mapping_bundle=MappingBundleRef(bundle_id=77),
        profile_id=ProfileId(3),
        bonding_material=b"\x01\x02",
    )
    result = store.persist_config(request)
    assert result.status == ContractStatus.OK
    assert store.last_persist_request is request
    record = store.peek_persisted_config()
    assert record.mapping_bundle.bundle_id == 77
    assert record.profile_id == ProfileId(3)
    assert record.bonding_material == b"\x01\x02"


def test_config_store_keeps_record_when_persist_fails():
    store = FakeConfigStorePort()
    store.persist_result = PersistConfigResult(status=ContractStatus.FAILED)
    before = store.peek_persisted_config()
    request = PersistConfigRequest(mapping_bundle=MappingBundleRef(bundle_id=77))
    store.persist_config(request)
    assert store.peek_persisted_config() == before
    assert store.last_persist_request.mapping_bundle.bundle_id == 77


# --- time -------------------------------------------------------------------


def test_time_fake_defaults_to_ok():
    clock = FakeTimePort()
    result = clock.get_time(GetTimeRequest())
    assert result.status == ContractStatus.OK
    assert result.timestamp == Timestamp()


def test_time_fake_reports_preset_time_and_fault():
    clock = FakeTimePort()
    clock.next_time = Timestamp(456)
    clock.status = ContractStatus.FAILED
    clock.fault_code = FaultCode(ErrorCategory.TIMEOUT, 9)
    result = clock.get_time(GetTimeRequest())
    assert result.timestamp.ticks == 456
    assert result.status == ContractStatus.FAILED
    assert result.fault_code == FaultCode(ErrorCategory.TIMEOUT, 9)


# --- USB host ---------------------------------------------------------------


def test_usb_fake_returns_preset_claim_result():
    port = FakeUsbHostPort()
    port.claim_result = ClaimInterfaceResult(
        status=ContractStatus.OK, interface_handle=InterfaceHandle(42)
    )
    result = port.claim_interface(ClaimInterfaceRequest())
    assert result.status == ContractStatus.OK
    assert result.interface_handle == InterfaceHandle(42)


def test_usb_fake_returns_preset_start_and_stop():
    port = FakeUsbHostPort()
    port.start_result = StartResult(status=ContractStatus.OK)
    port.stop_result = StopResult(status=ContractStatus.OK)
    assert port.start(StartRequest()).status == ContractStatus.OK
    assert port.stop(StopRequest()).status == ContractStatus.OK


def test_usb_fake_forwards_all_events():
    port = FakeUsbHostPort()
    listener = RecordingUsbListener()
    port.set_listener(listener)
    port.emit_device_connected(UsbEnumerationInfo(), DeviceDescriptorRef())
    port.emit_device_disconnected(DeviceHandle(7))
    port.emit_interface_descriptor(InterfaceDescriptorRef())
    report = RawHidReportRef(data=b"\x03\x20\x40")
    port.emit_report(report)
    port.emit_status(UsbHostStatus(status=ContractStatus.OK))
    kinds = [event[0] for event in listener.events]
    assert kinds == ["connected", "disconnected", "interface", "report", "status"]
    assert listener.events[1][1] == DeviceHandle(7)
    assert listener.events[3][1].data == b"\x03\x20\x40"


def test_usb_fake_drops_events_without_listener():
    port = FakeUsbHostPort()
    listener = RecordingUsbListener()
    port.emit_report(RawHidReportRef())
    port.set_listener(listener)
    port.set_listener(None)
    port.emit_device_disconnected(DeviceHandle(1))
    assert listener.events == []