"""Port interfaces between the core and its platform adapters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from charm.contracts import (
    AdapterState,
    Checked,
    DeviceHandle,
    EncodedInputReport,
    HubPath,
    InterfaceScope,
    LoadConfigRequest,
    LoadConfigResult,
    MappingBundleRef,
    Outcome,
    PersistConfigRequest,
    PersistConfigResult,
    ProfileId,
    RawDescriptorRef,
    RawHidReportRef,
    StartRequest,
    StartResult,
    StopRequest,
    StopResult,
    Timestamp,
    blob,
    part,
    uint,
)

BLE_ADDRESS_LENGTH = 6


# --- BLE transport ---------------------------------------------------------


@dataclass
class BleTransportStatus(Outcome):
    """Status update reported by a BLE transport."""

    state: AdapterState = AdapterState.UNKNOWN


@dataclass
class BlePeerInfo:
    """A connected BLE peer: its six-byte address and bonding flag."""

    address: bytes = bytes(BLE_ADDRESS_LENGTH)
    bonded: bool = False

    def __post_init__(self) -> None:
        self.address = bytes(self.address)
        if len(self.address) != BLE_ADDRESS_LENGTH:
            raise ValueError(
                f"address must be {BLE_ADDRESS_LENGTH} bytes, got {len(self.address)}"
            )


@dataclass
class BondingMaterialRef(Checked):
    """Opaque bonding material held by a transport."""

    data: bytes = blob()


@dataclass
class NotifyInputReportRequest:
    report: EncodedInputReport = part(EncodedInputReport)


@dataclass
class NotifyInputReportResult(Outcome):
    """Outcome of sending one input report."""


class BleTransportPortListener(ABC):
    """Receives events from a BLE transport."""

    @abstractmethod
    def on_peer_connected(self, peer_info: BlePeerInfo) -> None:
        """A peer connected."""

    @abstractmethod
    def on_peer_disconnected(self, peer_info: BlePeerInfo) -> None:
        """A peer disconnected."""

    @abstractmethod
    def on_status_changed(self, status: BleTransportStatus) -> None:
        """The transport's status changed."""


class BleTransportPort(ABC):
    """Sends encoded input reports to a BLE host."""

    @abstractmethod
    def start(self, request: StartRequest) -> StartResult:
        """Start the transport."""

    @abstractmethod
    def stop(self, request: StopRequest) -> StopResult:
        """Stop the transport."""

    @abstractmethod
    def notify_input_report(self, request: NotifyInputReportRequest) -> NotifyInputReportResult:
        """Send one input report to the connected peer."""

    @abstractmethod
    def set_listener(self, listener: BleTransportPortListener | None) -> None:
        """Set the receiver of transport events."""


# --- Config store ----------------------------------------------------------


@dataclass
class ConfigVersion(Checked):
    value: int = uint(32)


@dataclass
class IntegrityMetadata(Checked):
    value: int = uint(32)


@dataclass
class PersistedConfigRecord(Checked):
    """What a config store currently holds."""

    mapping_bundle: MappingBundleRef = part(MappingBundleRef)
    profile_id: ProfileId = part(ProfileId)
    config_version: ConfigVersion = part(ConfigVersion)
    integrity: IntegrityMetadata = part(IntegrityMetadata)
    bonding_material: bytes = blob()


@dataclass
class ClearConfigRequest:
    """Request to erase the stored configuration."""


@dataclass
class ClearConfigResult(Outcome):
    """Outcome of erasing the stored configuration."""


class ConfigStorePort(ABC):
    """Persistent storage for the active configuration."""

    @abstractmethod
    def load_config(self, request: LoadConfigRequest) -> LoadConfigResult:
        """Load the stored configuration."""

    @abstractmethod
    def persist_config(self, request: PersistConfigRequest) -> PersistConfigResult:
        """Store a configuration."""

    @abstractmethod
    def clear_config(self, request: ClearConfigRequest) -> ClearConfigResult:
        """Erase the stored configuration."""

    @abstractmethod
    def peek_persisted_config(self) -> PersistedConfigRecord:
        """Return the stored record without loading it."""


# --- Time ------------------------------------------------------------------


@dataclass
class GetTimeRequest:
    """Request for the current time."""


@dataclass
class GetTimeResult(Outcome):
    timestamp: Timestamp = part(Timestamp)


class TimePort(ABC):
    """Source of monotonic timestamps."""

    @abstractmethod
    def get_time(self, request: GetTimeRequest) -> GetTimeResult:
        """Return the current time."""


# --- USB host --------------------------------------------------------------


@dataclass
class UsbHostStatus(Outcome):
    """Status update reported by a USB host."""

    state: AdapterState = AdapterState.UNKNOWN


@dataclass
class UsbEnumerationInfo(Checked):
    """Identity of an enumerated USB device."""

    device_handle: DeviceHandle = part(DeviceHandle)
    vendor_id: int = uint(16)
    product_id: int = uint(16)
    hub_path: HubPath = part(HubPath)


@dataclass
class DeviceDescriptorRef:
    device_handle: DeviceHandle = part(DeviceHandle)
    descriptor: RawDescriptorRef = part(RawDescriptorRef)


@dataclass
class InterfaceDescriptorRef(InterfaceScope):
    interface_number: int = uint(8)
    descriptor: RawDescriptorRef = part(RawDescriptorRef)


@dataclass
class ClaimInterfaceRequest(Checked):
    device_handle: DeviceHandle = part(DeviceHandle)
    interface_number: int = uint(8)


@dataclass
class ClaimInterfaceResult(Outcome):
    interface_handle: "InterfaceHandle" = part(InterfaceScope().interface_handle.__class__)


class UsbHostPortListener(ABC):
    """Receives events from a USB host."""

    @abstractmethod
    def on_device_connected(
        self,
        enumeration_info: UsbEnumerationInfo,
        device_descriptor: DeviceDescriptorRef,
    ) -> None:
        """A device was enumerated."""

    @abstractmethod
    def on_device_disconnected(self, device_handle: DeviceHandle) -> None:
        """A device went away."""

    @abstractmethod
    def on_interface_descriptor_available(
        self, interface_descriptor: InterfaceDescriptorRef
    ) -> None:
        """An interface's report descriptor is ready."""

    @abstractmethod
    def on_report_received(self, report_ref: RawHidReportRef) -> None:
        """An input report arrived."""

    @abstractmethod
    def on_status_changed(self, status: UsbHostStatus) -> None:
        """The host's status changed."""


class UsbHostPort(ABC):
    """Hosts HID devices over USB."""

    @abstractmethod
    def start(self, request: StartRequest) -> StartResult:
        """Start the host."""

    @abstractmethod
    def stop(self, request: StopRequest) -> StopResult:
        """Stop the host."""

    @abstractmethod
    def claim_interface(self, request: ClaimInterfaceRequest) -> ClaimInterfaceResult:
        """Claim an interface of a connected device."""

    @abstractmethod
    def set_listener(self, listener: UsbHostPortListener | None) -> None:
        """Set the receiver of host events."""