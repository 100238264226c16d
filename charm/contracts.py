"""Shared value types, enumerations and request/result records."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import IntEnum
from typing import Any

MAX_HUB_PATH_DEPTH = 8


def uint(bits: int, default: int = 0) -> Any:
    """A dataclass field holding an unsigned integer of ``bits`` width."""
    return field(default=default, metadata={"uint": bits})


def sint(bits: int, default: int = 0) -> Any:
    """A dataclass field holding a signed integer of ``bits`` width."""
    return field(default=default, metadata={"sint": bits})


def blob() -> Any:
    """A dataclass field holding bytes; any bytes-like value is accepted."""
    return field(default=b"", metadata={"bytes": True})


def part(cls: type) -> Any:
    """A dataclass field defaulting to a fresh ``cls()``."""
    return field(default_factory=cls)


def check_uint(name: str, value: int, bits: int) -> None:
    if not 0 <= value < (1 << bits):
        raise ValueError(f"{name} must fit in {bits} unsigned bits, got {value!r}")


def _check_sint(name: str, value: int, bits: int) -> None:
    limit = 1 << (bits - 1)
    if not -limit <= value < limit:
        raise ValueError(f"{name} must fit in {bits} signed bits, got {value!r}")


class Checked:
    """Mixin for dataclasses: validates and normalises fields declared with
    :func:`uint`, :func:`sint` and :func:`blob`."""

    def __post_init__(self) -> None:
        for f in fields(self):  # type: ignore[arg-type]
            value = getattr(self, f.name)
            if f.metadata.get("bytes"):
                object.__setattr__(self, f.name, bytes(value))
            elif "uint" in f.metadata:
                check_uint(f.name, value, f.metadata["uint"])
            elif "sint" in f.metadata:
                _check_sint(f.name, value, f.metadata["sint"])


# --- common types -----------------------------------------------------------


@dataclass(frozen=True)
class _Ticks(Checked):
    ticks: int = uint(64)


@dataclass(frozen=True)
class Timestamp(_Ticks):
    """A point in time, in ticks."""


@dataclass(frozen=True)
class Duration(_Ticks):
    """A span of time, in ticks."""


# --- status and error types -------------------------------------------------


class ErrorCategory(IntEnum):
    INVALID_REQUEST = 0
    INVALID_STATE = 1
    UNSUPPORTED_CAPABILITY = 2
    CONTRACT_VIOLATION = 3
    RESOURCE_EXHAUSTED = 4
    CAPACITY_EXCEEDED = 5
    TIMEOUT = 6
    INTEGRITY_FAILURE = 7
    PERSISTENCE_FAILURE = 8
    ADAPTER_FAILURE = 9
    TRANSPORT_FAILURE = 10
    DEVICE_PROTOCOL_FAILURE = 11
    CONFIGURATION_REJECTED = 12
    RECOVERY_REQUIRED = 13


@dataclass
class FaultCode(Checked):
    """A fault category with a numeric reason."""

    category: ErrorCategory = ErrorCategory.CONTRACT_VIOLATION
    reason: int = uint(32)


class ContractStatus(IntEnum):
    UNSPECIFIED = 0
    OK = 1
    REJECTED = 2
    UNAVAILABLE = 3
    FAILED = 4


class FaultSeverity(IntEnum):
    INFO = 0
    WARNING = 1
    ERROR = 2
    FATAL = 3


@dataclass
class Outcome(Checked):
    """Status and fault code shared by every result and status record."""

    status: ContractStatus = ContractStatus.UNSPECIFIED
    fault_code: FaultCode = part(FaultCode)


# --- report types -----------------------------------------------------------


class HidReportType(IntEnum):
    INPUT = 0
    OUTPUT = 1
    FEATURE = 2


@dataclass
class ReportMeta(Checked):
    report_id: int = uint(8)
    report_type: HidReportType = HidReportType.INPUT
    declared_length: int = uint(16)


# --- identity types ---------------------------------------------------------


@dataclass(frozen=True)
class HubPath:
    """Chain of hub ports leading to a device; only the first ``depth`` are used."""

    ports: tuple[int, ...] = (0,) * MAX_HUB_PATH_DEPTH
    depth: int = 0

    def __post_init__(self) -> None:
        ports = tuple(self.ports)
        object.__setattr__(self, "ports", ports)
        if len(ports) != MAX_HUB_PATH_DEPTH:
            raise ValueError(
                f"hub path needs exactly {MAX_HUB_PATH_DEPTH} port slots, got {len(ports)}"
            )
        for port in ports:
            check_uint("port", port, 8)
        if not 0 <= self.depth <= MAX_HUB_PATH_DEPTH:
            raise ValueError(f"hub path depth out of range: {self.depth!r}")


@dataclass(frozen=True)
class ElementKey(Checked):
    """Identity of one input element across devices and reports."""

    vendor_id: int = uint(16)
    product_id: int = uint(16)
    hub_path: HubPath = part(HubPath)
    interface_number: int = uint(8)
    report_id: int = uint(8)
    usage_page: int = uint(16)
    usage: int = uint(16)
    collection_index: int = uint(16)
    logical_index: int = uint(16)


@dataclass(frozen=True)
class ElementKeyHash(Checked):
    value: int = uint(64)


@dataclass(frozen=True)
class _Id32(Checked):
    value: int = uint(32)


@dataclass(frozen=True)
class DeviceHandle(_Id32):
    """Identifies one connected device."""


@dataclass(frozen=True)
class InterfaceHandle(_Id32):
    """Identifies one claimed interface."""


@dataclass(frozen=True)
class ProfileId(_Id32):
    """Identifies one output profile."""


@dataclass
class MappingBundleRef(Checked):
    bundle_id: int = uint(32)
    version: int = uint(32)
    integrity: int = uint(32)


@dataclass
class InterfaceScope(Checked):
    """Device and interface handles that a record is about."""

    device_handle: DeviceHandle = part(DeviceHandle)
    interface_handle: InterfaceHandle = part(InterfaceHandle)


# --- events -----------------------------------------------------------------


class EventSource(IntEnum):
    UNKNOWN = 0
    SUPERVISOR = 1
    USB_HOST = 2
    BLE_TRANSPORT = 3
    CONFIG_STORE = 4
    DECODER = 5
    MAPPING_ENGINE = 6
    PROFILE_MANAGER = 7
    APPLICATION = 8


class ControlPlaneEventType(IntEnum):
    UNKNOWN = 0
    DEVICE_CONNECTED = 1
    DEVICE_DISCONNECTED = 2
    BLE_CONNECTED = 3
    BLE_DISCONNECTED = 4
    CONFIG_UPDATED = 5
    FAULT_RAISED = 6
    TICK = 7


class InputElementType(IntEnum):
    UNKNOWN = 0
    AXIS = 1
    BUTTON = 2
    HAT = 3
    TRIGGER = 4
    SCALAR = 5


class AdapterKind(IntEnum):
    UNKNOWN = 0
    USB_HOST = 1
    BLE_TRANSPORT = 2
    CONFIG_STORE = 3
    TIME = 4


class AdapterState(IntEnum):
    UNKNOWN = 0
    STOPPED = 1
    STARTING = 2
    READY = 3
    RUNNING = 4
    STOPPING = 5
    FAULTED = 6


class FaultDomain(IntEnum):
    UNKNOWN = 0
    CONTRACT = 1
    ADAPTER = 2
    TRANSPORT = 3
    PERSISTENCE = 4
    CONFIGURATION = 5
    RECOVERY = 6
    DEVICE_PROTOCOL = 7


@dataclass
class ControlPlaneEvent(Checked):
    event_type: ControlPlaneEventType = ControlPlaneEventType.UNKNOWN
    timestamp: Timestamp = part(Timestamp)
    source: EventSource = EventSource.UNKNOWN
    device_handle: DeviceHandle = part(DeviceHandle)
    interface_handle: InterfaceHandle = part(InterfaceHandle)
    fault_code: FaultCode = part(FaultCode)
    metadata: bytes = blob()


@dataclass
class RawHidReportRef(InterfaceScope):
    """A raw HID report as received from a device interface."""

    report_meta: ReportMeta = part(ReportMeta)
    timestamp: Timestamp = part(Timestamp)
    data: bytes = blob()


@dataclass
class InputElementEvent(Checked):
    element_key_hash: ElementKeyHash = part(ElementKeyHash)
    element_type: InputElementType = InputElementType.UNKNOWN
    value: int = sint(32)
    timestamp: Timestamp = part(Timestamp)
    device_handle: DeviceHandle = part(DeviceHandle)
    interface_handle: InterfaceHandle = part(InterfaceHandle)


@dataclass
class LogicalStateSnapshot:
    profile_id: ProfileId = part(ProfileId)
    timestamp: Timestamp = part(Timestamp)
    state: Any = None


@dataclass
class FaultEvent:
    domain: FaultDomain = FaultDomain.UNKNOWN
    fault_code: FaultCode = part(FaultCode)
    severity: FaultSeverity = FaultSeverity.INFO
    source: EventSource = EventSource.UNKNOWN
    timestamp: Timestamp = part(Timestamp)


@dataclass
class AdapterStatusEvent:
    adapter_kind: AdapterKind = AdapterKind.UNKNOWN
    state: AdapterState = AdapterState.UNKNOWN
    timestamp: Timestamp = part(Timestamp)


# --- registry types ---------------------------------------------------------


@dataclass
class ActiveProfileRef:
    profile_id: ProfileId = part(ProfileId)


@dataclass
class ActiveMappingBundleRef:
    mapping_bundle: MappingBundleRef = part(MappingBundleRef)


@dataclass
class FaultRecordRef:
    fault_code: FaultCode = part(FaultCode)
    severity: FaultSeverity = FaultSeverity.INFO
    timestamp: Timestamp = part(Timestamp)


@dataclass
class DecodePlanRef:
    plan: Any = None


@dataclass
class RegistryEntry(InterfaceScope):
    interface_number: int = uint(8)
    decode_plan: DecodePlanRef = part(DecodePlanRef)


# --- requests and results ---------------------------------------------------


@dataclass
class StartRequest:
    """Request to start an adapter."""


@dataclass
class StartResult(Outcome):
    """Outcome of a start request."""


@dataclass
class StopRequest:
    """Request to stop an adapter."""


@dataclass
class StopResult(Outcome):
    """Outcome of a stop request."""


@dataclass
class ActivateMappingBundleRequest:
    mapping_bundle: MappingBundleRef = part(MappingBundleRef)


@dataclass
class ActivateMappingBundleResult(Outcome):
    """Outcome of activating a mapping bundle."""


@dataclass
class SelectProfileRequest:
    profile_id: ProfileId = part(ProfileId)


@dataclass
class SelectProfileResult(Outcome):
    """Outcome of selecting a profile."""


@dataclass
class PersistConfigRequest(Checked):
    mapping_bundle: MappingBundleRef = part(MappingBundleRef)
    profile_id: ProfileId = part(ProfileId)
    bonding_material: bytes = blob()


@dataclass
class PersistConfigResult(Outcome):
    """Outcome of persisting a configuration."""


@dataclass
class LoadConfigRequest:
    """Request to load the stored configuration."""


@dataclass
class LoadConfigResult(Outcome):
    mapping_bundle: MappingBundleRef = part(MappingBundleRef)
    profile_id: ProfileId = part(ProfileId)
    bonding_material: bytes = blob()


@dataclass
class ModeTransitionRequest:
    """Request to move the supervisor to ``target_mode``."""

    target_mode: IntEnum | None = None


@dataclass
class ModeTransitionResult(Outcome):
    """Outcome of a mode transition."""


@dataclass
class RecoveryRequest:
    """Request to move the supervisor's recovery state to ``target_state``."""

    target_state: IntEnum | None = None


@dataclass
class RecoveryResult(Outcome):
    """Outcome of a recovery request."""


# --- transport types --------------------------------------------------------


@dataclass
class RawDescriptorRef(Checked):
    data: bytes = blob()


@dataclass
class EncodedInputReport(Checked):
    report_id: int = uint(8)
    data: bytes = blob()


# --- configuration transport types ------------------------------------------


class ConfigTransportCommand(IntEnum):
    PERSIST = 1
    LOAD = 2
    CLEAR = 3
    GET_CAPABILITIES = 4


@dataclass
class ConfigTransportRequest(Checked):
    protocol_version: int = uint(32)
    request_id: int = uint(32)
    command: ConfigTransportCommand = ConfigTransportCommand.GET_CAPABILITIES
    mapping_bundle: MappingBundleRef = part(MappingBundleRef)
    profile_id: ProfileId = part(ProfileId)
    bonding_material: bytes = blob()
    integrity: int = uint(32)


@dataclass
class ConfigTransportCapabilities:
    protocol_version: int = 0
    supports_persist: bool = False
    supports_load: bool = False
    supports_clear: bool = False
    supports_get_capabilities: bool = False
    supports_ble_transport: bool = False


@dataclass
class ConfigTransportResponse(Checked):
    protocol_version: int = 0
    request_id: int = 0
    command: ConfigTransportCommand = ConfigTransportCommand.GET_CAPABILITIES
    status: ContractStatus = ContractStatus.UNSPECIFIED
    fault_code: FaultCode = part(FaultCode)
    mapping_bundle: MappingBundleRef = part(MappingBundleRef)
    profile_id: ProfileId = part(ProfileId)
    bonding_material: bytes = blob()
    capabilities: ConfigTransportCapabilities = part(ConfigTransportCapabilities)