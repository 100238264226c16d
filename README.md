# charm

Building blocks for a bridge that takes input from USB HID game controllers
and presents it as a Bluetooth LE gamepad. The package holds:

- `charm.contracts`: the shared value types: handles (`DeviceHandle`,
  `InterfaceHandle`, `ProfileId`), `FaultCode`, `ContractStatus`, events,
  and the request and result records. Integer fields are range-checked on
  construction and raise `ValueError` when a value does not fit its width.
- `charm.ports`: the abstract interfaces `UsbHostPort`, `BleTransportPort`,
  `ConfigStorePort` and `TimePort`, the listener interfaces
  `UsbHostPortListener` and `BleTransportPortListener`, and their records.
- `charm.usb_contexts`: `DeviceContext` and `HidInterfaceContext`, the
  records the host adapter keeps per device and per HID interface.
  `DeviceContext.device_descriptor_bytes()` builds an 18-byte device
  descriptor carrying the vendor and product ids.
- `charm.fakes`: `FakeUsbHostPort`, `FakeBleTransportPort`,
  `FakeConfigStorePort` and `FakeTimePort`, which return preset results
  (set through attributes such as `start_result` or `load_result`), count
  calls where useful, and emit listener events on demand.
- `charm.usb_host_adapter`: `UsbHostAdapter`, a USB host port that tracks
  devices and interfaces reported by HID driver events and passes them on
  to a listener.

## Installing

```
pip install .
```

Install the test extra and run the tests with:

```
pip install ".[test]"
pytest
```

## Example

```python
from charm.contracts import ContractStatus, StartRequest, Timestamp
from charm.ports import UsbHostPortListener
from charm.usb_host_adapter import UsbHostAdapter


class Printer(UsbHostPortListener):
    def on_device_connected(self, enumeration_info, device_descriptor):
        print("connected", enumeration_info)

    def on_device_disconnected(self, device_handle):
        print("disconnected", device_handle)

    def on_interface_descriptor_available(self, interface_descriptor):
        print("interface", interface_descriptor)

    def on_report_received(self, report_ref):
        print("report", report_ref)

    def on_status_changed(self, status):
        print("status", status.state)


with UsbHostAdapter() as adapter:
    adapter.set_listener(Printer())
    result = adapter.start(StartRequest())
    assert result.status is ContractStatus.OK

    # Driver events feed the adapter, which tracks devices and interfaces.
    interface_handle = adapter.handle_driver_connected(
        hid_handle=1,
        address=1,
        interface_number=0,
        vendor_id=0x1234,
        product_id=0x5678,
        report_descriptor=b"\x05\x01\x09\x05",
    )
    adapter.handle_input_report(1, b"\x01\x02\x03", timestamp=Timestamp(100))
    adapter.handle_disconnected(1)
```

Leaving the `with` block calls `close()`, which detaches the listener and
stops the adapter if it is running.

## How the host adapter behaves

- `start` is rejected when already started; `stop` is rejected when not
  started. Each successful call reports a status change to the listener
  (`AdapterState.READY`, then `AdapterState.STOPPED`), and `stop` forgets
  every tracked device and interface.
- `UsbHostAdapter` takes an optional host stack: any object with
  `install() -> bool` and `uninstall()` (the `HostStack` protocol). If
  `install` returns false, `start` fails with `ErrorCategory.ADAPTER_FAILURE`
  and reason `FAULT_START_INSTALL_FAILED`.
- Without a host stack, `claim_interface` grants a fresh, non-zero interface
  handle on every call once started. With one, it succeeds only for an
  interface that `handle_driver_connected` has reported, and otherwise is
  rejected with `ErrorCategory.INVALID_REQUEST` and reason
  `FAULT_OPEN_INTERFACE_FAILED`.
- `handle_driver_connected` announces a device the first time its address
  is seen, then announces the interface with its report descriptor.
- `handle_input_report` forwards the report (truncated to
  `MAX_INPUT_REPORT_BYTES`) with its first byte as report id; passing
  `None` as data reports a read failure as a `TRANSPORT_FAILURE` status.
- `handle_transfer_error` reports a `TRANSPORT_FAILURE` status.
- `handle_disconnected` drops the interface and announces the device gone
  once its last interface is gone.
- The `simulate_*` methods pass an event straight to the listener, but only
  while started (`simulate_status_changed` always passes it on).

Operations report their outcome as a result object holding a
`ContractStatus` and a `FaultCode`, the same way on every port, so callers
can pass faults on without losing anything.

## What this package does not do

- It does not talk to USB hardware. The host adapter is driven by calls to
  its `handle_*` methods; bringing up a real USB and HID driver stack is up
  to the host stack object you supply.
- It has no HID descriptor parser, report decoder, mapping engine, profile
  encoder or supervisor, and no BLE transport or configuration store beyond
  the abstract ports and the fakes.
- It provides no command-line program.