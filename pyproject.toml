[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "charm"
version = "0.1.0"
description = "Contracts, ports, fakes and a USB HID host adapter for a USB-to-BLE gamepad bridge"
requires-python = ">=3.10"
dependencies = []
keywords = ["usb", "hid", "gamepad", "ble", "host-adapter", "ports-and-adapters"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Hardware :: Universal Serial Bus (USB) :: Human Interface Device (HID)",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["charm"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
