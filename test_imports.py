"""
Import structure tests for the Blink Bridge package
"""

import importlib

import pytest

import blink_bridge


MODULES = [
    "blink_bridge.core.config",
    "blink_bridge.core.data_types",
    "blink_bridge.core.exceptions",
    "blink_bridge.processing.decoder",
    "blink_bridge.processing.telemetry",
    "blink_bridge.processing.windows",
    "blink_bridge.processing.streams",
    "blink_bridge.processing.pipeline",
    "blink_bridge.detection.eye_state",
    "blink_bridge.detection.blink_detector",
    "blink_bridge.detection.alertness",
    "blink_bridge.acquisition.sources",
    "blink_bridge.communication.udp_sender",
    "blink_bridge.utils.device_finder",
    "blink_bridge.cli.main",
]


@pytest.mark.parametrize("module_name", MODULES)
def test_module_imports(module_name):
    assert importlib.import_module(module_name) is not None


@pytest.mark.parametrize("package", [
    "blink_bridge", "blink_bridge.core", "blink_bridge.processing",
    "blink_bridge.detection", "blink_bridge.acquisition",
    "blink_bridge.communication", "blink_bridge.utils", "blink_bridge.cli",
])
def test_package_exports_resolve(package):
    module = importlib.import_module(package)
    for name in module.__all__:
        assert hasattr(module, name), f"{package} does not export {name}"


def test_version():
    assert blink_bridge.__version__ == "1.0.0"
