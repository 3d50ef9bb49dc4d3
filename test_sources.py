"""
BLE sensor source tests with fake bleak clients
"""

import asyncio
import time

from bleak.exc import BleakDBusError, BleakDeviceNotFoundError, BleakError

from blink_bridge.acquisition.sources import BleSensorSource
from blink_bridge.core.config import (
    NUS_RX_CHARACTERISTIC_UUID, NUS_SERVICE_UUID, NUS_TX_CHARACTERISTIC_UUID,
)
from blink_bridge.core.exceptions import (
    DeviceNotFoundError, PermissionDeniedError, SensorConnectionError, ServiceNotFoundError,
)


class FakeCharacteristic:
    def __init__(self, uuid, properties=("notify",)):
        self.uuid = uuid
        self.properties = list(properties)


class FakeService:
    def __init__(self, uuid, characteristics):
        self.uuid = uuid
        self.characteristics = characteristics

    def get_characteristic(self, uuid):
        for characteristic in self.characteristics:
            if characteristic.uuid == uuid:
                return characteristic
        return None


class FakeServices:
    def __init__(self, services):
        self._services = services

    def __iter__(self):
        return iter(self._services)

    def get_service(self, uuid):
        for service in self._services:
            if service.uuid == uuid:
                return service
        return None

    def get_characteristic(self, uuid):
        for service in self._services:
            characteristic = service.get_characteristic(uuid)
            if characteristic is not None:
                return characteristic
        return None


def nus_services():
    return FakeServices([FakeService(NUS_SERVICE_UUID, [
        FakeCharacteristic(NUS_TX_CHARACTERISTIC_UUID),
        FakeCharacteristic(NUS_RX_CHARACTERISTIC_UUID, ("write-without-response",)),
    ])])


class FakeClient:
    def __init__(self, device, disconnected_callback=None, services=None, gate=None):
        self.device = device
        self.disconnected_callback = disconnected_callback
        self.services = services or nus_services()
        self.gate = gate
        self.is_connected = False
        self.notify_callback = None
        self.stop_notify_calls = 0
        self.disconnect_calls = 0
        self.writes = []

    async def connect(self):
        if self.gate is not None:
            await self.gate.wait()
        self.is_connected = True

    async def start_notify(self, characteristic, callback):
        self.notify_callback = callback

    async def stop_notify(self, characteristic):
        self.stop_notify_calls += 1

    async def disconnect(self):
        self.disconnect_calls += 1
        self.is_connected = False

    async def write_gatt_char(self, characteristic, data, response=False):
        self.writes.append((characteristic.uuid, bytes(data)))


class ClientFactory:
    """Hands out FakeClients, optionally gated or with custom services"""

    def __init__(self, gates=(), services=None):
        self.gates = list(gates)
        self.services = services
        self.created = []

    def __call__(self, device, disconnected_callback=None):
        gate = self.gates.pop(0) if self.gates else None
        client = FakeClient(device, disconnected_callback, self.services, gate)
        self.created.append(client)
        return client


async def found_device(address, timeout):
    return "AA:BB:CC:DD:EE:FF"


def make_source(factory, received=None, finder=found_device, **kwargs):
    kwargs.setdefault("min_interval_ms", 0)
    kwargs.setdefault("mtu_delay_ms", 0)
    return BleSensorSource(
        address="AA:BB:CC:DD:EE:FF",
        on_notification=(lambda sender, data: received.append(bytes(data)))
        if received is not None else None,
        client_factory=factory,
        device_finder=finder,
        **kwargs,
    )


def test_connect_enables_notifications():
    factory = ClientFactory()
    received = []
    source = make_source(factory, received)

    assert asyncio.run(source.connect()) is True

    client = factory.created[0]
    assert source.connection_state == "connected"
    assert source.is_connected
    assert source.client is client
    assert source.characteristic.uuid == NUS_TX_CHARACTERISTIC_UUID
    assert source.error is None

    client.notify_callback(None, bytearray(b"1900\n"))
    assert received == [b"1900\n"]


def test_device_not_found_is_reported():
    async def no_device(address, timeout):
        return None

    source = make_source(ClientFactory(), finder=no_device)
    assert asyncio.run(source.connect()) is False
    assert isinstance(source.last_error, DeviceNotFoundError)
    assert source.connection_state == "disconnected"
    assert source.error


def test_bleak_errors_are_categorized():
    async def missing(address, timeout):
        raise BleakDeviceNotFoundError(address)

    async def denied(address, timeout):
        raise PermissionError("no access")

    async def failed(address, timeout):
        raise BleakError("adapter busy")

    source = make_source(ClientFactory(), finder=missing)
    asyncio.run(source.connect())
    assert source.error == DeviceNotFoundError.user_message

    source = make_source(ClientFactory(), finder=denied)
    asyncio.run(source.connect())
    assert isinstance(source.last_error, PermissionDeniedError)
    assert source.error == PermissionDeniedError.user_message

    source = make_source(ClientFactory(), finder=failed)
    asyncio.run(source.connect())
    assert type(source.last_error) is SensorConnectionError
    assert "adapter busy" in source.error


def test_bluez_refusals_are_permission_errors():
    async def not_permitted(address, timeout):
        raise BleakDBusError("org.bluez.Error.NotPermitted", [])

    async def not_authorized(address, timeout):
        raise BleakDBusError("org.bluez.Error.NotAuthorized", [])

    async def in_progress(address, timeout):
        raise BleakDBusError("org.bluez.Error.InProgress", [])

    for finder in (not_permitted, not_authorized):
        source = make_source(ClientFactory(), finder=finder)
        asyncio.run(source.connect())
        assert isinstance(source.last_error, PermissionDeniedError)
        assert source.error == PermissionDeniedError.user_message

    source = make_source(ClientFactory(), finder=in_progress)
    asyncio.run(source.connect())
    assert type(source.last_error) is SensorConnectionError


def test_missing_nus_falls_back_to_any_notify_characteristic():
    services = FakeServices([
        FakeService("0000180f-0000-1000-8000-00805f9b34fb",
                    [FakeCharacteristic("00002a19-0000-1000-8000-00805f9b34fb", ("read",))]),
        FakeService("0000180d-0000-1000-8000-00805f9b34fb",
                    [FakeCharacteristic("00002a37-0000-1000-8000-00805f9b34fb")]),
    ])
    source = make_source(ClientFactory(services=services))

    assert asyncio.run(source.connect()) is True
    assert source.characteristic.uuid == "00002a37-0000-1000-8000-00805f9b34fb"


def test_missing_nus_without_discovery_releases_client():
    services = FakeServices([])
    factory = ClientFactory(services=services)
    source = make_source(factory, auto_discover=False)

    assert asyncio.run(source.connect()) is False
    assert isinstance(source.last_error, ServiceNotFoundError)
    assert factory.created[0].disconnect_calls == 1
    assert source.client is None


def test_newer_attempt_supersedes_in_flight_attempt():
    async def scenario():
        gate = asyncio.Event()
        factory = ClientFactory(gates=[gate])
        received = []
        source = make_source(factory, received)

        first = asyncio.create_task(source.connect())
        while not factory.created:
            await asyncio.sleep(0)

        second_ok = await source.connect()
        gate.set()
        first_ok = await first
        return source, factory, received, first_ok, second_ok

    source, factory, received, first_ok, second_ok = asyncio.run(scenario())
    stale, current = factory.created

    assert second_ok is True
    assert first_ok is False
    assert stale.disconnect_calls == 1
    assert stale.notify_callback is None
    assert source.client is current
    assert source.connection_state == "connected"
    assert source.error is None

    # late events from the stale attempt change nothing
    stale.disconnected_callback(stale)
    assert source.connection_state == "connected"
    current.notify_callback(None, bytearray(b"open"))
    assert received == [b"open"]


def test_disconnect_releases_connection_and_ignores_late_notifications():
    factory = ClientFactory()
    received = []
    source = make_source(factory, received)

    async def scenario():
        await source.connect()
        await source.disconnect()

    asyncio.run(scenario())
    client = factory.created[0]

    assert client.stop_notify_calls == 1
    assert client.disconnect_calls == 1
    assert source.connection_state == "disconnected"
    assert not source.is_connected
    client.notify_callback(None, bytearray(b"close"))
    assert received == []


def test_peripheral_disconnect_marks_source_disconnected():
    factory = ClientFactory()
    source = make_source(factory)
    asyncio.run(source.connect())

    client = factory.created[0]
    client.is_connected = False
    client.disconnected_callback(client)

    assert source.connection_state == "disconnected"
    assert source.client is None


def test_reconnect_is_throttled():
    factory = ClientFactory()
    source = make_source(factory, min_interval_ms=50, monotonic=lambda: 100.0)

    async def scenario():
        await source.connect()
        started = time.perf_counter()
        await source.connect()
        return time.perf_counter() - started

    elapsed = asyncio.run(scenario())
    assert elapsed >= 0.04
    # the second attempt released the first connection
    assert factory.created[0].disconnect_calls == 1
    assert source.client is factory.created[1]


def test_write_command_targets_rx_characteristic():
    factory = ClientFactory()
    source = make_source(factory)

    async def scenario():
        before = await source.write_command("trigger-vibration")
        await source.connect()
        after = await source.write_command("trigger-vibration")
        return before, after

    before, after = asyncio.run(scenario())
    assert before is False
    assert after is True
    assert factory.created[0].writes == [(NUS_RX_CHARACTERISTIC_UUID, b"trigger-vibration")]
