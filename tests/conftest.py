from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from vierabridge.core.model import AccessoryCategory, App, DeviceSpecs
from vierabridge.core.outcome import Outcome, Success
from vierabridge.core.storage import CacheStore


class FakeAccessory:
    def __init__(self, name: str, serial_number: str, category: AccessoryCategory) -> None:
        self.display_name = name
        self.serial_number = serial_number
        self.category = category


class FakeHost:
    def __init__(self) -> None:
        self.created: list[FakeAccessory] = []
        self.published: list[FakeAccessory] = []
        self.unregistered: list[object] = []

    def create_accessory(self, name: str, serial_number: str, category: AccessoryCategory) -> FakeAccessory:
        accessory = FakeAccessory(name, serial_number, category)
        self.created.append(accessory)
        return accessory

    def publish_external_accessories(self, accessories) -> None:
        self.published.extend(accessories)

    def unregister_platform_accessories(self, accessories) -> None:
        self.unregistered.extend(accessories)


class FakeSession:
    def __init__(
        self,
        ip_address: str,
        mac: str | None = None,
        *,
        specs: DeviceSpecs | None = None,
        apps: Outcome[tuple[App, ...]] | None = None,
        turned_on: bool = True,
        handshake: Outcome[None] | None = None,
    ) -> None:
        self.ip_address = ip_address
        self.mac = mac
        self.specs = specs
        self.apps = apps if apps is not None else Success(())
        self.turned_on = turned_on
        self.handshake = handshake if handshake is not None else Success(None)
        self.calls: list[str] = []
        self.credentials: tuple[str, str] | None = None

    async def get_specs(self) -> DeviceSpecs | None:
        self.calls.append("get_specs")
        return self.specs

    async def get_apps(self) -> Outcome[tuple[App, ...]]:
        self.calls.append("get_apps")
        return self.apps

    async def is_turned_on(self) -> bool:
        self.calls.append("is_turned_on")
        return self.turned_on

    def derive_session_key(self, app_id: str, key: str) -> None:
        self.calls.append("derive_session_key")
        self.credentials = (app_id, key)

    async def request_session_id(self) -> Outcome[None]:
        self.calls.append("request_session_id")
        return self.handshake


class FakeLiveness:
    def __init__(self, reachable: dict[str, bool] | None = None, default: bool = True) -> None:
        self.reachable = reachable or {}
        self.default = default
        self.calls: list[str] = []

    async def __call__(self, ip_address: str) -> bool:
        self.calls.append(ip_address)
        return self.reachable.get(ip_address, self.default)


class SessionRegistry:
    """Session factory handing out pre-configured fake sessions per address."""

    def __init__(self) -> None:
        self.sessions: dict[str, FakeSession] = {}

    def add(self, ip_address: str, **kwargs) -> FakeSession:
        session = FakeSession(ip_address, **kwargs)
        self.sessions[ip_address] = session
        return session

    def __call__(self, ip_address: str, mac: str | None) -> FakeSession:
        session = self.sessions.get(ip_address)
        if session is None:
            session = self.add(ip_address)
        session.mac = mac
        return session


def make_specs(serial: str = "SN-0001", **overrides) -> DeviceSpecs:
    fields = {
        "model_name": "TX-55GZ950",
        "model_number": "55GZ950",
        "friendly_name": "Living Room TV",
        "requires_encryption": False,
    }
    fields.update(overrides)
    return DeviceSpecs(serial_number=serial, **fields)


@pytest.fixture
def host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def sessions() -> SessionRegistry:
    return SessionRegistry()


@pytest.fixture
def liveness() -> FakeLiveness:
    return FakeLiveness()


@pytest.fixture
def cache_path(tmp_path: Path) -> Path:
    return tmp_path / "cache" / "vieramatic.json"


@pytest.fixture
def store(cache_path: Path) -> CacheStore:
    return CacheStore.open(cache_path)


@pytest.fixture
def specs_factory() -> Callable[..., DeviceSpecs]:
    return make_specs
