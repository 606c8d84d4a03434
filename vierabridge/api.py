"""Stable public API for host adapters built on top of vierabridge.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any

from vierabridge.core.config_loader import load_config
from vierabridge.core.errors import (
    BootstrapError,
    CacheWriteError,
    ConfigLoadError,
    ConfigValidationError,
    DeclarationError,
    EncryptionEligibilityError,
    HandshakeError,
    ReachabilityError,
    TransportError,
    VieraBridgeError,
)
from vierabridge.core.model import (
    AccessoryCategory,
    AccessoryHandle,
    App,
    CacheEntry,
    DeviceDeclaration,
    DeviceSpecs,
    DiscoveryReport,
)
from vierabridge.core.outcome import Failure, Outcome, Success
from vierabridge.core.platform import VieraPlatform
from vierabridge.core.storage import CacheStore
from vierabridge.transports.base import HostRuntime, LivenessProbe, SessionFactory, TelevisionSession

__all__ = [
    "VieraBridgeError",
    "BootstrapError",
    "CacheWriteError",
    "ConfigLoadError",
    "ConfigValidationError",
    "DeclarationError",
    "EncryptionEligibilityError",
    "HandshakeError",
    "ReachabilityError",
    "TransportError",
    "AccessoryCategory",
    "AccessoryHandle",
    "App",
    "CacheEntry",
    "DeviceDeclaration",
    "DeviceSpecs",
    "DiscoveryReport",
    "Failure",
    "Outcome",
    "Success",
    "HostRuntime",
    "LivenessProbe",
    "SessionFactory",
    "TelevisionSession",
    "Bridge",
]


class Bridge:
    """Public entry point wiring configuration, cache, and discovery together.

    A host adapter builds one `Bridge` per process, forwards the accessories
    its runtime restored through `configure_accessory`, and calls
    `did_finish_launching` once the runtime is ready.
    """

    def __init__(
        self,
        *,
        host: HostRuntime,
        session_factory: SessionFactory,
        devices: Sequence[DeviceDeclaration] | None = None,
        config_path: Path | str | None = None,
        cache_path: Path | str | None = None,
        probe: LivenessProbe | None = None,
    ) -> None:
        if devices is None:
            devices = load_config(config_path).devices
        self.store = CacheStore.open(cache_path)
        self._platform = VieraPlatform(
            devices,
            host=host,
            session_factory=session_factory,
            store=self.store,
            probe=probe,
        )

    @property
    def devices(self) -> tuple[DeviceDeclaration, ...]:
        return self._platform.devices

    def configure_accessory(self, accessory: Any) -> None:
        self._platform.configure_accessory(accessory)

    async def did_finish_launching(self) -> DiscoveryReport:
        return await self._platform.did_finish_launching()

    async def discover(self) -> DiscoveryReport:
        return await self._platform.discover()
