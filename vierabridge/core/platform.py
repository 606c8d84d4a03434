"""Platform-level discovery driver used by host adapters and the public API."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Any

from vierabridge.core.model import AccessoryHandle, DeviceDeclaration, DiscoveryReport
from vierabridge.core.outcome import Failure
from vierabridge.core.setup import DeviceSetup
from vierabridge.core.storage import CacheStore
from vierabridge.transports.base import HostRuntime, LivenessProbe, SessionFactory
from vierabridge.transports.probe import tcp_liveness_probe

LOGGER = logging.getLogger(__name__)


class VieraPlatform:
    def __init__(
        self,
        devices: Sequence[DeviceDeclaration],
        *,
        host: HostRuntime,
        session_factory: SessionFactory,
        store: CacheStore,
        probe: LivenessProbe | None = None,
    ) -> None:
        self.devices = tuple(devices)
        self.host = host
        self.store = store
        self.cached_accessories: list[Any] = []
        self.setup = DeviceSetup(
            store=store,
            host=host,
            session_factory=session_factory,
            probe=probe or tcp_liveness_probe,
        )

    def configure_accessory(self, accessory: Any) -> None:
        LOGGER.info("Loading accessory from cache: %s", getattr(accessory, "display_name", accessory))
        self.cached_accessories.append(accessory)

    async def did_finish_launching(self) -> DiscoveryReport:
        LOGGER.debug("Executed did_finish_launching callback")
        return await self.discover()

    async def discover(self) -> DiscoveryReport:
        # Host-restored accessories are rebuilt from the devices below.
        for accessory in self.cached_accessories:
            self.host.unregister_platform_accessories([accessory])
        self.cached_accessories.clear()

        results = await asyncio.gather(
            *(self._setup_one(device) for device in self.devices),
            return_exceptions=True,
        )

        published: list[AccessoryHandle] = []
        failures: dict[str, str] = {}
        for device, result in zip(self.devices, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                LOGGER.error("Setup of '%s' crashed: %s", device.ip_address, result, exc_info=result)
                failures[device.ip_address] = str(result)
            elif isinstance(result, AccessoryHandle):
                published.append(result)
            else:
                failures[device.ip_address] = result

        return DiscoveryReport(published=tuple(published), failures=failures)

    async def _setup_one(self, device: DeviceDeclaration) -> AccessoryHandle | str:
        outcome = await self.setup.run(device)
        if isinstance(outcome, Failure):
            LOGGER.error("%s", outcome.message)
            return outcome.message

        handle = outcome.value
        self.host.publish_external_accessories([handle.accessory])
        await self.setup.commit(handle)
        LOGGER.info("successfully loaded %s", handle.display_name)
        return handle
