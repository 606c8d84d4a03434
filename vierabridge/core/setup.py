"""Per-device setup pipeline."""

from __future__ import annotations

import logging

from vierabridge.core.errors import BootstrapError, CacheWriteError, TransportError, VieraBridgeError
from vierabridge.core.model import AccessoryCategory, AccessoryHandle, App, DeviceDeclaration
from vierabridge.core.outcome import Failure, Outcome, Success
from vierabridge.core.resolver import resolve
from vierabridge.core.session import negotiate
from vierabridge.core.storage import CacheStore
from vierabridge.core.validation import validate
from vierabridge.transports.base import HostRuntime, LivenessProbe, SessionFactory

LOGGER = logging.getLogger(__name__)


class DeviceSetup:
    """Turns one configured device into a publishable accessory.

    Stages run in order and the first failure ends the run: validate,
    probe and resolve specs, apply the name override, negotiate an
    encrypted session when the model needs one, build the accessory, and
    on a device's first-ever setup collect its baseline state. The cache
    is only written by :meth:`commit`, once the host has published the
    accessory.
    """

    def __init__(
        self,
        *,
        store: CacheStore,
        host: HostRuntime,
        session_factory: SessionFactory,
        probe: LivenessProbe,
    ) -> None:
        self.store = store
        self.host = host
        self.session_factory = session_factory
        self.probe = probe

    async def run(self, device: DeviceDeclaration) -> Outcome[AccessoryHandle]:
        LOGGER.info("handling '%s' from config", device.ip_address)
        try:
            return await self._run(device)
        except (VieraBridgeError, OSError) as exc:
            LOGGER.debug("setup of '%s' raised", device.ip_address, exc_info=True)
            error = exc if isinstance(exc, VieraBridgeError) else TransportError(str(exc))
            return Failure(
                type(error)(f"IGNORING '{device.ip_address}' as its setup failed unexpectedly: {error}")
            )

    async def _run(self, device: DeviceDeclaration) -> Outcome[AccessoryHandle]:
        outcome = validate(device)
        if isinstance(outcome, Failure):
            return outcome

        ip = device.ip_address
        reachable = await self.probe(ip)
        cached = self.store.find_specs_by_address(ip)
        session = self.session_factory(ip, device.mac)

        resolved = await resolve(ip, reachable, cached, session.get_specs)
        if isinstance(resolved, Failure):
            return resolved
        specs = resolved.value

        if device.friendly_name:
            specs = specs.with_friendly_name(device.friendly_name)

        if specs.requires_encryption:
            negotiated = await negotiate(device, specs, session)
            if isinstance(negotiated, Failure):
                return negotiated

        accessory = self.host.create_accessory(
            specs.friendly_name,
            specs.serial_number,
            AccessoryCategory.TELEVISION,
        )

        apps: tuple[App, ...]
        first_seen = not self.store.known(specs.serial_number)
        if first_seen:
            bootstrapped = await self._bootstrap(device, specs.friendly_name, session)
            if isinstance(bootstrapped, Failure):
                return bootstrapped
            apps = bootstrapped.value
        else:
            apps = self.store.get(specs.serial_number).apps or ()

        return Success(
            AccessoryHandle(
                accessory=accessory,
                session=session,
                specs=specs,
                declaration=device,
                apps=apps,
                first_seen=first_seen,
            )
        )

    async def commit(self, handle: AccessoryHandle) -> None:
        """Record a published device in the accessory cache.

        Only a first-seen device stores its app list; later runs keep the
        cached one. A failed write is logged and leaves the device up.
        """
        specs = handle.specs
        self.store.update(
            specs.serial_number,
            handle.declaration.ip_address,
            specs,
            handle.apps if handle.first_seen else None,
        )
        try:
            await self.store.flush()
        except CacheWriteError as exc:
            LOGGER.error("'%s' is set up but could not be cached: %s", specs.friendly_name, exc)

    async def _bootstrap(self, device, name, session) -> Outcome[tuple[App, ...]]:
        LOGGER.info("Initializing '%s' first time ever.", name)
        if not await session.is_turned_on():
            return Failure(
                BootstrapError(
                    f"Unable to finish initial setup of '{name}' ({device.ip_address}).\n\n"
                    "Please make sure that this TV is powered ON and NOT in stand-by."
                )
            )
        if device.disabled_app_support:
            return Success(())

        listed = await session.get_apps()
        if isinstance(listed, Failure):
            return Failure(
                BootstrapError(
                    f"IGNORING '{device.ip_address}' as we were unable to fetch the Apps list "
                    f"from the TV:\n\n{listed.message}"
                )
            )
        return Success(tuple(listed.value))
