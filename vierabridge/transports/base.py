"""Collaborator interfaces consumed by the setup pipeline."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol

from vierabridge.core.model import AccessoryCategory, App, DeviceSpecs
from vierabridge.core.outcome import Outcome


class TelevisionSession(Protocol):
    async def get_specs(self) -> DeviceSpecs | None:
        """Fetch the live capability snapshot, or None when the TV did not answer."""

    async def get_apps(self) -> Outcome[tuple[App, ...]]:
        """List the applications installed on the TV."""

    async def is_turned_on(self) -> bool:
        """Report whether the TV is powered on and not in stand-by."""

    def derive_session_key(self, app_id: str, key: str) -> None:
        """Derive the encrypted-session key material from paired credentials."""

    async def request_session_id(self) -> Outcome[None]:
        """Run the handshake that establishes an encrypted session."""


class SessionFactory(Protocol):
    def __call__(self, ip_address: str, mac: str | None) -> TelevisionSession:
        """Bind a control session to a TV address."""


class LivenessProbe(Protocol):
    async def __call__(self, ip_address: str) -> bool:
        """Return True when the TV answers on its control port."""


class HostRuntime(Protocol):
    def create_accessory(self, name: str, serial_number: str, category: AccessoryCategory) -> Any:
        """Build a host-side accessory object."""

    def publish_external_accessories(self, accessories: Sequence[Any]) -> None:
        """Expose accessories to the host."""

    def unregister_platform_accessories(self, accessories: Sequence[Any]) -> None:
        """Drop accessories the host restored from its own cache."""
