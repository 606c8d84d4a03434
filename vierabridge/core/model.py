"""Core data models used across the cache, setup pipeline, and CLI."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

_DECLARED_FIELDS = ("ip_address", "mac", "app_id", "enc_key", "friendly_name", "disabled_app_support")


class AccessoryCategory(Enum):
    TELEVISION = 31


@dataclass(frozen=True)
class DeviceDeclaration:
    ip_address: str
    mac: str | None = None
    app_id: str | None = None
    enc_key: str | None = None
    friendly_name: str | None = None
    disabled_app_support: bool = False
    problems: tuple[str, ...] = ()
    source: Any = field(default=None, compare=False, repr=False)

    @property
    def has_credentials(self) -> bool:
        return bool(self.app_id) and bool(self.enc_key)

    def raw(self) -> str:
        if self.source is not None:
            payload = self.source
            if isinstance(payload, dict):
                payload = {str(key): value for key, value in payload.items()}
        else:
            payload = {
                name: getattr(self, name) for name in _DECLARED_FIELDS if getattr(self, name) is not None
            }
        if isinstance(payload, dict) and "enc_key" in payload:
            payload["enc_key"] = "***"
        return json.dumps(payload, indent=2, default=str)

    @classmethod
    def from_dict(cls, entry: dict[str, Any]) -> DeviceDeclaration:
        return cls(
            ip_address=entry["ip_address"],
            mac=entry.get("mac"),
            app_id=entry.get("app_id"),
            enc_key=entry.get("enc_key"),
            friendly_name=entry.get("friendly_name"),
            disabled_app_support=bool(entry.get("disabled_app_support", False)),
        )

    @classmethod
    def rejected(cls, entry: Any, problems: tuple[str, ...], label: str) -> DeviceDeclaration:
        """Placeholder for a config entry that failed structural validation.

        ``label`` stands in for the address when the entry has none.
        """
        address = entry.get("ip_address") if isinstance(entry, dict) else None
        return cls(
            ip_address=str(address) if address not in (None, "") else label,
            problems=problems,
            source=entry,
        )


@dataclass(frozen=True)
class DeviceSpecs:
    serial_number: str
    model_name: str = "Unknown"
    model_number: str = "Unknown"
    friendly_name: str = "Viera TV"
    manufacturer: str = "Panasonic"
    requires_encryption: bool = False

    def with_friendly_name(self, name: str) -> DeviceSpecs:
        return replace(self, friendly_name=name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "serialNumber": self.serial_number,
            "modelName": self.model_name,
            "modelNumber": self.model_number,
            "friendlyName": self.friendly_name,
            "manufacturer": self.manufacturer,
            "requiresEncryption": self.requires_encryption,
        }

    @classmethod
    def from_dict(cls, entry: dict[str, Any]) -> DeviceSpecs:
        serial = entry["serialNumber"]
        if not isinstance(serial, str) or not serial:
            raise ValueError(f"invalid serial number {serial!r}")
        return cls(
            serial_number=serial,
            model_name=entry.get("modelName", "Unknown"),
            model_number=entry.get("modelNumber", "Unknown"),
            friendly_name=entry.get("friendlyName", "Viera TV"),
            manufacturer=entry.get("manufacturer", "Panasonic"),
            requires_encryption=bool(entry.get("requiresEncryption", False)),
        )


@dataclass(frozen=True)
class App:
    name: str
    id: str
    icon_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"name": self.name, "id": self.id}
        if self.icon_url:
            payload["iconUrl"] = self.icon_url
        return payload

    @classmethod
    def from_dict(cls, entry: dict[str, Any]) -> App:
        return cls(name=entry["name"], id=str(entry["id"]), icon_url=entry.get("iconUrl"))


@dataclass(frozen=True)
class CacheSnapshot:
    ip_address: str
    specs: DeviceSpecs


@dataclass
class CacheEntry:
    data: CacheSnapshot | None = None
    apps: tuple[App, ...] | None = None

    @property
    def is_empty(self) -> bool:
        return self.data is None and self.apps is None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        if self.data is not None:
            payload["data"] = {
                "ipAddress": self.data.ip_address,
                "specs": self.data.specs.to_dict(),
            }
        if self.apps is not None:
            payload["apps"] = [app.to_dict() for app in self.apps]
        return payload

    @classmethod
    def from_dict(cls, entry: dict[str, Any]) -> CacheEntry:
        data = entry.get("data")
        snapshot = None
        if data:
            snapshot = CacheSnapshot(
                ip_address=data["ipAddress"],
                specs=DeviceSpecs.from_dict(data["specs"]),
            )
        apps = entry.get("apps")
        return cls(
            data=snapshot,
            apps=tuple(App.from_dict(app) for app in apps) if apps is not None else None,
        )


@dataclass(frozen=True)
class AccessoryHandle:
    accessory: Any
    session: Any
    specs: DeviceSpecs
    declaration: DeviceDeclaration
    apps: tuple[App, ...] = field(default_factory=tuple)
    first_seen: bool = False

    @property
    def display_name(self) -> str:
        return self.specs.friendly_name


@dataclass(frozen=True)
class DiscoveryReport:
    published: tuple[AccessoryHandle, ...]
    failures: dict[str, str]
