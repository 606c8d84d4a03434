"""On-disk accessory cache keyed by device serial number."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from collections.abc import Iterator
from dataclasses import replace
from pathlib import Path

from vierabridge.core.errors import CacheWriteError
from vierabridge.core.model import App, CacheEntry, CacheSnapshot, DeviceSpecs

CACHE_FILE_NAME = "vieramatic.json"
LOGGER = logging.getLogger(__name__)


def default_cache_path() -> Path:
    override = os.environ.get("VIERABRIDGE_CACHE")
    if override:
        return Path(override)
    xdg_data = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local/share"))
    return xdg_data / "vierabridge" / CACHE_FILE_NAME


class CacheStore:
    """Process-lifetime store mirrored to a single JSON document.

    The document maps serial numbers to ``{"data": {...}, "apps": [...]}``.
    Nothing is written until :meth:`save` or :meth:`flush` is called.
    """

    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path) if path is not None else default_cache_path()
        self._entries: dict[str, CacheEntry] = {}
        self._write_lock = asyncio.Lock()

    @classmethod
    def open(cls, path: Path | str | None = None) -> CacheStore:
        store = cls(path)
        store.load()
        return store

    def load(self) -> None:
        self._entries = {}
        if not self.path.exists():
            LOGGER.debug("No accessory cache at %s, starting empty", self.path)
            return
        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            LOGGER.warning("Ignoring unreadable accessory cache %s: %s", self.path, exc)
            return
        if not isinstance(document, dict):
            LOGGER.warning("Ignoring accessory cache %s: root is not an object", self.path)
            return

        for serial, raw_entry in document.items():
            if not isinstance(raw_entry, dict):
                LOGGER.warning("Skipping malformed cache entry '%s'", serial)
                continue
            try:
                self._entries[serial] = CacheEntry.from_dict(raw_entry)
            except (KeyError, TypeError, ValueError) as exc:
                LOGGER.warning("Skipping malformed cache entry '%s': %s", serial, exc)
        LOGGER.debug("Loaded %d cached accessories from %s", len(self._entries), self.path)

    def get(self, serial: str) -> CacheEntry:
        entry = self._entries.get(serial)
        if entry is None:
            entry = CacheEntry()
            self._entries[serial] = entry
        return entry

    def known(self, serial: str) -> bool:
        entry = self._entries.get(serial)
        return entry is not None and entry.data is not None

    def find_specs_by_address(self, ip_address: str) -> DeviceSpecs | None:
        # Serial numbers are unknown at this point, so match on address.
        # Entries stay keyed by serial since addresses move under DHCP.
        for entry in self._entries.values():
            if entry.data is not None and entry.data.ip_address == ip_address:
                return entry.data.specs
        return None

    def record(
        self,
        serial: str,
        ip_address: str,
        specs: DeviceSpecs,
        apps: tuple[App, ...] | None = None,
    ) -> CacheEntry:
        entry = self.update(serial, ip_address, specs, apps)
        self.save()
        return entry

    def update(
        self,
        serial: str,
        ip_address: str,
        specs: DeviceSpecs,
        apps: tuple[App, ...] | None = None,
    ) -> CacheEntry:
        """Replace the snapshot for ``serial`` in memory only.

        Any other entry still holding ``ip_address`` loses it, so the address
        scan only ever finds the TV that answered there last.
        """
        for other_serial, other in self._entries.items():
            if other_serial != serial and other.data is not None and other.data.ip_address == ip_address:
                LOGGER.debug("'%s' moved off %s, now held by '%s'", other_serial, ip_address, serial)
                other.data = replace(other.data, ip_address="")

        entry = self.get(serial)
        entry.data = CacheSnapshot(ip_address=ip_address, specs=specs)
        if apps is not None:
            entry.apps = apps
        return entry

    def forget(self, serial: str) -> bool:
        if serial not in self._entries:
            return False
        del self._entries[serial]
        self.save()
        return True

    def entries(self) -> Iterator[tuple[str, CacheEntry]]:
        return iter(sorted(self._entries.items()))

    def dump(self) -> str:
        document = {serial: entry.to_dict() for serial, entry in self._entries.items()}
        return json.dumps(document, indent=2, sort_keys=True)

    def save(self) -> None:
        self.write(self.dump())

    async def flush(self) -> None:
        """Save from a worker thread, one write at a time.

        The document is serialized on the event loop once the lock is held,
        so the last writer always persists every earlier update.
        """
        async with self._write_lock:
            payload = self.dump()
            await asyncio.to_thread(self.write, payload)

    def write(self, payload: str) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
        except OSError as exc:
            raise CacheWriteError(f"Could not write accessory cache {self.path}: {exc}") from exc

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self.path)
        except OSError as exc:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise CacheWriteError(f"Could not write accessory cache {self.path}: {exc}") from exc
        LOGGER.debug("Saved %d cached accessories to %s", len(self._entries), self.path)

    def __contains__(self, serial: object) -> bool:
        return serial in self._entries

    def __len__(self) -> int:
        return len(self._entries)
