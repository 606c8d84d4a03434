"""Offline checks on configured device entries."""

from __future__ import annotations

import ipaddress
import re

from vierabridge.core.errors import DeclarationError
from vierabridge.core.model import DeviceDeclaration
from vierabridge.core.outcome import Failure, Outcome, Success

_MAC_RE = re.compile(r"^[0-9A-F]{2}([:-])[0-9A-F]{2}(?:\1[0-9A-F]{2}){4}$", re.IGNORECASE)


def is_ipv4_address(value: str) -> bool:
    try:
        ipaddress.IPv4Address(value)
    except (ipaddress.AddressValueError, ValueError):
        return False
    return True


def is_mac_address(value: str) -> bool:
    return bool(_MAC_RE.match(value.strip()))


def validate(device: DeviceDeclaration) -> Outcome[None]:
    if device.problems:
        return Failure(
            DeclarationError(
                f"IGNORING '{device.ip_address}' as its config entry is malformed: "
                f"{'; '.join(device.problems)}\n\n{device.raw()}"
            )
        )
    if not isinstance(device.ip_address, str) or not is_ipv4_address(device.ip_address):
        return Failure(
            DeclarationError(
                f"IGNORING '{device.ip_address}' as it is not a valid ip address.\n\n{device.raw()}"
            )
        )
    if device.mac is not None and not is_mac_address(device.mac):
        return Failure(
            DeclarationError(
                f"IGNORING '{device.ip_address}' as it has an invalid MAC address: "
                f"'{device.mac}'\n\n{device.raw()}"
            )
        )
    return Success(None)
