"""Encrypted control-session negotiation for models that require it."""

from __future__ import annotations

import logging

from vierabridge.core.errors import EncryptionEligibilityError, HandshakeError, TransportError
from vierabridge.core.model import DeviceDeclaration, DeviceSpecs
from vierabridge.core.outcome import Failure, Outcome, Success
from vierabridge.transports.base import TelevisionSession

LOGGER = logging.getLogger(__name__)


async def negotiate(
    device: DeviceDeclaration,
    specs: DeviceSpecs,
    session: TelevisionSession,
) -> Outcome[None]:
    ip = device.ip_address
    if not device.has_credentials:
        return Failure(
            EncryptionEligibilityError(
                f"IGNORING '{ip}' as it is from a Panasonic TV that requires encryption "
                f"('{specs.model_name}') and no valid credentials were supplied."
            )
        )

    LOGGER.debug("Negotiating encrypted session with '%s' (%s)", ip, specs.model_name)
    try:
        session.derive_session_key(device.app_id, device.enc_key)
        result = await session.request_session_id()
    except TransportError as exc:
        result = Failure(exc)

    if isinstance(result, Failure):
        return Failure(
            HandshakeError(
                f"IGNORING '{ip}' ('{specs.model_name}') as no working credentials were supplied."
                f"\n\n{result.message}"
            )
        )
    return Success(None)
