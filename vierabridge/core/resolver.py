"""Pick the specs a device is set up with: live when possible, cached otherwise."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from vierabridge.core.errors import EncryptionEligibilityError, ReachabilityError
from vierabridge.core.model import DeviceSpecs
from vierabridge.core.outcome import Failure, Outcome, Success

LOGGER = logging.getLogger(__name__)


def _never_seen(ip_address: str) -> Failure:
    return Failure(
        ReachabilityError(
            f"IGNORING '{ip_address}' as it is not reachable, and we can't rely on cached data "
            "as it seems that it was never ever seen and setup before.\n\n"
            "Please make sure that your TV is powered ON and connected to the network."
        )
    )


async def resolve(
    ip_address: str,
    reachable: bool,
    cached: DeviceSpecs | None,
    fetch_specs: Callable[[], Awaitable[DeviceSpecs | None]],
) -> Outcome[DeviceSpecs]:
    """Resolve the specs for ``ip_address``.

    ``cached`` is whatever the accessory cache holds for that address. Live
    specs always win; cached ones are only used when the TV does not answer,
    and never for models that require encryption, since the handshake needs
    a live round-trip anyway.
    """
    if not reachable and cached is None:
        LOGGER.debug("'%s' is unreachable and has no cached specs", ip_address)
        return _never_seen(ip_address)

    specs = await fetch_specs()
    if specs is not None:
        return Success(specs)

    if cached is None:
        return Failure(
            ReachabilityError(
                f"IGNORING '{ip_address}' as it answered but did not report its specs, and we "
                "can't rely on cached data as it seems that it was never ever seen and setup "
                "before.\n\nPlease make sure that your TV is powered ON and NOT in stand-by."
            )
        )

    LOGGER.warning(
        "Unable to fetch specs from TV at '%s'. Using the previously cached ones: %s",
        ip_address,
        cached,
    )
    if cached.requires_encryption:
        return Failure(
            EncryptionEligibilityError(
                f"IGNORING '{ip_address}' as we do not support offline initialization, "
                "from cache, for models that require encryption."
            )
        )
    return Success(cached)
