"""TCP liveness probe against the TV control port."""

from __future__ import annotations

import asyncio
import logging

CONTROL_PORT = 55000
LOGGER = logging.getLogger(__name__)


async def tcp_liveness_probe(
    ip_address: str,
    *,
    port: int = CONTROL_PORT,
    timeout_s: float = 2.0,
) -> bool:
    try:
        _, writer = await asyncio.wait_for(
            asyncio.open_connection(ip_address, port),
            timeout=timeout_s,
        )
    except asyncio.TimeoutError:
        LOGGER.debug("Liveness probe to %s:%d timed out after %.1fs", ip_address, port, timeout_s)
        return False
    except OSError as exc:
        LOGGER.debug("Liveness probe to %s:%d failed: %s", ip_address, port, exc)
        return False

    writer.close()
    try:
        await writer.wait_closed()
    except OSError:
        pass
    return True
