"""Reachability probes for hosts (ICMP) and URLs (HTTP).

A probe only ever answers True or False. Timeouts, refused connections,
DNS failures and a missing ping binary all read as "unreachable".
"""

import asyncio
import logging
import platform
import shutil

import httpx

from src.config import URL_SCHEMES

logger = logging.getLogger(__name__)


def is_url_target(target: str) -> bool:
    """Check if target has an http(s) scheme prefix."""
    return target.lower().startswith(URL_SCHEMES)


async def check_http(url: str, timeout: float = 10.0) -> bool:
    """Check if an HTTP endpoint responds at all.

    Any response counts as reachable, including 4xx and 5xx: the server
    process answered. Only a transport failure (no response) is down.

    Args:
        url: URL to GET.
        timeout: Deadline in seconds for the whole request, redirects included.

    Returns:
        True if any HTTP response was received, False otherwise.
    """
    try:
        async with httpx.AsyncClient(follow_redirects=True, timeout=timeout) as client:
            response = await asyncio.wait_for(client.get(url), timeout=timeout)
        logger.debug("HTTP check %s returned %d", url, response.status_code)
        return True
    except asyncio.TimeoutError:
        logger.debug("HTTP check %s timed out after %ss", url, timeout)
        return False
    except httpx.HTTPError as e:
        logger.debug("HTTP check %s failed: %s", url, e)
        return False
    except Exception as e:
        logger.debug("HTTP check %s failed unexpectedly: %s", url, e)
        return False


async def check_host_ping(target: str, timeout: float = 2.0, count: int = 3) -> bool:
    """Check if host is reachable via ICMP ping using system ping command.

    Args:
        target: Hostname or IP address.
        timeout: Per-packet timeout in seconds.
        count: Number of ping packets to send.

    Returns:
        True if ping exits successfully, False otherwise.
    """
    ping_cmd = shutil.which("ping")
    if not ping_cmd:
        logger.warning("ping command not found in PATH")
        return False

    try:
        # Linux uses -W (seconds), macOS uses -W (milliseconds)
        if platform.system() == "Darwin":
            timeout_ms = int(timeout * 1000)
            cmd = [ping_cmd, "-c", str(count), "-W", str(timeout_ms), target]
        else:
            cmd = [ping_cmd, "-c", str(count), "-W", str(max(1, int(timeout))), target]

        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
        )
        returncode = await proc.wait()

        if returncode == 0:
            logger.debug("Ping to %s successful", target)
            return True
        logger.debug("Ping to %s failed (exit code %d)", target, returncode)
        return False
    except Exception as e:
        logger.debug("Ping to %s failed: %s", target, e)
        return False


class Prober:
    """Reachability check for one configured target.

    The strategy is fixed at construction from the target's scheme prefix:
    http(s) URLs get an HTTP GET, everything else gets ICMP ping.
    """

    def __init__(
        self,
        target: str,
        http_timeout: float = 10.0,
        ping_count: int = 3,
        ping_timeout: float = 2.0,
    ):
        self.target = target
        self.http_timeout = http_timeout
        self.ping_count = ping_count
        self.ping_timeout = ping_timeout
        self.kind = "http" if is_url_target(target) else "icmp"

    async def probe(self) -> bool:
        """Run one check against the target. Never raises."""
        if self.kind == "http":
            return await check_http(self.target, timeout=self.http_timeout)
        return await check_host_ping(
            self.target,
            timeout=self.ping_timeout,
            count=self.ping_count,
        )

    def __repr__(self) -> str:
        return f"Prober(target={self.target!r}, kind={self.kind!r})"
