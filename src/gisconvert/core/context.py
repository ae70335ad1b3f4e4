"""Per-process server context.

Holds everything a request handler may need (settings, the tool registry
and the outbound HTTP session). One instance is built at startup and
passed explicitly to the dispatcher and to every handler.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import aiohttp

from .registry import CoreRegistry, Registrar
from .utils.config import Settings, get_settings


@dataclass
class ServerContext:
    settings: Settings
    registry: CoreRegistry = field(default_factory=CoreRegistry)
    http: Optional[aiohttp.ClientSession] = None

    @property
    def registrar(self) -> Registrar:
        return Registrar(self.registry)

    async def get_http(self) -> aiohttp.ClientSession:
        """Get or create the shared HTTP session (needs a running loop)."""
        if self.http is None or self.http.closed:
            timeout = aiohttp.ClientTimeout(total=self.settings.GEOCODER_TIMEOUT, connect=10)
            self.http = aiohttp.ClientSession(
                timeout=timeout,
                headers={"User-Agent": self.settings.GEOCODER_USER_AGENT}
            )
        return self.http

    async def close(self) -> None:
        if self.http is not None and not self.http.closed:
            await self.http.close()


def create_context(settings: Optional[Settings] = None, load_toolkits: bool = True) -> ServerContext:
    """Build a context and register the built-in toolkits and plugins into it."""
    from ..extensions import load_builtin_toolkits, load_entrypoint_plugins

    ctx = ServerContext(settings=settings or get_settings())
    if load_toolkits:
        load_builtin_toolkits(ctx.registrar)
        load_entrypoint_plugins(ctx.registrar)
    return ctx
