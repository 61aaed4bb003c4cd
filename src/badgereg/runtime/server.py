from __future__ import annotations

import contextlib
import logging
import socket
import threading
import time
from dataclasses import dataclass

import uvicorn

from ..core.registry import BadgeRegistry
from ..core.settings import Settings
from ..sdk.client import BadgeRegClient
from .app import build_registry, create_app

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BadgeRegServer:
    host: str
    port: int
    url: str
    registry: BadgeRegistry

    def client(self, *, principal: str | None = None) -> BadgeRegClient:
        return BadgeRegClient(self.url.rstrip("/"), principal=principal)


def _find_free_port(host: str) -> int:
    with contextlib.closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind((host, 0))
        return int(s.getsockname()[1])


def _normalize_base_url(url: str) -> str:
    url = url.strip()
    if not url:
        return ""
    # Allow passing just host:port.
    if "://" not in url:
        url = "http://" + url
    return url.rstrip("/")


def _is_server_alive(base_url: str, *, timeout_s: float = 0.2) -> bool:
    """Best-effort probe to determine if a registry server is reachable."""

    import httpx

    try:
        with httpx.Client(base_url=base_url, timeout=timeout_s) as client:
            r = client.get("/healthz")
            if r.status_code != 200:
                return False
            return bool(r.json().get("ok"))
    except (httpx.HTTPError, ValueError):
        return False


def run(
    *,
    host: str = "127.0.0.1",
    port: int = 0,
    admin: str | None = None,
    fee: int | None = None,
    journal: str | None = None,
    log_level: str | None = None,
    access_log: bool = False,
    new_server: bool = False,
    connect_timeout_s: float = 0.2,
) -> BadgeRegServer | BadgeRegClient:
    """Start a registry server with a single Python call.

    Behavior:
    - If BADGEREG_URL is set and reachable, we *attach* to it (client mode)
      unless `new_server=True`.
    - Otherwise, if `port != 0` and a server already answers at
      http://{host}:{port}, we attach to it unless `new_server=True`.
    - Otherwise we start a new server in a daemon thread and return a
      `BadgeRegServer`.

    `admin`, `fee`, `journal` and `log_level` override the `BADGEREG_*`
    environment settings for a newly started server.
    """

    settings = Settings.from_env().with_overrides(admin=admin, fee=fee, journal=journal, log_level=log_level)

    env_url = _normalize_base_url(settings.url or "")
    if env_url and not new_server:
        if _is_server_alive(env_url, timeout_s=connect_timeout_s):
            logger.info("runtime.attach url=%s", env_url)
            return BadgeRegClient(env_url)

    if port != 0 and not new_server:
        default_url = _normalize_base_url(f"http://{host}:{port}")
        if _is_server_alive(default_url, timeout_s=connect_timeout_s):
            logger.info("runtime.attach url=%s", default_url)
            return BadgeRegClient(default_url)

    if port == 0:
        port = _find_free_port(host)

    registry = build_registry(settings)
    app = create_app(registry=registry)

    config = uvicorn.Config(app, host=host, port=port, log_level=settings.log_level, access_log=access_log)
    server = uvicorn.Server(config)

    thread = threading.Thread(target=server.run, daemon=True)
    thread.start()

    # Give it a moment so a subsequent client probe doesn't race with startup.
    time.sleep(0.05)

    url = f"http://{host}:{port}/"
    logger.info("runtime.started url=%s admin=%s fee=%d", url, settings.admin, settings.fee)
    return BadgeRegServer(host=host, port=port, url=url, registry=registry)
