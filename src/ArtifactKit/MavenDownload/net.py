# === NAVMAP v1 ===
# {
#   "module": "ArtifactKit.MavenDownload.net",
#   "purpose": "Build the HTTPX client used to fetch artifacts from remote repositories",
#   "sections": [
#     {"id": "helpers", "name": "Client construction helpers", "anchor": "HELP", "kind": "helpers"},
#     {"id": "api", "name": "Public API", "anchor": "API", "kind": "api"}
#   ]
# }
# === /NAVMAP ===

"""HTTPX client construction for remote Maven repositories."""

from __future__ import annotations

import logging
import ssl
import time
from typing import MutableMapping, Optional

import certifi
import httpx

from .settings import HttpSettings, RepositorySettings

__all__ = ["build_http_client"]

LOGGER = logging.getLogger("ArtifactKit.MavenDownload.net")

# --- Client construction helpers ----------------------------------------------


def _build_ssl_context() -> ssl.SSLContext:
    context = ssl.create_default_context()
    context.load_verify_locations(certifi.where())
    return context


def _request_hook(request: httpx.Request) -> None:
    meta: MutableMapping[str, object] = request.extensions.setdefault("mvnfetch_meta", {})  # type: ignore[assignment]
    meta["start_time"] = time.perf_counter()
    LOGGER.debug(
        "artifact-http-request",
        extra={"stage": "fetch", "method": request.method, "url": str(request.url)},
    )


def _response_hook(response: httpx.Response) -> None:
    meta = response.request.extensions.get("mvnfetch_meta") or {}
    start = meta.get("start_time") if isinstance(meta, dict) else None
    elapsed_ms = None
    if isinstance(start, (int, float)):
        elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
    LOGGER.debug(
        "artifact-http-response",
        extra={
            "stage": "fetch",
            "url": str(response.request.url),
            "status": response.status_code,
            "elapsed_ms": elapsed_ms,
        },
    )


# --- Public API ----------------------------------------------------------------


def build_http_client(
    http: Optional[HttpSettings] = None,
    repository: Optional[RepositorySettings] = None,
    *,
    transport: Optional[httpx.BaseTransport] = None,
) -> httpx.Client:
    """Create an HTTPX client configured for artifact downloads.

    Args:
        http: Timeout, pooling, and header settings.
        repository: Repository settings; only the proxy is read here.
        transport: Optional transport override (tests pass ``httpx.MockTransport``).

    Returns:
        A client that follows redirects and logs every request at DEBUG.
    """

    http = http or HttpSettings()
    repository = repository or RepositorySettings()
    proxy = repository.proxy_url() if transport is None else None
    client = httpx.Client(
        transport=transport,
        timeout=httpx.Timeout(
            connect=http.timeout_connect,
            read=http.timeout_read,
            write=http.timeout_write,
            pool=http.timeout_pool,
        ),
        limits=httpx.Limits(
            max_connections=http.pool_max_connections,
            max_keepalive_connections=http.pool_keepalive_max,
        ),
        headers={"User-Agent": http.user_agent},
        follow_redirects=True,
        trust_env=http.trust_env,
        verify=_build_ssl_context(),
        proxy=proxy,
        event_hooks={"request": [_request_hook], "response": [_response_hook]},
    )
    LOGGER.debug(
        "HTTPX client created",
        extra={
            "max_connections": http.pool_max_connections,
            "proxy": proxy,
            "repository": repository.id,
        },
    )
    return client
