# === NAVMAP v1 ===
# {
#   "module": "ArtifactKit.MavenDownload.settings",
#   "purpose": "Define configuration models, environment overrides, and local repository lookup",
#   "sections": [
#     {
#       "id": "repositorysettings",
#       "name": "RepositorySettings",
#       "anchor": "class-repositorysettings",
#       "kind": "class"
#     },
#     {
#       "id": "fetchsettings",
#       "name": "FetchSettings",
#       "anchor": "class-fetchsettings",
#       "kind": "class"
#     },
#     {
#       "id": "httpsettings",
#       "name": "HttpSettings",
#       "anchor": "class-httpsettings",
#       "kind": "class"
#     },
#     {
#       "id": "loggingsettings",
#       "name": "LoggingSettings",
#       "anchor": "class-loggingsettings",
#       "kind": "class"
#     },
#     {
#       "id": "mavendownloadsettings",
#       "name": "MavenDownloadSettings",
#       "anchor": "class-mavendownloadsettings",
#       "kind": "class"
#     },
#     {
#       "id": "get-settings",
#       "name": "get_settings",
#       "anchor": "function-get-settings",
#       "kind": "function"
#     },
#     {
#       "id": "read-local-repository-from-settings",
#       "name": "read_local_repository_from_settings",
#       "anchor": "function-read-local-repository-from-settings",
#       "kind": "function"
#     },
#     {
#       "id": "resolve-local-repository",
#       "name": "resolve_local_repository",
#       "anchor": "function-resolve-local-repository",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""Configuration models and local repository lookup for Maven downloads.

Settings are layered by :mod:`pydantic_settings`: explicit keyword arguments
beat ``MVNFETCH_*`` environment variables, which beat the defaults declared
here.  Nested domains use ``__`` as delimiter, e.g.
``MVNFETCH_REPOSITORY__URL`` or ``MVNFETCH_FETCH__WORKERS``.

The local repository root follows Maven's own precedence: an explicit
override, then ``<localRepository>`` from ``settings.xml`` under the Maven
home, then ``<maven_home>/repository``.
"""

from __future__ import annotations

import logging
import threading
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = [
    "DEFAULT_REPOSITORY_URL",
    "DEFAULT_REPOSITORY_ID",
    "RepositorySettings",
    "FetchSettings",
    "HttpSettings",
    "LoggingSettings",
    "MavenDownloadSettings",
    "get_settings",
    "reset_settings",
    "read_local_repository_from_settings",
    "resolve_local_repository",
]

LOGGER = logging.getLogger("ArtifactKit.MavenDownload.settings")

DEFAULT_REPOSITORY_URL = "https://repo1.maven.org/maven2"
DEFAULT_REPOSITORY_ID = "mavenCentral"
SETTINGS_FILE_NAME = "settings.xml"
_LOCAL_REPOSITORY_ELEMENT = "localRepository"


class RepositorySettings(BaseModel):
    """Remote repository location, credentials, and proxy."""

    model_config = ConfigDict(frozen=True, validate_assignment=False)

    url: str = Field(default=DEFAULT_REPOSITORY_URL, description="Base URL of the remote repository")
    id: str = Field(default=DEFAULT_REPOSITORY_ID, description="Repository identifier")
    username: Optional[str] = Field(default=None, description="HTTP Basic username")
    password: Optional[SecretStr] = Field(default=None, description="HTTP Basic password")
    proxy_host: Optional[str] = Field(default=None, description="HTTP proxy host")
    proxy_port: Optional[int] = Field(default=None, ge=1, le=65535, description="HTTP proxy port")

    @field_validator("url", mode="before")
    @classmethod
    def normalize_url(cls, v: Any) -> str:
        """Reject empty repository URLs."""
        value = str(v).strip()
        if not value:
            raise ValueError("repository url must not be empty")
        return value

    def credentials(self) -> Tuple[Optional[str], Optional[str]]:
        """Return ``(username, password)`` with the secret revealed."""
        password = self.password.get_secret_value() if self.password is not None else None
        return self.username, password

    def proxy_url(self) -> Optional[str]:
        """Return ``http://host:port`` when a proxy host is configured."""
        if not self.proxy_host:
            return None
        port = self.proxy_port or 80
        return f"http://{self.proxy_host}:{port}"


class FetchSettings(BaseModel):
    """Worker pool and commit behaviour of the artifact fetcher."""

    model_config = ConfigDict(frozen=True, validate_assignment=False)

    workers: int = Field(default=2, ge=1, le=32, description="Concurrent fetch workers")
    poll_interval: float = Field(
        default=0.1,
        gt=0.0,
        le=10.0,
        description="Seconds between cancellation checks while joining fetch tasks",
    )
    lock_commits: bool = Field(
        default=False,
        description="Serialize validate+commit per artifact across processes with a file lock",
    )
    lock_timeout: float = Field(
        default=30.0,
        ge=0.0,
        le=3600.0,
        description="Seconds to wait for the commit lock",
    )
    staging_dir: Optional[Path] = Field(
        default=None,
        description="Parent of per-fetch staging directories; must share a filesystem "
        "with the local repository (system temp directory when unset)",
    )


class HttpSettings(BaseModel):
    """HTTP client settings for the shared HTTPX client."""

    model_config = ConfigDict(frozen=True, validate_assignment=False)

    timeout_connect: float = Field(default=10.0, gt=0.0, le=120.0, description="Connect timeout")
    timeout_read: float = Field(default=60.0, gt=0.0, le=600.0, description="Read timeout")
    timeout_write: float = Field(default=60.0, gt=0.0, le=600.0, description="Write timeout")
    timeout_pool: float = Field(default=10.0, gt=0.0, le=120.0, description="Pool acquire timeout")
    pool_max_connections: int = Field(default=8, ge=1, le=256, description="Max connections")
    pool_keepalive_max: int = Field(default=4, ge=0, le=256, description="Keepalive pool size")
    trust_env: bool = Field(
        default=True,
        description="Honor HTTP(S)_PROXY and NO_PROXY environment variables",
    )
    user_agent: str = Field(
        default="ArtifactKit/mvnfetch",
        description="User-Agent header value",
    )


class LoggingSettings(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(frozen=True, validate_assignment=False)

    level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    emit_json_logs: bool = Field(
        default=True,
        description="Write JSON-lines log files when a log directory is configured",
    )

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        """Normalize and validate logging level."""
        upper = str(v).upper()
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR"}
        if upper not in valid_levels:
            raise ValueError(f"level must be one of {sorted(valid_levels)}, got '{v}'")
        return upper

    def level_int(self) -> int:
        """Convert level string to logging module integer."""
        return logging.getLevelName(self.level)


class MavenDownloadSettings(BaseSettings):
    """Top-level settings resolved from arguments, environment, and defaults."""

    model_config = SettingsConfigDict(
        env_prefix="MVNFETCH_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    repository: RepositorySettings = Field(default_factory=RepositorySettings)
    fetch: FetchSettings = Field(default_factory=FetchSettings)
    http: HttpSettings = Field(default_factory=HttpSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    local_repository: Optional[Path] = Field(
        default=None,
        validation_alias=AliasChoices("MVNFETCH_LOCAL_REPOSITORY", "MAVEN_REPO_LOCAL"),
        description="Explicit local repository root; overrides settings.xml",
    )
    maven_home: Path = Field(
        default_factory=lambda: Path.home() / ".m2",
        description="Directory holding settings.xml and the default repository",
    )

    @field_validator("local_repository", mode="before")
    @classmethod
    def empty_local_repository(cls, v: Any) -> Any:
        """Treat an empty override as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("maven_home", mode="before")
    @classmethod
    def normalize_maven_home(cls, v: Any) -> Path:
        return Path(v).expanduser()


_SETTINGS_LOCK = threading.Lock()
_SETTINGS: Optional[MavenDownloadSettings] = None


def get_settings() -> MavenDownloadSettings:
    """Return the process-wide settings, loading them on first use."""

    global _SETTINGS
    with _SETTINGS_LOCK:
        if _SETTINGS is None:
            _SETTINGS = MavenDownloadSettings()
        return _SETTINGS


def reset_settings() -> None:
    """Drop cached settings so the next :func:`get_settings` reloads them."""

    global _SETTINGS
    with _SETTINGS_LOCK:
        _SETTINGS = None


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def read_local_repository_from_settings(maven_home: Path) -> Optional[Path]:
    """Return ``<localRepository>`` from ``maven_home/settings.xml`` if present.

    Unreadable or malformed settings files are logged and ignored so the
    default location still applies.
    """

    settings_file = maven_home / SETTINGS_FILE_NAME
    if not settings_file.is_file():
        return None
    try:
        tree = ET.parse(settings_file)
    except (ET.ParseError, OSError):
        LOGGER.error(
            "Error reading settings.xml",
            exc_info=True,
            extra={"stage": "settings", "path": str(settings_file)},
        )
        return None
    for element in tree.getroot().iter():
        if _local_name(element.tag) != _LOCAL_REPOSITORY_ELEMENT:
            continue
        text = (element.text or "").strip()
        if not text:
            return None
        text = text.replace("${user.home}", str(Path.home()))
        return Path(text).expanduser()
    return None


def resolve_local_repository(settings: Optional[MavenDownloadSettings] = None) -> Path:
    """Locate the local repository root.

    Precedence: explicit ``local_repository`` override, then
    ``settings.xml``, then ``<maven_home>/repository``.
    """

    settings = settings or get_settings()
    if settings.local_repository is not None:
        return Path(settings.local_repository).expanduser()
    from_settings = read_local_repository_from_settings(settings.maven_home)
    if from_settings is not None:
        return from_settings
    return settings.maven_home / "repository"
