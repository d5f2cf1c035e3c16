"""Canonical Pydantic models shared across all vaultcache modules.

This is the single source of truth for data shapes in the project. The
models fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`OfflineCacheConfig`, :class:`NotificationConfig`,
    :class:`RequestConfig`, :class:`OutputConfig`, :class:`GlobalConfig`,
    and :class:`Profile`.

**Message models** -- payloads crossing the worker boundary:
    :class:`PushPayload` and :class:`NotificationOptions`.

All models use Pydantic v2. Payload models that come from the backend use
``extra="allow"`` so that unknown keys are preserved in ``model_extra``.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator


# --- Cache Config ---


class OfflineCacheConfig(BaseModel):
    """Behaviour of the offline response cache manager.

    The two generation names identify the *current* static and API cache
    partitions. Bumping either name forces a clean slate: every other
    generation is purged when the new worker activates.

    Example::

        OfflineCacheConfig(
            static_cache_name="unityvault-v3",
            api_cache_name="unityvault-api-v3",
        )
    """

    static_cache_name: str = Field(
        default="unityvault-v2", description="Generation holding the static asset manifest"
    )
    api_cache_name: str = Field(
        default="unityvault-api-v2", description="Generation holding API GET responses"
    )
    api_prefix: str = Field(
        default="/api/", description="Paths starting with this prefix are API requests"
    )
    never_cache_segments: list[str] = Field(
        default_factory=lambda: ["/auth/", "/payments/"],
        description="API paths containing any of these segments bypass the cache",
    )
    ttl_ms: int = Field(
        default=300_000, gt=0, description="Maximum age of a served API entry in milliseconds"
    )
    max_api_entries: int = Field(
        default=50, gt=0, description="Capacity of the API generation"
    )
    static_assets: list[str] = Field(
        default_factory=lambda: ["/", "/index.html", "/offline.html"],
        description="Manifest fetched and stored at install time",
    )
    offline_page: str = Field(
        default="/offline.html", description="Fallback document for failed static requests"
    )
    cached_at_header: str = Field(
        default="x-sw-cached-at", description="Header carrying the storage timestamp"
    )

    @field_validator("static_assets")
    @classmethod
    def _manifest_not_empty(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("static_assets must list at least one path")
        return value


class NotificationConfig(BaseModel):
    """Defaults applied to push notifications when the payload omits a field."""

    title: str = "UnityVault"
    body: str = "You have a new notification"
    tag: str = "unityvault-notification"
    icon: str = "/icon-192x192.png"
    badge: str = "/icon-192x192.png"
    vibrate: list[int] = Field(default_factory=lambda: [200, 100, 200])
    default_url: str = "/"


class RequestConfig(BaseModel):
    """Default HTTP request settings applied to every backend call in a profile."""

    timeout: float = Field(default=30, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/vaultcache/config.json``.

    Loaded and saved by :func:`~vaultcache.config.load_global_config` and
    :func:`~vaultcache.config.save_global_config`. See
    :func:`~vaultcache.config.resolve_config` for the full precedence chain.
    """

    default_profile: Optional[str] = None
    auto_select_single_profile: bool = True
    output: OutputConfig = Field(default_factory=OutputConfig)
    cache: OfflineCacheConfig = Field(default_factory=OfflineCacheConfig)
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)


class Profile(BaseModel):
    """Per-portal profile stored as JSON under the ``profiles/`` config directory.

    A profile names one portal deployment: the origin the static assets and
    the ``/api/`` endpoints are served from.
    """

    model_config = ConfigDict(extra="allow")

    name: str
    base_url: str = Field(description="Origin of the portal, e.g. https://portal.example.org")
    request: RequestConfig = Field(default_factory=RequestConfig)

    @field_validator("base_url")
    @classmethod
    def _origin_only(cls, value: str) -> str:
        # Manifest paths and the /api/ prefix are rooted at the origin.
        if httpx.URL(value).path not in ("", "/"):
            raise ValueError(f"base_url must be an origin without a path, got: {value}")
        return value


# --- Message Models ---


class PushPayload(BaseModel):
    """JSON body of a push message sent by the backend.

    Every field is optional; :meth:`NotificationOptions.from_payload` fills
    the gaps from :class:`NotificationConfig`.
    """

    model_config = ConfigDict(extra="allow")

    title: Optional[str] = None
    body: Optional[str] = None
    tag: Optional[str] = None
    actions: Optional[list[dict[str, Any]]] = None
    data: Optional[dict[str, Any]] = None

    @field_validator("data", mode="before")
    @classmethod
    def _data_object_or_empty(cls, value: Any) -> Any:
        # A non-object ``data`` carries no click target; the default applies.
        return value if value is None or isinstance(value, dict) else {}


class NotificationOptions(BaseModel):
    """Options handed to the client shell when displaying a notification."""

    body: str
    icon: str
    badge: str
    vibrate: list[int] = Field(default_factory=list)
    tag: str
    require_interaction: bool = False
    actions: list[dict[str, Any]] = Field(default_factory=list)
    data: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_payload(
        cls, payload: PushPayload, defaults: NotificationConfig
    ) -> NotificationOptions:
        """Build options from *payload*, falling back to *defaults* for empty fields."""
        return cls(
            body=payload.body or defaults.body,
            icon=defaults.icon,
            badge=defaults.badge,
            vibrate=list(defaults.vibrate),
            tag=payload.tag or defaults.tag,
            require_interaction=False,
            actions=payload.actions or [],
            data=payload.data or {},
        )
