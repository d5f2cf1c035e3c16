"""Push notification display and click-through navigation.

The worker never draws a notification or a window itself; it asks a
:class:`ClientShell` -- the host's window and notification surface -- to do
so.  :class:`InMemoryShell` is the shell used by the CLI and the
test-suite: it records notifications and keeps a list of open windows.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from pydantic import ValidationError

from vaultcache.exceptions import PushPayloadError
from vaultcache.models import NotificationOptions, PushPayload

RawPayload = Union[bytes, str, dict, None]


def parse_push_payload(raw: RawPayload) -> Optional[PushPayload]:
    """Decode a push message body.

    Returns:
        ``None`` when the message carried no payload.

    Raises:
        PushPayloadError: If the payload is not a JSON object of the
            expected shape.
    """
    if raw is None or raw == b"" or raw == "":
        return None
    if isinstance(raw, (bytes, str)):
        try:
            raw = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise PushPayloadError(f"Push payload is not valid JSON: {exc}") from exc
    if not isinstance(raw, dict):
        raise PushPayloadError(f"Push payload must be a JSON object, got {type(raw).__name__}")
    try:
        return PushPayload.model_validate(raw)
    except ValidationError as exc:
        raise PushPayloadError(f"Invalid push payload: {exc}") from exc


@dataclass
class Notification:
    """A displayed notification, handed back to the worker on click."""

    title: str
    options: NotificationOptions
    closed: bool = False

    @property
    def data(self) -> dict[str, Any]:
        return self.options.data

    def close(self) -> None:
        self.closed = True


class WindowClient(ABC):
    """An open application window or tab."""

    url: str
    focusable: bool = True

    @abstractmethod
    async def focus(self) -> WindowClient:
        """Bring the window to the foreground."""


class ClientShell(ABC):
    """Host surface for notifications and application windows.

    ``can_open_windows`` is ``False`` on hosts that cannot create new
    windows; :meth:`open_window` is then never called.
    """

    can_open_windows: bool = True

    @abstractmethod
    async def show_notification(self, title: str, options: NotificationOptions) -> Notification:
        """Display a system notification."""

    @abstractmethod
    async def match_windows(self, include_uncontrolled: bool = False) -> list[WindowClient]:
        """Return open windows, optionally including ones not controlled by the worker."""

    async def open_window(self, url: str) -> Optional[WindowClient]:
        return None

    async def claim(self) -> None:
        """Take control of every open window.  No-op by default."""


@dataclass
class InMemoryWindow(WindowClient):
    url: str
    controlled: bool = False
    focused: bool = False
    focusable: bool = True

    async def focus(self) -> InMemoryWindow:
        self.focused = True
        return self


@dataclass
class InMemoryShell(ClientShell):
    """Shell that keeps notifications and windows in lists.

    Example::

        shell = InMemoryShell(windows=[InMemoryWindow("/member/loans")])
    """

    windows: list[InMemoryWindow] = field(default_factory=list)
    notifications: list[Notification] = field(default_factory=list)
    can_open_windows: bool = True

    async def show_notification(self, title: str, options: NotificationOptions) -> Notification:
        notification = Notification(title=title, options=options)
        self.notifications.append(notification)
        return notification

    async def match_windows(self, include_uncontrolled: bool = False) -> list[WindowClient]:
        return [w for w in self.windows if include_uncontrolled or w.controlled]

    async def open_window(self, url: str) -> Optional[WindowClient]:
        if not self.can_open_windows:
            return None
        window = InMemoryWindow(url=url, controlled=True, focused=True)
        self.windows.append(window)
        return window

    async def claim(self) -> None:
        for window in self.windows:
            window.controlled = True
