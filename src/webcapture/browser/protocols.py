"""Engine-neutral browser page interface."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol


class WaitCondition(str, Enum):
    """Navigation completion conditions, spelled per engine by each adapter."""

    LOAD = "load"
    DOM_CONTENT_LOADED = "domcontentloaded"
    NETWORK_IDLE = "networkidle"


@dataclass(frozen=True)
class Viewport:
    width: int = 1280
    height: int = 800


@dataclass(frozen=True)
class BrowserOptions:
    """
    Settings applied to every page a session opens.

    Attributes:
        headless: Run the browser without a window
        viewport: Page viewport size
        user_agent: User-Agent presented to the site (None keeps the engine default)
        extra_headers: Extra HTTP headers sent with every request
        launch_args: Command line flags passed to the browser binary
    """

    headless: bool = True
    viewport: Viewport = field(default_factory=Viewport)
    user_agent: str | None = None
    extra_headers: dict[str, str] = field(default_factory=dict)
    launch_args: tuple[str, ...] = (
        "--no-sandbox",
        "--disable-setuid-sandbox",
        "--disable-dev-shm-usage",
    )


class BrowserPage(Protocol):
    """
    A single browser tab, independent of the automation library behind it.

    Adapters translate wait conditions, viewport and user-agent calls to
    their engine's own API.
    """

    engine_name: str

    async def set_headers(self, headers: dict[str, str]) -> None: ...

    async def set_user_agent(self, user_agent: str) -> None: ...

    async def set_viewport(self, viewport: Viewport) -> None: ...

    async def navigate(
        self,
        url: str,
        *,
        wait_until: WaitCondition = WaitCondition.NETWORK_IDLE,
        timeout_ms: float = 30000,
    ) -> None:
        """
        Load ``url`` and wait for ``wait_until``.

        Raises:
            Exception: engine timeout or navigation error
        """
        ...

    async def content(self) -> str:
        """Return the rendered document as HTML."""
        ...

    async def screenshot(self) -> bytes:
        """Return a PNG of the current viewport (not the full page)."""
        ...

    async def close(self) -> None: ...
