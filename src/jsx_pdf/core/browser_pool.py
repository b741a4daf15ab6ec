"""
Headless browser lifecycle management.

A BrowserSession owns one Playwright driver and one Chromium process and
guarantees both are released exactly once. BrowserPool keeps a bounded set
of warm sessions and hands them out with checkout/return semantics; both
follow the same acquire/use/release contract.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Callable, List, Optional

from playwright.async_api import Browser, Playwright, PlaywrightContextManager, async_playwright
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..errors import RenderEngineError, RenderEngineTimeoutError

logger = logging.getLogger(__name__)

DEFAULT_BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--font-render-hinting=none",
    "--disable-font-subpixel-positioning",
]


@dataclass(frozen=True)
class EngineTimeouts:
    """Timeouts in milliseconds for each engine stage."""

    launch_ms: int = 30000
    navigation_ms: int = 30000
    pdf_ms: int = 30000


class BrowserSession:
    """
    One Playwright driver plus one Chromium browser.

    Usage:
        async with BrowserSession() as session:
            context = await session.browser.new_context()
    """

    def __init__(
        self,
        headless: bool = True,
        browser_args: Optional[List[str]] = None,
        launch_timeout_ms: int = 30000,
    ):
        """
        Initialize the BrowserSession.

        Args:
            headless: Whether to run browser in headless mode
            browser_args: Additional browser launch arguments
            launch_timeout_ms: Bound on driver start plus browser launch
        """
        self.headless = headless
        self.browser_args = browser_args or []
        self.launch_timeout_ms = launch_timeout_ms
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self._driver: Optional[PlaywrightContextManager] = None

    async def __aenter__(self) -> "BrowserSession":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @property
    def is_connected(self) -> bool:
        return self.browser is not None and self.browser.is_connected()

    async def _launch(self) -> None:
        # Held before awaiting so a driver interrupted mid-start can still be stopped
        self._driver = async_playwright()
        self.playwright = await self._driver.start()
        self.browser = await self.playwright.chromium.launch(
            headless=self.headless,
            args=DEFAULT_BROWSER_ARGS + self.browser_args,
            timeout=self.launch_timeout_ms,
        )

    async def start(self) -> None:
        """
        Start the driver and launch the browser.

        Raises:
            RenderEngineTimeoutError: If launching exceeds the timeout
            RenderEngineError: If launching fails
        """
        try:
            await asyncio.wait_for(self._launch(), timeout=self.launch_timeout_ms / 1000)
            logger.info("Browser started successfully")
        except (asyncio.TimeoutError, PlaywrightTimeoutError) as e:
            logger.error(f"Browser startup timed out after {self.launch_timeout_ms}ms")
            await self.close()
            raise RenderEngineTimeoutError(
                "Browser startup timed out", f"exceeded {self.launch_timeout_ms}ms"
            ) from e
        except asyncio.CancelledError:
            await self.close()
            raise
        except Exception as e:
            logger.error(f"Failed to start browser: {e}")
            await self.close()
            raise RenderEngineError("Browser startup failed", str(e)) from e

    async def close(self) -> None:
        """Close the browser and stop the driver; safe to call repeatedly."""
        browser, self.browser = self.browser, None
        playwright, self.playwright = self.playwright, None
        driver, self._driver = self._driver, None

        try:
            if browser:
                await browser.close()
                logger.debug("Browser stopped")
        except Exception as e:
            logger.warning(f"Error stopping browser: {e}")

        try:
            if playwright:
                await playwright.stop()
                logger.debug("Playwright stopped")
            elif driver:
                await driver.__aexit__(None, None, None)
                logger.debug("Interrupted playwright driver stopped")
        except Exception as e:
            logger.warning(f"Error stopping playwright: {e}")


class BrowserPool:
    """
    Bounded pool of warm browser sessions.

    A semaphore caps the number of sessions in use; idle sessions wait in an
    asyncio.Queue. Sessions that disconnected or were used by a failed render
    are closed instead of returned.
    """

    def __init__(self, size: int, session_factory: Callable[[], BrowserSession]):
        """
        Initialize the BrowserPool.

        Args:
            size: Maximum number of concurrent browser sessions
            session_factory: Creates a new, unstarted session
        """
        if size < 1:
            raise ValueError(f"Pool size must be at least 1, got {size}")
        self.size = size
        self._session_factory = session_factory
        self._slots = asyncio.Semaphore(size)
        self._idle: "asyncio.Queue[BrowserSession]" = asyncio.Queue()
        self._closed = False

    @property
    def idle_count(self) -> int:
        return self._idle.qsize()

    async def _acquire(self) -> BrowserSession:
        while not self._idle.empty():
            session = self._idle.get_nowait()
            if session.is_connected:
                return session
            logger.info("Discarding disconnected pooled browser")
            await session.close()

        session = self._session_factory()
        await session.start()
        return session

    @asynccontextmanager
    async def checkout(self) -> AsyncIterator[BrowserSession]:
        """
        Check out a session for one render.

        Yields:
            Started BrowserSession, returned to the pool afterwards

        Raises:
            RenderEngineError: If the pool is closed or a browser cannot start
        """
        if self._closed:
            raise RenderEngineError("Browser pool is closed")

        await self._slots.acquire()
        session: Optional[BrowserSession] = None
        healthy = False
        try:
            session = await self._acquire()
            yield session
            healthy = True
        finally:
            if session is not None:
                if healthy and not self._closed and session.is_connected:
                    self._idle.put_nowait(session)
                else:
                    await session.close()
            self._slots.release()

    async def close(self) -> None:
        """Close all idle sessions; checked-out sessions close on return."""
        self._closed = True
        while not self._idle.empty():
            session = self._idle.get_nowait()
            await session.close()
        logger.info("Browser pool closed")
