# session.py
from typing import Any, Dict, Optional

from playwright.async_api import async_playwright, Page, Browser, BrowserContext

from .constants import logger, BASE_URL, DEFAULT_TIMEOUT, TIME_PER_BUBBLE
from .models import Snapshot
from .registry import IdentityRegistry
from .rules import DEFAULT_RULES
from .snapshots import capture_snapshot


class HarnessSession:
    """Browser plus the page currently under test and its identity registry."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self.playwright = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None
        self.registry = IdentityRegistry()
        self.rules = self.config.get('rules') or list(DEFAULT_RULES)
        self.interval = self.config.get('interval', TIME_PER_BUBBLE)

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.cleanup()

    async def initialize(self):
        self.playwright = await async_playwright().start()
        try:
            self.browser = await self.playwright.chromium.launch(
                headless=not self.config.get('headful', False)
            )
        except Exception:
            # __aexit__ does not run when __aenter__ fails
            await self.playwright.stop()
            self.playwright = None
            raise

    async def cleanup(self):
        await self._close_context()
        if self.browser:
            await self.browser.close()
        if self.playwright:
            await self.playwright.stop()

    async def _close_context(self):
        if self.context:
            await self.context.close()
        self.context = None
        self.page = None

    async def open(self, path: str) -> Page:
        """Fresh context and page for one scenario, so storage never leaks between them."""
        await self._close_context()
        self.context = await self.browser.new_context(base_url=self.config.get('base_url', BASE_URL))
        self.context.set_default_timeout(self.config.get('timeout', DEFAULT_TIMEOUT))
        self.page = await self.context.new_page()
        await self.goto(path)
        return self.page

    async def goto(self, path: str):
        logger.debug(f"Navigating to {path}")
        await self.page.goto(path)
        self.registry.reset()

    async def reload(self):
        logger.debug("Reloading page")
        await self.page.reload()
        self.registry.reset()

    async def snapshot(self) -> Snapshot:
        return await capture_snapshot(self.page, self.registry)
