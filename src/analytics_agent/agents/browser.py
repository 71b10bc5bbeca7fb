"""
Playwright collaborators: element automation, analytics network listener,
page error policy and browser session lifecycle
"""
import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Protocol

from playwright.async_api import Browser, BrowserContext, Error as PlaywrightError, Page
from playwright.async_api import Response, TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from ..config import PlaywrightConfig
from ..errors import (
    ElementNotFoundError, ElementNotVisibleError, NavigationError, UnexpectedPageError
)
from ..models.capture import RawInterception
from ..utils.url_utils import matches_url_pattern

if TYPE_CHECKING:
    from .capture import RequestCaptureBuffer


class AutomationDriver(Protocol):
    """What the harness needs from a browser automation backend"""

    async def visit(self, url: str) -> None: ...

    async def click(self, locator: str) -> None: ...

    async def type(self, locator: str, text: str) -> None: ...

    async def select(self, locator: str, value: str) -> None: ...


class PlaywrightAutomation:
    """AutomationDriver backed by a Playwright page"""

    def __init__(self, page: Page, element_timeout: int = 10000,
                 navigation_timeout: int = 30000, wait_until: str = "load"):
        self.page = page
        self.element_timeout = element_timeout
        self.navigation_timeout = navigation_timeout
        self.wait_until = wait_until
        self.logger = logging.getLogger(self.__class__.__name__)

    async def visit(self, url: str) -> None:
        try:
            response = await self.page.goto(url, wait_until=self.wait_until,
                                            timeout=self.navigation_timeout)
        except PlaywrightError as e:
            raise NavigationError(f"Could not load {url}: {e}", action="visit", locator=url) from e

        status = response.status if response else None
        self.logger.info(f"Visited {url} (status {status})")

    async def click(self, locator: str) -> None:
        target = self.page.locator(locator).first
        await self._wait_for(target, "attached", "click", locator)
        try:
            # Overlays must not block the click
            await target.click(force=True, timeout=self.element_timeout)
        except PlaywrightError as e:
            raise ElementNotFoundError(f"Click on {locator} failed: {e}",
                                       action="click", locator=locator) from e

    async def type(self, locator: str, text: str) -> None:
        target = self.page.locator(locator).first
        await self._wait_for(target, "visible", "type", locator)
        try:
            await target.press_sequentially(text, timeout=self.element_timeout)
        except PlaywrightError as e:
            raise ElementNotVisibleError(f"Typing into {locator} failed: {e}",
                                         action="type", locator=locator) from e

    async def select(self, locator: str, value: str) -> None:
        target = self.page.locator(locator).first
        await self._wait_for(target, "attached", "select", locator)
        try:
            await target.select_option(value, timeout=self.element_timeout)
        except PlaywrightError as e:
            raise ElementNotFoundError(f"Selecting '{value}' in {locator} failed: {e}",
                                       action="select", locator=locator) from e

    async def _wait_for(self, target, state: str, action: str, locator: str) -> None:
        try:
            await target.wait_for(state=state, timeout=self.element_timeout)
        except PlaywrightTimeoutError as e:
            error_cls = ElementNotVisibleError if state == "visible" else ElementNotFoundError
            raise error_cls(
                f"{locator} not {state} within {self.element_timeout}ms",
                action=action, locator=locator
            ) from e
        except PlaywrightError as e:
            # e.g. selectors Playwright cannot parse
            raise ElementNotFoundError(f"Waiting for {locator} failed: {e}",
                                       action=action, locator=locator) from e


class NetworkListener:
    """Feeds matching Playwright responses into the capture buffer"""

    def __init__(self, buffer: 'RequestCaptureBuffer', method: str = "POST",
                 url_pattern: str = "*://*analytics.google.com/g/collect*"):
        self.buffer = buffer
        self.method = method.upper()
        self.url_pattern = url_pattern
        self.matched = 0
        self.logger = logging.getLogger(self.__class__.__name__)

    def attach(self, page: Page) -> None:
        page.on("response", self._handle_response)

    def matches(self, method: str, url: str) -> bool:
        return method.upper() == self.method and matches_url_pattern(url, self.url_pattern)

    def _handle_response(self, response: Response) -> None:
        request = response.request
        if not self.matches(request.method, response.url):
            return

        self.matched += 1
        try:
            post_data = request.post_data
        except UnicodeDecodeError:
            # Binary bodies cannot be decoded as text
            post_data = None

        raw = RawInterception(
            method=request.method,
            url=response.url,
            status=response.status,
            response_headers=dict(response.headers),
            timestamp=datetime.now().isoformat(),
            post_data=post_data,
        )
        self.buffer.observe(raw)


class PageErrorPolicy:
    """Allow-list of page runtime errors that must not fail a row"""

    def __init__(self, ignorable_signatures: Optional[List[str]] = None):
        self.ignorable_signatures = list(ignorable_signatures or [])
        self.unexpected: List[str] = []
        self.ignored = 0
        self.logger = logging.getLogger(self.__class__.__name__)

    def attach(self, page: Page) -> None:
        page.on("pageerror", lambda error: self.handle(getattr(error, "message", str(error))))

    def is_ignorable(self, message: str) -> bool:
        return any(signature in message for signature in self.ignorable_signatures)

    def handle(self, message: str) -> None:
        if self.is_ignorable(message):
            self.ignored += 1
            self.logger.info(f"Ignoring known page error: {message}")
            return
        self.logger.warning(f"Unexpected page error: {message}")
        self.unexpected.append(message)

    def begin_row(self) -> None:
        self.unexpected = []

    def raise_if_unexpected(self) -> None:
        if self.unexpected:
            raise UnexpectedPageError(f"Page raised {len(self.unexpected)} error(s): {self.unexpected[0]}",
                                      action="page")


class BrowserSession:
    """Async context manager owning the Playwright browser for one run"""

    def __init__(self, config: PlaywrightConfig):
        self.config = config
        self._playwright = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None
        self.logger = logging.getLogger(self.__class__.__name__)

    async def __aenter__(self) -> 'BrowserSession':
        self._playwright = await async_playwright().start()

        if self.config.browser_type == 'firefox':
            launcher = self._playwright.firefox
        elif self.config.browser_type == 'webkit':
            launcher = self._playwright.webkit
        else:
            launcher = self._playwright.chromium

        self.browser = await launcher.launch(headless=self.config.headless)

        context_options: Dict[str, Any] = {'viewport': self.config.viewport}
        if self.config.base_url:
            context_options['base_url'] = self.config.base_url
        if self.config.user_agent:
            context_options['user_agent'] = self.config.user_agent

        self.context = await self.browser.new_context(**context_options)
        self.page = await self.context.new_page()
        self.logger.info(f"Launched {self.config.browser_type} (headless={self.config.headless})")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.browser:
            await self.browser.close()
        if self._playwright:
            await self._playwright.stop()
        self.logger.info("Browser closed")
