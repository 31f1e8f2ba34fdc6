# src/servicenow/renderer.py — v1
"""Single-article rendering — log into the instance in a headless browser and
print each article's print view to PDF.

One browser page is reused for the whole batch; articles are rendered one at
a time. Entering the renderer performs the login, so a login failure surfaces
before any article is attempted.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from pdfetch.config.settings import Settings, instance_url
from pdfetch.storage.layout import pdf_file_name

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login.do"
ARTICLE_PATH = "/kb_view.do?sysparm_article={number}&sysparm_media=print"

USER_FIELD = "#user_name"
PASSWORD_FIELD = "#user_password"
LOGIN_BUTTON = "#sysverb_login"

# Standard KB page chrome that should not end up in the PDF.
REMOVED_SELECTORS: tuple[str, ...] = (
    "#versionNumber",
    "#articleStarRatingGroup",
    ".kb-article-view-count",
    ".snc-article-header-author",
)

_EXPAND_DETAILS_JS = """() => {
    const tags = document.querySelectorAll("details");
    tags.forEach((d) => { d.open = true; });
    return tags.length;
}"""

_REMOVE_ELEMENTS_JS = """(selectors) => {
    let removed = 0;
    for (const selector of selectors) {
        const element = document.querySelector(selector);
        if (element) { element.remove(); removed++; }
    }
    return removed;
}"""


class RenderError(Exception):
    """Raised when the rendering session cannot be established or used."""


class BaseArticleRenderer(ABC):
    """Async context manager turning article numbers into PDF files."""

    async def __aenter__(self) -> BaseArticleRenderer:
        await self.open()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    @abstractmethod
    async def open(self) -> None:
        """Start the session (log in). Raises RenderError."""

    @abstractmethod
    async def close(self) -> None:
        """Release the session. Safe to call more than once."""

    @abstractmethod
    async def render(self, number: str, destination_dir: Path) -> Path:
        """Render one article to ``destination_dir/<number>.pdf``."""


class PlaywrightRenderer(BaseArticleRenderer):
    """Chromium via playwright.async_api."""

    def __init__(
        self,
        instance_name: str,
        user_name: str,
        password: str,
        *,
        headless: bool = True,
        timeout_ms: int = 60_000,
        pdf_format: str = "A4",
    ) -> None:
        self._base_url = instance_url(instance_name)
        self._user_name = user_name
        self._password = password
        self._headless = headless
        self._timeout_ms = timeout_ms
        self._pdf_format = pdf_format
        self._playwright: Any = None
        self._browser: Any = None
        self._page: Any = None

    @classmethod
    def from_settings(cls, settings: Settings) -> PlaywrightRenderer:
        return cls(
            settings.sn_instance_name,
            settings.sn_user_name,
            settings.sn_pass,
            headless=settings.render_headless,
            timeout_ms=settings.render_timeout_ms,
            pdf_format=settings.pdf_format,
        )

    async def open(self) -> None:
        from playwright.async_api import Error as PlaywrightError
        from playwright.async_api import async_playwright

        logger.info("Opening headless browser...")
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(headless=self._headless)
            self._page = await self._browser.new_page()
            self._page.set_default_timeout(self._timeout_ms)
            await self.login(self._page)
        except PlaywrightError as e:
            await self.close()
            raise RenderError(f"Could not open a browser session: {e}") from e
        except RenderError:
            await self.close()
            raise

    async def login(self, page: Any) -> None:
        """Submit the instance login form on ``page``."""
        logger.info("Logging in to %s...", self._base_url)
        await page.goto(f"{self._base_url}{LOGIN_PATH}", wait_until="networkidle")
        await page.fill(USER_FIELD, self._user_name)
        await page.fill(PASSWORD_FIELD, self._password)
        async with page.expect_navigation(wait_until="networkidle"):
            await page.click(LOGIN_BUTTON)
        # A failed login lands back on the login form.
        if await page.query_selector(PASSWORD_FIELD) is not None:
            raise RenderError(f"Login to {self._base_url} failed for user {self._user_name!r}")

    async def close(self) -> None:
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
            self._page = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    async def render(self, number: str, destination_dir: Path) -> Path:
        if self._page is None:
            raise RenderError("Renderer used outside of its session")
        page = self._page
        url = f"{self._base_url}{ARTICLE_PATH.format(number=number)}"
        logger.info("Downloading KB article %s...", number)
        await page.goto(url, wait_until="networkidle")
        await prepare_for_print(page)
        destination = Path(destination_dir) / pdf_file_name(number)
        await page.pdf(path=str(destination), format=self._pdf_format, print_background=True)
        logger.info("Done. Successfully downloaded %s.", number)
        return destination


async def prepare_for_print(page: Any) -> None:
    """Expand every ``<details>`` and drop the page chrome."""
    expanded = await page.evaluate(_EXPAND_DETAILS_JS)
    if expanded:
        logger.debug('Found and expanded %d "<details>" HTML tag(s) for print.', expanded)
    await page.evaluate(_REMOVE_ELEMENTS_JS, list(REMOVED_SELECTORS))


def create_renderer(settings: Settings) -> BaseArticleRenderer:
    return PlaywrightRenderer.from_settings(settings)
