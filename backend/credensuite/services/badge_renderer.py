"""
Badge PDF Renderer

Renders the badge HTML to a two-page PDF (front and back), and the members
directory to A4, with headless Chromium via Playwright. Each render gets its
own browser, opened and closed inside ``headless_page`` so nothing outlives
the call, whatever happens.
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, List, Optional

from playwright.async_api import Page, async_playwright
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from credensuite.core.config import settings
from credensuite.core.exceptions import BadgeRenderError, BadgeRenderTimeoutError, DirectoryRenderError
from credensuite.core.logging_config import get_logger
from credensuite.services.badge_template import AssetResolver, build_badge_html, prepare_badge_assets

logger = get_logger(__name__)


class BadgeRenderer:
    """Headless Chromium PDF export for ID cards and the members directory"""

    def __init__(
        self,
        playwright_factory: Callable = async_playwright,
        timeout_seconds: Optional[float] = None,
        browser_args: Optional[List[str]] = None,
    ):
        self.playwright_factory = playwright_factory
        self.timeout_seconds = timeout_seconds or settings.PDF_RENDER_TIMEOUT_SECONDS
        self.browser_args = browser_args if browser_args is not None else settings.PDF_BROWSER_ARGS

    @property
    def timeout_ms(self) -> float:
        return self.timeout_seconds * 1000

    @asynccontextmanager
    async def headless_page(self) -> AsyncIterator[Page]:
        """A fresh page in a fresh browser; page and browser are closed on exit"""
        async with self.playwright_factory() as playwright:
            browser = await playwright.chromium.launch(
                headless=True,
                args=self.browser_args,
                timeout=self.timeout_ms,
            )
            try:
                page = await browser.new_page()
                try:
                    page.set_default_timeout(self.timeout_ms)
                    yield page
                finally:
                    await page.close()
            finally:
                await browser.close()

    async def _print(self, html: str, media: str, **pdf_options) -> bytes:
        async with self.headless_page() as page:
            await page.set_content(html, wait_until="load", timeout=self.timeout_ms)
            await page.emulate_media(media=media, color_scheme="light")
            return await page.pdf(**pdf_options)

    async def html_to_pdf(self, html: str, member_ref: Optional[str] = None) -> bytes:
        """Render ``html`` to PDF bytes, one card-sized page per ``.card-page``"""
        start_time = time.perf_counter()
        try:
            pdf_bytes = await self._print(
                html,
                "screen",
                width=settings.PDF_CARD_WIDTH,
                height=settings.PDF_CARD_HEIGHT,
                margin={"top": "0", "right": "0", "bottom": "0", "left": "0"},
                print_background=True,
            )
        except PlaywrightTimeoutError as e:
            logger.error(f"Badge render timed out for {member_ref}: {e}")
            raise BadgeRenderTimeoutError(self.timeout_seconds, member_ref) from e
        except Exception as e:
            logger.log_error_with_context(e, "badge_render", member_id=member_ref)
            raise BadgeRenderError(f"Badge rendering failed: {type(e).__name__}: {e}", member_ref) from e

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.log_performance(
            "badge_render",
            duration_ms,
            threshold_ms=self.timeout_ms / 2,
            member_id=member_ref,
            pdf_bytes=len(pdf_bytes),
        )
        return pdf_bytes

    async def render_badge_pdf(
        self,
        member,
        org_settings=None,
        template=None,
        resolver: Optional[AssetResolver] = None,
    ) -> bytes:
        """Build the badge HTML for ``member`` and export it to PDF"""
        try:
            assets = await prepare_badge_assets(member, org_settings, resolver)
            html = build_badge_html(member, org_settings, template, assets)
        except Exception as e:
            logger.log_error_with_context(e, "badge_html", member_id=member.member_id)
            raise BadgeRenderError(f"Badge template failed: {type(e).__name__}: {e}", member.member_id) from e
        return await self.html_to_pdf(html, member_ref=member.member_id)

    async def render_directory_pdf(self, html: str, member_count: int = 0) -> bytes:
        """A4 members directory; pagination is already laid out in ``html``"""
        start_time = time.perf_counter()
        try:
            pdf_bytes = await self._print(
                html,
                "print",
                format="A4",
                margin={"top": "0", "right": "0", "bottom": "0", "left": "0"},
                print_background=True,
                prefer_css_page_size=True,
            )
        except PlaywrightTimeoutError as e:
            logger.error(f"Members directory render timed out: {e}")
            raise DirectoryRenderError(f"Directory rendering timed out after {self.timeout_seconds}s") from e
        except Exception as e:
            logger.log_error_with_context(e, "directory_render", member_count=member_count)
            raise DirectoryRenderError(f"Directory rendering failed: {type(e).__name__}: {e}") from e

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.log_performance(
            "directory_render",
            duration_ms,
            threshold_ms=self.timeout_ms / 2,
            member_count=member_count,
            pdf_bytes=len(pdf_bytes),
        )
        return pdf_bytes


# Singleton instance
badge_renderer = BadgeRenderer()
