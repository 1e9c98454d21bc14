"""
Screenshot capture clients.

ScreenshotOne renders the page remotely; the Playwright capturer drives a
local headless Chromium. Both return PNG bytes for a URL.
"""

import asyncio
import logging
from typing import Optional

import requests
from playwright.async_api import async_playwright

from config import settings
from core.exceptions import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)

SCREENSHOTONE_API_URL = "https://api.screenshotone.com/take"


class ScreenshotCapturer:
    """Contract: given a URL, return image bytes."""

    def capture(self, url: str) -> bytes:
        raise NotImplementedError


class ScreenshotOneCapturer(ScreenshotCapturer):
    """Full-page PNG screenshots through the ScreenshotOne API."""

    def __init__(
        self,
        access_key: Optional[str] = None,
        viewport_width: Optional[int] = None,
        viewport_height: Optional[int] = None,
        timeout: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ):
        self.access_key = (
            settings.SCREENSHOTONE_ACCESS_KEY if access_key is None else access_key
        )
        self.viewport_width = viewport_width or settings.VIEWPORT_WIDTH
        self.viewport_height = viewport_height or settings.VIEWPORT_HEIGHT
        self.timeout = timeout or settings.SCREENSHOT_TIMEOUT
        self.session = session or requests.Session()

    def capture(self, url: str) -> bytes:
        if not self.access_key:
            raise ConfigurationError(
                "SCREENSHOTONE_ACCESS_KEY not configured. Set it to enable screenshots."
            )

        params = {
            "access_key": self.access_key,
            "url": url,
            "full_page": "true",
            "format": "png",
            "viewport_width": str(self.viewport_width),
            "viewport_height": str(self.viewport_height),
            "block_ads": "true",
            "block_cookie_banners": "true",
        }
        logger.info(f"📸 Requesting ScreenshotOne capture for {url}")
        try:
            response = self.session.get(
                SCREENSHOTONE_API_URL, params=params, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise UpstreamError(f"Screenshot API request failed: {e}") from e

        if not response.ok:
            raise UpstreamError(
                f"Screenshot API error: {response.status_code} {response.text[:500]}"
            )
        return response.content


class PlaywrightCapturer(ScreenshotCapturer):
    """Full-page PNG screenshots from a local headless Chromium."""

    def __init__(
        self,
        viewport_width: Optional[int] = None,
        viewport_height: Optional[int] = None,
        timeout: Optional[int] = None,
    ):
        self.viewport_width = viewport_width or settings.VIEWPORT_WIDTH
        self.viewport_height = viewport_height or settings.VIEWPORT_HEIGHT
        self.timeout = timeout or settings.SCREENSHOT_TIMEOUT

    async def _capture_async(self, url: str) -> bytes:
        async with async_playwright() as p:
            try:
                browser = await p.chromium.launch(headless=True)
            except Exception as e:
                raise UpstreamError(f"Failed to launch browser: {e}") from e

            try:
                context = await browser.new_context(
                    viewport={
                        "width": self.viewport_width,
                        "height": self.viewport_height,
                    }
                )
                page = await context.new_page()
                await page.goto(url, wait_until="load", timeout=self.timeout * 1000)
                # Wait a bit for any dynamic content
                await page.wait_for_timeout(2000)
                return await page.screenshot(full_page=True, type="png")
            finally:
                await browser.close()

    def capture(self, url: str) -> bytes:
        logger.info(f"📸 Capturing {url} with Playwright")
        try:
            return asyncio.run(self._capture_async(url))
        except UpstreamError:
            raise
        except Exception as e:
            raise UpstreamError(f"Screenshot capture failed: {e}") from e


def get_screenshot_capturer() -> ScreenshotCapturer:
    """Build the capturer selected by SCREENSHOT_PROVIDER."""
    provider = settings.SCREENSHOT_PROVIDER.lower()
    if provider == "playwright":
        return PlaywrightCapturer()
    if provider == "screenshotone":
        return ScreenshotOneCapturer()
    raise ConfigurationError(f"Unknown SCREENSHOT_PROVIDER: {settings.SCREENSHOT_PROVIDER}")
