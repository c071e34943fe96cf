"""
Screenshot capture for detected regions, plus the browser session used by the CLI.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Optional

from playwright.async_api import async_playwright

from ..core.config import Config
from .models import Region

logger = logging.getLogger(__name__)


def screenshot_filename(index: int, region: Region) -> str:
    """{NN}-{type}.png, NN being the 1-based position."""
    return f"{index + 1:02d}-{region.type.value}.png"


class ScreenshotCapturer:
    """Takes clipped full-page screenshots of regions into one directory."""

    def __init__(self, output_dir: str):
        self.output_dir = Path(output_dir)

    async def capture(self, page: Any, region: Region, index: int) -> str:
        """
        Screenshot one region.

        Returns:
            Path of the written PNG

        Raises:
            ValueError: If the region has an empty bounding box
            Exception: Whatever the page handle raises
        """
        box = region.bounding_box
        if box.width <= 0 or box.height <= 0:
            raise ValueError(f"Cannot capture {region.type.value}: empty bounding box")

        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / screenshot_filename(index, region)
        await page.screenshot(
            path=str(path),
            full_page=True,
            clip={"x": box.x, "y": box.y, "width": box.width, "height": box.height},
        )
        logger.debug(f"Captured {region.type.value} to {path}")
        return str(path)


@asynccontextmanager
async def open_page(
    url: str,
    viewport_width: Optional[int] = None,
    viewport_height: Optional[int] = None,
    timeout_ms: Optional[int] = None,
) -> AsyncIterator[Any]:
    """
    Launch headless Chromium and yield a page navigated to `url`.

    The browser is closed on exit, including when the body raises.
    """
    viewport = {
        "width": viewport_width or Config.VIEWPORT_WIDTH,
        "height": viewport_height or Config.VIEWPORT_HEIGHT,
    }
    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=True)
        try:
            context = await browser.new_context(viewport=viewport, device_scale_factor=1)
            page = await context.new_page()
            logger.info(f"Navigating to {url}")
            await page.goto(url, wait_until="networkidle", timeout=timeout_ms or Config.PAGE_TIMEOUT_MS)
            yield page
        finally:
            await browser.close()
