"""
In-memory stand-ins for the Playwright page surface used by detection and capture.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

from componentizer.services.detection.selectors import (
    ELEMENT_SNAPSHOT_SCRIPT,
    GENERIC_CONTAINERS_SCRIPT,
    PAGE_METRICS_SCRIPT,
)


class FakeElement:
    """Element handle with a fixed box, markup and computed styles."""

    def __init__(
        self,
        y: float,
        height: float,
        html: str = "",
        styles: Optional[Dict[str, str]] = None,
        x: float = 0,
        width: float = 1440,
        visible: bool = True,
    ):
        self.box = {"x": x, "y": y, "width": width, "height": height}
        self.html = html
        self.styles = styles or {}
        self.visible = visible

    async def is_visible(self) -> bool:
        return self.visible

    async def bounding_box(self) -> Optional[Dict[str, float]]:
        return dict(self.box) if self.visible else None

    async def evaluate(self, script: str, arg: Any = None) -> Dict[str, Any]:
        assert script == ELEMENT_SNAPSHOT_SCRIPT
        return {"html": self.html, "styles": dict(self.styles)}


class FakePage:
    """
    Page handle answering selector queries from a dict.

    generic: raw container dicts (x, y, width, height, html, styles);
    the minimum-height filter the browser script applies is emulated.
    """

    def __init__(
        self,
        page_height: float,
        elements: Optional[Dict[str, List[FakeElement]]] = None,
        generic: Optional[List[Dict[str, Any]]] = None,
        viewport_height: float = 900,
        page_width: float = 1440,
        fail_queries: int = 0,
        fail_screenshots: int = 0,
    ):
        self.page_height = page_height
        self.viewport_height = viewport_height
        self.page_width = page_width
        self.elements = elements or {}
        self.generic = generic or []
        self.fail_queries = fail_queries
        self.fail_screenshots = fail_screenshots
        self.queries: List[str] = []
        self.screenshots: List[Dict[str, Any]] = []

    async def query_selector_all(self, selector: str) -> List[FakeElement]:
        if self.fail_queries:
            self.fail_queries -= 1
            raise RuntimeError("Target page, context or browser has been closed")
        self.queries.append(selector)
        return list(self.elements.get(selector, []))

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        if script == PAGE_METRICS_SCRIPT:
            return {
                "pageHeight": self.page_height,
                "viewportHeight": self.viewport_height,
                "pageWidth": self.page_width,
            }
        if script == GENERIC_CONTAINERS_SCRIPT:
            min_height = arg["minHeight"]
            min_width = arg["minWidth"]
            return [
                dict(item) for item in self.generic
                if item["height"] >= min_height and item.get("width", self.page_width) >= min_width
            ]
        raise AssertionError(f"Unexpected script: {script[:40]}")

    async def screenshot(self, path: str, full_page: bool = False, clip: Optional[Dict] = None) -> bytes:
        if self.fail_screenshots:
            self.fail_screenshots -= 1
            raise RuntimeError("Screenshot timeout")
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        Path(path).write_bytes(b"\x89PNG")
        self.screenshots.append({"path": path, "full_page": full_page, "clip": clip})
        return b"\x89PNG"


def landing_page() -> FakePage:
    """header / hero / footer, each one viewport tall."""
    return FakePage(
        page_height=2700,
        elements={
            "header": [FakeElement(0, 900, '<header><nav><a href="/">Acme</a></nav></header>')],
            '[class*="hero"]': [FakeElement(
                900, 900,
                '<section class="hero"><h1>Welcome</h1><p>Ship faster.</p>'
                '<a class="btn" href="/signup">Start free</a></section>',
                {"backgroundColor": "rgb(255, 255, 255)"},
            )],
            "footer": [FakeElement(1800, 900, "<footer><p>© Acme</p></footer>")],
        },
    )
