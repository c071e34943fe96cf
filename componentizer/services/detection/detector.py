"""Section detection with coverage-driven fallback.

Detection runs an ordered chain of stages:

1. StructuralStage        - per-type CSS queries (header, hero, pricing, ...)
2. GenericContainerStage  - section/article/main > div typed by position
3. ViewportPartitionStage - equal viewport-height bands typed by position

Each stage reports the fraction of page height it covers. The chain stops
at the first stage whose coverage is sufficient; the viewport partition is
terminal and always accepted, so obfuscated pages still get full coverage.

Finding nothing is not an error. Only faults from the page handle itself
(query or evaluate failures) propagate as DetectionError.
"""

import asyncio
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from ...core.config import Config, load_selector_overrides
from ...core.exceptions import DetectionError
from ...core.observability import get_logfire
from ..content_extractor import extract_region_content
from ..models import (
    BoundingBox,
    REPEATABLE_TYPES,
    Region,
    SINGLETON_TYPES,
    SectionType,
)
from ..normalizer import normalize_markup
from .selectors import (
    CAPTURED_STYLE_PROPERTIES,
    ELEMENT_SNAPSHOT_SCRIPT,
    GENERIC_CONTAINER_SELECTOR,
    GENERIC_CONTAINERS_SCRIPT,
    PAGE_METRICS_SCRIPT,
    build_selector_table,
)

logger = logging.getLogger(__name__)

COVERAGE_THRESHOLD = 0.7
MIN_ACCEPTED_REGIONS = 5
OVERLAP_RATIO = 0.8

SINGLETON_VISIBILITY_TIMEOUT = 0.5
REPEATABLE_VISIBILITY_TIMEOUT = 0.3

GENERIC_MIN_HEIGHT = 100
GENERIC_MIN_WIDTH = 100
GENERIC_DUPLICATE_DISTANCE = 100

VIEWPORT_BAND_MIN_HEIGHT = 200
VIEWPORT_INHERIT_RATIO = 0.5
# Heuristic only: no ground truth for what sits between hero and cta
VIEWPORT_MIDDLE_ROTATION = (
    SectionType.FEATURES,
    SectionType.TESTIMONIALS,
    SectionType.PRICING,
)


# ---------------------------------------------------------------------------
# Data
# ---------------------------------------------------------------------------

@dataclass
class PageMetrics:
    page_height: float
    viewport_height: float
    page_width: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PageMetrics":
        return cls(
            page_height=float(data.get('pageHeight') or 0),
            viewport_height=float(data.get('viewportHeight') or Config.VIEWPORT_HEIGHT),
            page_width=float(data.get('pageWidth') or Config.VIEWPORT_WIDTH),
        )


@dataclass
class DetectionContext:
    """Inputs shared by all stages of one detection run."""
    page: Any
    metrics: PageMetrics
    max_regions: int
    min_height: float
    structural: List[Region] = field(default_factory=list)


@dataclass
class StageOutcome:
    stage: str
    regions: List[Region]
    coverage: float

    @property
    def sufficient(self) -> bool:
        return self.coverage >= COVERAGE_THRESHOLD and len(self.regions) >= MIN_ACCEPTED_REGIONS


@dataclass
class DetectionResult:
    regions: List[Region]
    stage: str
    coverage: float
    trail: List[StageOutcome] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Geometry helpers
# ---------------------------------------------------------------------------

def compute_coverage(regions: Sequence[Region], page_height: float) -> float:
    """Fraction of page height spanned by the given regions, capped at 1.0.

    Vertical spans are merged first so nested or stacked regions count once.
    """
    if page_height <= 0:
        return 0.0
    spans = sorted(
        (max(0.0, r.bounding_box.y), min(page_height, r.bounding_box.y + r.bounding_box.height))
        for r in regions
    )
    covered = 0.0
    reached = 0.0
    for top, bottom in spans:
        top = max(top, reached)
        if bottom > top:
            covered += bottom - top
            reached = bottom
    return min(1.0, covered / page_height)


def regions_conflict(a: BoundingBox, b: BoundingBox) -> bool:
    """Two boxes conflict when their intersection exceeds 80% of the smaller area."""
    smaller = min(a.area, b.area)
    return a.intersection_area(b) > smaller * OVERLAP_RATIO


def filter_overlapping(regions: Sequence[Region]) -> List[Region]:
    """Drop regions conflicting with an earlier-found one."""
    kept: List[Region] = []
    for region in regions:
        if not any(regions_conflict(existing.bounding_box, region.bounding_box) for existing in kept):
            kept.append(region)
    return kept


def sort_and_number(regions: Sequence[Region], max_regions: int) -> List[Region]:
    ordered = sorted(regions, key=lambda r: r.bounding_box.y)[:max_regions]
    return [region.with_order(index) for index, region in enumerate(ordered)]


def _build_region(
    section_type: SectionType,
    box: BoundingBox,
    html: str = '',
    styles: Optional[Dict[str, str]] = None,
    selector: Optional[str] = None,
) -> Region:
    normalized = normalize_markup(html)
    return Region(
        type=section_type,
        bounding_box=box,
        html_snapshot=normalized,
        styles={k: v for k, v in (styles or {}).items() if v},
        content=extract_region_content(normalized),
        selector=selector,
    )


def _rounded_box(raw: Dict[str, Any]) -> BoundingBox:
    return BoundingBox(
        x=round(raw.get('x', 0)),
        y=round(raw.get('y', 0)),
        width=round(raw.get('width', 0)),
        height=round(raw.get('height', 0)),
    )


# ---------------------------------------------------------------------------
# Page access
# ---------------------------------------------------------------------------

async def read_page_metrics(page: Any) -> PageMetrics:
    try:
        return PageMetrics.from_dict(await page.evaluate(PAGE_METRICS_SCRIPT))
    except Exception as e:
        raise DetectionError(f"Detection failed reading page metrics: {e}") from e


async def _query_all(page: Any, selector: str) -> List[Any]:
    try:
        return await page.query_selector_all(selector)
    except Exception as e:
        raise DetectionError(f"Detection failed querying '{selector}': {e}") from e


async def _visible_box(element: Any, timeout: float) -> Optional[BoundingBox]:
    """Bounding box of a visible element, or None if hidden, detached or slow."""
    try:
        if not await asyncio.wait_for(element.is_visible(), timeout=timeout):
            return None
        raw = await element.bounding_box()
    except Exception as e:
        # Elements detach or stall while animations settle; skip them
        logger.debug(f"Skipping element during visibility check: {e}")
        return None
    if not raw:
        return None
    return _rounded_box(raw)


async def _snapshot(element: Any) -> Dict[str, Any]:
    try:
        data = await element.evaluate(ELEMENT_SNAPSHOT_SCRIPT, CAPTURED_STYLE_PROPERTIES)
    except Exception as e:
        logger.debug(f"Could not snapshot element markup: {e}")
        return {'html': '', 'styles': {}}
    return data or {'html': '', 'styles': {}}


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------

class DetectionStage:
    """One link of the detection chain."""

    name = "stage"

    async def run(self, ctx: DetectionContext, previous: List[Region]) -> StageOutcome:
        raise NotImplementedError


class StructuralStage(DetectionStage):
    """Per-type structural queries for singleton and repeatable sections."""

    name = "structural"

    def __init__(self, selectors: Dict[SectionType, List[str]]):
        self.selectors = selectors

    async def find_singleton(self, ctx: DetectionContext, section_type: SectionType) -> Optional[Region]:
        """First visible match taller than the minimum height."""
        for selector in self.selectors.get(section_type, []):
            for element in await _query_all(ctx.page, selector):
                box = await _visible_box(element, SINGLETON_VISIBILITY_TIMEOUT)
                if box is None or box.height <= ctx.min_height:
                    continue
                data = await _snapshot(element)
                return _build_region(section_type, box, data.get('html', ''), data.get('styles'), selector)
        return None

    async def find_repeatable(self, ctx: DetectionContext, section_type: SectionType) -> List[Region]:
        """All visible matches, one per vertical band."""
        found: List[Region] = []
        seen_bands = set()
        for selector in self.selectors.get(section_type, []):
            for element in await _query_all(ctx.page, selector):
                box = await _visible_box(element, REPEATABLE_VISIBILITY_TIMEOUT)
                if box is None or box.height < ctx.min_height:
                    continue
                band = (round(box.y), round(box.height))
                if band in seen_bands:
                    continue
                seen_bands.add(band)
                data = await _snapshot(element)
                found.append(_build_region(section_type, box, data.get('html', ''), data.get('styles'), selector))
        return found

    async def run(self, ctx: DetectionContext, previous: List[Region]) -> StageOutcome:
        candidates: List[Region] = []

        for section_type in SINGLETON_TYPES:
            region = await self.find_singleton(ctx, section_type)
            if region is not None:
                candidates.append(region)

        for section_type in REPEATABLE_TYPES:
            candidates.extend(await self.find_repeatable(ctx, section_type))

        regions = sort_and_number(filter_overlapping(candidates), ctx.max_regions)
        ctx.structural = regions
        return StageOutcome(self.name, regions, compute_coverage(regions, ctx.metrics.page_height))


class GenericContainerStage(DetectionStage):
    """Generic block containers, typed by position, merged with earlier results."""

    name = "generic"

    @staticmethod
    def type_for_position(index: int, total: int) -> SectionType:
        if index == 0:
            return SectionType.HERO
        if index == total - 1:
            return SectionType.FOOTER
        return SectionType.FEATURES

    async def scan(self, ctx: DetectionContext) -> List[Region]:
        try:
            raw_items = await ctx.page.evaluate(GENERIC_CONTAINERS_SCRIPT, {
                'selector': GENERIC_CONTAINER_SELECTOR,
                'minHeight': max(GENERIC_MIN_HEIGHT, ctx.min_height),
                'minWidth': GENERIC_MIN_WIDTH,
                'props': CAPTURED_STYLE_PROPERTIES,
            })
        except Exception as e:
            raise DetectionError(f"Detection failed scanning generic containers: {e}") from e

        raw_items = raw_items or []
        total = len(raw_items)
        return [
            _build_region(
                self.type_for_position(index, total),
                _rounded_box(item),
                item.get('html', ''),
                item.get('styles'),
                GENERIC_CONTAINER_SELECTOR,
            )
            for index, item in enumerate(raw_items[:ctx.max_regions])
        ]

    async def run(self, ctx: DetectionContext, previous: List[Region]) -> StageOutcome:
        merged = list(previous)
        for candidate in await self.scan(ctx):
            duplicate = any(
                abs(existing.bounding_box.y - candidate.bounding_box.y) < GENERIC_DUPLICATE_DISTANCE
                for existing in previous
            )
            if not duplicate:
                merged.append(candidate)

        # Earlier regions come first, so they win over nested generic containers
        regions = sort_and_number(filter_overlapping(merged), ctx.max_regions)
        coverage = compute_coverage(regions, ctx.metrics.page_height)
        return StageOutcome(self.name, regions, coverage)


class ViewportPartitionStage(DetectionStage):
    """Equal-height bands sized to one viewport; always terminal."""

    name = "viewport"

    @staticmethod
    def type_for_position(index: int, total: int) -> SectionType:
        if index == 0:
            return SectionType.HEADER
        if index == 1:
            return SectionType.HERO
        if index == total - 1:
            return SectionType.FOOTER
        if index == total - 2:
            return SectionType.CTA
        return VIEWPORT_MIDDLE_ROTATION[(index - 2) % len(VIEWPORT_MIDDLE_ROTATION)]

    @staticmethod
    def band_count(metrics: PageMetrics, max_regions: int) -> int:
        viewport = metrics.viewport_height or Config.VIEWPORT_HEIGHT
        return min(max(1, math.ceil(metrics.page_height / viewport)), max_regions)

    async def run(self, ctx: DetectionContext, previous: List[Region]) -> StageOutcome:
        metrics = ctx.metrics
        total = self.band_count(metrics, ctx.max_regions)
        band_height = math.ceil(metrics.page_height / total) if total else 0

        bands: List[Region] = []
        for index in range(total):
            y = index * band_height
            height = min(band_height, metrics.page_height - y)
            if height < VIEWPORT_BAND_MIN_HEIGHT:
                continue

            box = BoundingBox(x=0, y=round(y), width=round(metrics.page_width), height=round(height))
            typed = next(
                (r for r in ctx.structural
                 if r.bounding_box.vertical_overlap(box) >= box.height * VIEWPORT_INHERIT_RATIO),
                None,
            )
            if typed is not None:
                bands.append(Region(
                    type=typed.type,
                    bounding_box=box,
                    html_snapshot=typed.html_snapshot,
                    styles=dict(typed.styles),
                    content=typed.content,
                    selector=typed.selector,
                ))
            else:
                bands.append(Region(type=self.type_for_position(index, total), bounding_box=box))

        regions = sort_and_number(bands, ctx.max_regions)
        return StageOutcome(self.name, regions, compute_coverage(regions, metrics.page_height))


# ---------------------------------------------------------------------------
# Detector
# ---------------------------------------------------------------------------

class SectionDetector:
    """Runs the detection stage chain against a page handle."""

    def __init__(
        self,
        selectors: Optional[Dict[SectionType, List[str]]] = None,
        stages: Optional[List[DetectionStage]] = None,
        use_generic_fallback: bool = True,
    ):
        if selectors is None:
            selectors = build_selector_table(load_selector_overrides())
        self.selectors = selectors
        if stages is None:
            stages = [StructuralStage(selectors)]
            if use_generic_fallback:
                stages.append(GenericContainerStage())
            stages.append(ViewportPartitionStage())
        self.stages = stages

    async def detect(
        self,
        page: Any,
        max_regions: Optional[int] = None,
        min_height: Optional[float] = None,
    ) -> DetectionResult:
        """
        Detect ordered, typed, non-overlapping regions.

        Args:
            page: Navigated Playwright async Page (or compatible handle)
            max_regions: Cap on returned regions (Config.MAX_SECTIONS)
            min_height: Minimum structural match height (Config.MIN_SECTION_HEIGHT)

        Returns:
            DetectionResult with the accepted stage's regions and coverage

        Raises:
            DetectionError: If the page handle itself fails
        """
        ctx = DetectionContext(
            page=page,
            metrics=await read_page_metrics(page),
            max_regions=max_regions or Config.MAX_SECTIONS,
            min_height=Config.MIN_SECTION_HEIGHT if min_height is None else min_height,
        )

        lf = get_logfire()
        trail: List[StageOutcome] = []
        previous: List[Region] = []
        outcome: Optional[StageOutcome] = None

        with lf.span("detect_regions", max_regions=ctx.max_regions) as span:
            for index, stage in enumerate(self.stages):
                outcome = await stage.run(ctx, previous)
                trail.append(outcome)
                logger.info(
                    f"Detection stage '{stage.name}': {len(outcome.regions)} regions, "
                    f"coverage {outcome.coverage:.2f}"
                )
                if outcome.sufficient or index == len(self.stages) - 1:
                    break
                logger.warning(f"Detection stage '{stage.name}' insufficient, falling back")
                previous = outcome.regions
            if outcome is not None:
                span.set_attribute("stage", outcome.stage)
                span.set_attribute("region_count", len(outcome.regions))

        if outcome is None:
            return DetectionResult(regions=[], stage="none", coverage=0.0, trail=trail)

        return DetectionResult(
            regions=outcome.regions,
            stage=outcome.stage,
            coverage=outcome.coverage,
            trail=trail,
        )

    async def detect_section(self, page: Any, section_type: SectionType) -> Optional[Region]:
        """Run detection and return the first region of one type, or None."""
        result = await self.detect(page)
        section_type = SectionType(section_type)
        return next((r for r in result.regions if r.type == section_type), None)


async def detect_regions(
    page: Any,
    max_regions: Optional[int] = None,
    min_height: Optional[float] = None,
    detector: Optional[SectionDetector] = None,
) -> List[Region]:
    """Convenience wrapper returning only the ordered regions."""
    result = await (detector or SectionDetector()).detect(page, max_regions, min_height)
    return result.regions
