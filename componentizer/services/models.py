"""
Pydantic models shared by detection, synthesis and the generation pipeline.

Regions and variants are frozen once created; the pipeline attaches
screenshots by copying (Region.with_screenshot).
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid4()}"


# ---------------------------------------------------------------------------
# Section types
# ---------------------------------------------------------------------------

class SectionType(str, Enum):
    HEADER = "header"
    HERO = "hero"
    FEATURES = "features"
    TESTIMONIALS = "testimonials"
    PRICING = "pricing"
    CTA = "cta"
    FOOTER = "footer"
    CARDS = "cards"
    GALLERY = "gallery"
    CONTACT = "contact"
    FAQ = "faq"
    STATS = "stats"
    TEAM = "team"
    LOGOS = "logos"


# At most one instance per page
SINGLETON_TYPES = (
    SectionType.HEADER,
    SectionType.HERO,
    SectionType.CTA,
    SectionType.FOOTER,
    SectionType.CONTACT,
)

REPEATABLE_TYPES = (
    SectionType.FEATURES,
    SectionType.TESTIMONIALS,
    SectionType.PRICING,
    SectionType.CARDS,
    SectionType.GALLERY,
    SectionType.FAQ,
    SectionType.STATS,
    SectionType.TEAM,
    SectionType.LOGOS,
)

DISPLAY_NAMES: Dict[SectionType, str] = {
    SectionType.HEADER: "Header",
    SectionType.HERO: "Hero Section",
    SectionType.FEATURES: "Features",
    SectionType.TESTIMONIALS: "Testimonials",
    SectionType.PRICING: "Pricing",
    SectionType.CTA: "Call to Action",
    SectionType.FOOTER: "Footer",
    SectionType.CARDS: "Card Grid",
    SectionType.GALLERY: "Gallery",
    SectionType.CONTACT: "Contact Form",
    SectionType.FAQ: "FAQ",
    SectionType.STATS: "Statistics",
    SectionType.TEAM: "Team",
    SectionType.LOGOS: "Logo Grid",
}

COMPONENT_NAMES: Dict[SectionType, str] = {
    SectionType.HEADER: "Header",
    SectionType.HERO: "Hero",
    SectionType.FEATURES: "Features",
    SectionType.TESTIMONIALS: "Testimonials",
    SectionType.PRICING: "Pricing",
    SectionType.CTA: "CallToAction",
    SectionType.FOOTER: "Footer",
    SectionType.CARDS: "Cards",
    SectionType.GALLERY: "Gallery",
    SectionType.CONTACT: "Contact",
    SectionType.FAQ: "FAQ",
    SectionType.STATS: "Stats",
    SectionType.TEAM: "Team",
    SectionType.LOGOS: "Logos",
}


def component_name_for(section_type: SectionType) -> str:
    """PascalCase component name for a section type (cta -> CallToAction)."""
    return COMPONENT_NAMES[SectionType(section_type)]


def display_name_for(section_type: SectionType) -> str:
    return DISPLAY_NAMES[SectionType(section_type)]


# ---------------------------------------------------------------------------
# Regions
# ---------------------------------------------------------------------------

class BoundingBox(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def area(self) -> float:
        return self.width * self.height

    def intersection_area(self, other: "BoundingBox") -> float:
        overlap_x = max(0.0, min(self.x + self.width, other.x + other.width) - max(self.x, other.x))
        overlap_y = max(0.0, min(self.bottom, other.bottom) - max(self.y, other.y))
        return overlap_x * overlap_y

    def vertical_overlap(self, other: "BoundingBox") -> float:
        return max(0.0, min(self.bottom, other.bottom) - max(self.y, other.y))


class ContentLink(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str = ""
    href: Optional[str] = None


class ContentImage(BaseModel):
    model_config = ConfigDict(frozen=True)

    src: str = ""
    alt: str = ""


class RegionContent(BaseModel):
    """Structured text pulled out of a region's markup."""
    model_config = ConfigDict(frozen=True)

    headings: List[str] = Field(default_factory=list, description="h1-h6 text in document order")
    heading_levels: List[int] = Field(default_factory=list, description="Level (1-6) for each heading")
    paragraphs: List[str] = Field(default_factory=list)
    buttons: List[ContentLink] = Field(default_factory=list, description="Buttons and button-styled links")
    links: List[ContentLink] = Field(default_factory=list)
    images: List[ContentImage] = Field(default_factory=list)
    list_items: List[str] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.headings or self.paragraphs or self.buttons or self.links or self.images or self.list_items)


class Region(BaseModel):
    """A detected rectangular page section with an assigned semantic type."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: _new_id("region"))
    type: SectionType
    order: int = 0
    bounding_box: BoundingBox = Field(default_factory=BoundingBox)
    html_snapshot: str = ""
    styles: Dict[str, str] = Field(default_factory=dict, description="Captured computed-style subset")
    content: Optional[RegionContent] = None
    screenshot_path: Optional[str] = None
    selector: Optional[str] = Field(default=None, description="Query that matched, if any")

    @property
    def name(self) -> str:
        return display_name_for(self.type)

    def with_screenshot(self, path: str) -> "Region":
        return self.model_copy(update={"screenshot_path": path})

    def with_order(self, order: int) -> "Region":
        return self.model_copy(update={"order": order})


# ---------------------------------------------------------------------------
# Variants and components
# ---------------------------------------------------------------------------

class VariantStrategy(str, Enum):
    PIXEL_FAITHFUL = "pixel-faithful"
    SEMANTIC = "semantic"
    ACCESSIBLE = "accessible"


class Variant(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: _new_id("variant"))
    strategy: VariantStrategy
    name: str = Field(description="Variant A | Variant B | Variant C")
    description: str = ""
    code: str
    accuracy_score: Optional[float] = Field(default=None, ge=0, le=100)
    preview_image: Optional[str] = None

    @property
    def file_stem(self) -> str:
        """variant-a / variant-b / variant-c"""
        return "variant-" + self.name.rsplit(" ", 1)[-1].lower()


class ComponentStatus(str, Enum):
    PENDING = "pending"
    FAILED = "failed"


class GeneratedComponent(BaseModel):
    id: str = Field(default_factory=lambda: _new_id("component"))
    type: SectionType
    name: str
    order: int = 0
    variants: List[Variant] = Field(default_factory=list)
    selected_variant: Optional[str] = None
    status: ComponentStatus = ComponentStatus.PENDING
    error_message: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)
    region_id: Optional[str] = None

    @model_validator(mode="after")
    def _status_matches_variants(self) -> "GeneratedComponent":
        if (self.status == ComponentStatus.FAILED) != (not self.variants):
            raise ValueError("status must be 'failed' exactly when there are no variants")
        return self

    @classmethod
    def from_variants(
        cls,
        region: Region,
        variants: List[Variant],
        error_message: Optional[str] = None,
    ) -> "GeneratedComponent":
        """Build a component for a region; an empty variant list marks it failed."""
        failed = not variants
        if failed and not error_message:
            error_message = "No variants were generated"
        return cls(
            type=region.type,
            name=component_name_for(region.type),
            order=region.order,
            variants=list(variants),
            status=ComponentStatus.FAILED if failed else ComponentStatus.PENDING,
            error_message=error_message if failed else None,
            region_id=region.id,
        )

    @property
    def is_failed(self) -> bool:
        return self.status == ComponentStatus.FAILED

    def primary_variant(self) -> Optional[Variant]:
        """Selected variant, or the first one when nothing is selected."""
        if self.selected_variant:
            for variant in self.variants:
                if variant.id == self.selected_variant:
                    return variant
        return self.variants[0] if self.variants else None

    def replace_variant(self, strategy: VariantStrategy, code: str) -> "GeneratedComponent":
        variants = [
            v.model_copy(update={"code": code}) if v.strategy == strategy else v
            for v in self.variants
        ]
        return self.model_copy(update={"variants": variants})


# ---------------------------------------------------------------------------
# Pipeline progress and results
# ---------------------------------------------------------------------------

class GenerationPhase(str, Enum):
    INITIALIZING = "initializing"
    DETECTING = "detecting"
    CAPTURING_SCREENSHOTS = "capturing_screenshots"
    GENERATING_VARIANTS = "generating_variants"
    SAVING = "saving"
    COMPLETE = "complete"


class GenerationProgress(BaseModel):
    phase: GenerationPhase
    percent: int = Field(ge=0, le=100)
    message: str
    current_item: Optional[int] = None
    total_items: Optional[int] = None


class GenerationError(BaseModel):
    """User-visible error record attached to a generation result."""
    phase: GenerationPhase
    message: str
    recoverable: bool = True
    component_id: Optional[str] = None
    component_type: Optional[SectionType] = None


class GenerationMetadata(BaseModel):
    detected_count: int = 0
    generated_count: int = 0
    failed_count: int = 0
    generated_at: datetime = Field(default_factory=_utcnow)
    output_dir: Optional[str] = None


class GenerationResult(BaseModel):
    success: bool
    components: List[GeneratedComponent] = Field(default_factory=list)
    errors: List[GenerationError] = Field(default_factory=list)
    metadata: GenerationMetadata = Field(default_factory=GenerationMetadata)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")
