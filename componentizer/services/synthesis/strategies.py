"""
Variant strategies: pixel-faithful, semantic and accessible renderings.

All three are dispatched through synthesize_strategy(), which never raises;
a failing strategy comes back as a StrategyResult carrying the error text
so the synthesizer can keep going with the others.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional

from ...core.exceptions import StrategyError
from ..models import Region, SectionType, Variant, VariantStrategy, component_name_for, display_name_for
from .enhancements import EnhancementContext, GradientAccent
from .markup import extract_jsx_content, format_style_object, is_carousel_markup
from .templates import build_section_copy, landmark_for, render_section_body

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VariantConfig:
    name: str
    description: str


VARIANT_CONFIGS: Dict[VariantStrategy, VariantConfig] = {
    VariantStrategy.PIXEL_FAITHFUL: VariantConfig(
        name="Variant A",
        description="Pixel-perfect match prioritizing visual fidelity with inline styles and exact measurements",
    ),
    VariantStrategy.SEMANTIC: VariantConfig(
        name="Variant B",
        description="Semantic HTML with cleaner code architecture and better separation of concerns",
    ),
    VariantStrategy.ACCESSIBLE: VariantConfig(
        name="Variant C",
        description="Modernized with accessibility (ARIA), performance optimizations, and best practices",
    ),
}

STRATEGY_ORDER = (
    VariantStrategy.PIXEL_FAITHFUL,
    VariantStrategy.SEMANTIC,
    VariantStrategy.ACCESSIBLE,
)

RESPONSIVE_CLASSES: Dict[SectionType, str] = {
    SectionType.HEADER: 'px-4 md:px-6 lg:px-8',
    SectionType.HERO: 'px-4 py-12 md:px-6 md:py-16 lg:px-8 lg:py-24 text-center lg:text-left',
    SectionType.FEATURES: 'px-4 py-12 md:px-6 md:py-16 lg:px-8 grid grid-cols-1 md:grid-cols-2 lg:grid-cols-3 gap-6 md:gap-8',
    SectionType.TESTIMONIALS: 'px-4 py-12 md:px-6 md:py-16 lg:px-8 grid grid-cols-1 md:grid-cols-2 lg:grid-cols-3 gap-6',
    SectionType.PRICING: 'px-4 py-12 md:px-6 md:py-16 lg:px-8 grid grid-cols-1 md:grid-cols-2 lg:grid-cols-3 gap-6 md:gap-8',
    SectionType.CTA: 'px-4 py-12 md:px-6 md:py-16 lg:px-8 text-center',
    SectionType.FOOTER: 'px-4 py-8 md:px-6 md:py-12 lg:px-8 lg:py-16',
}
DEFAULT_RESPONSIVE_CLASSES = 'px-4 py-8 md:px-6 md:py-12 lg:px-8'

_TRANSPARENT_VALUES = frozenset(['rgba(0, 0, 0, 0)', 'transparent'])


def responsive_classes_for(section_type: SectionType) -> str:
    return RESPONSIVE_CLASSES.get(SectionType(section_type), DEFAULT_RESPONSIVE_CLASSES)


@dataclass
class StrategyOptions:
    """Inputs shared by every strategy for one region."""
    design_tokens: Optional[Dict[str, Any]] = None
    enhancement_context: Optional[EnhancementContext] = None
    vision_generator: Optional[Any] = None
    use_vision: bool = False


@dataclass
class StrategyResult:
    strategy: VariantStrategy
    variant: Optional[Variant] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.variant is not None


# ---------------------------------------------------------------------------
# Shared source wrappers
# ---------------------------------------------------------------------------

def _indent(block: str, spaces: int) -> str:
    pad = ' ' * spaces
    return '\n'.join(pad + line if line.strip() else line for line in block.split('\n'))


def _props_interface(name: str) -> str:
    return (
        f"interface {name}Props {{\n"
        f"  className?: string;\n"
        f"  children?: React.ReactNode;\n"
        f"}}"
    )


def _css_class(section_type: SectionType) -> str:
    return f"{SectionType(section_type).value}-section"


# ---------------------------------------------------------------------------
# Pixel-faithful
# ---------------------------------------------------------------------------

def captured_style_declarations(region: Region, context: Optional[EnhancementContext] = None) -> List[tuple]:
    """
    Root style declarations for the pixel-faithful variant.

    Captured styles are kept verbatim except transparent backgrounds and
    'none' shadows. minHeight comes from the captured bounding box.
    """
    declarations = []
    for prop, value in region.styles.items():
        value = (value or '').strip()
        if not value:
            continue
        if prop == 'backgroundColor' and value in _TRANSPARENT_VALUES:
            continue
        if prop == 'boxShadow' and value == 'none':
            continue
        declarations.append((prop, value))

    enhancement = context.for_type(region.type) if context else None
    if enhancement and enhancement.is_dark:
        present = {prop for prop, _ in declarations}
        if enhancement.background_color and 'backgroundColor' not in present:
            declarations.append(('backgroundColor', enhancement.background_color))
        if enhancement.text_color and 'color' not in present:
            declarations.append(('color', enhancement.text_color))

    height = int(round(region.bounding_box.height))
    if height > 0:
        declarations.append(('minHeight', f'{height}px'))
    declarations.append(('width', '100%'))

    if is_carousel_markup(region.html_snapshot) or (context and context.should_add_accents(region.type)):
        declarations.append(('overflow', 'hidden'))
        declarations.append(('position', 'relative'))
    return declarations


def render_accent(accent: GradientAccent) -> str:
    declarations = [('position', 'absolute')]
    for side in ('top', 'bottom', 'left', 'right'):
        value = getattr(accent, side)
        if value is not None:
            declarations.append((side, value))
    declarations.extend([
        ('width', accent.width),
        ('height', accent.height),
        ('background', accent.gradient),
        ('filter', f'blur({accent.blur})'),
        ('borderRadius', '50%'),
        ('pointerEvents', 'none'),
        ('zIndex', '0'),
    ])
    style = format_style_object(declarations) + f', opacity: {accent.opacity:g}'
    return f'<div aria-hidden="true" style={{{{ {style} }}}} />'


def build_pixel_faithful(region: Region, options: StrategyOptions) -> str:
    name = component_name_for(region.type)
    box = region.bounding_box
    context = options.enhancement_context

    body = extract_jsx_content(region.html_snapshot)
    accents = context.accents_for(region.type) if context else []
    if accents:
        orbs = '\n'.join(render_accent(accent) for accent in accents)
        body = f"{orbs}\n<div style={{{{ position: 'relative', zIndex: 1 }}}}>\n{_indent(body, 2)}\n</div>"

    style = format_style_object(captured_style_declarations(region, context))
    classes = f"{_css_class(region.type)} {responsive_classes_for(region.type)}"

    return f"""'use client';

import React from 'react';

{_props_interface(name)}

/**
 * {display_name_for(region.type)} - pixel-faithful rendering
 * Captured size: {int(round(box.width))} x {int(round(box.height))}
 */
export function {name}({{ className = '', children }}: {name}Props) {{
  return (
    <div
      className={{`{classes} ${{className}}`.trim()}}
      style={{{{ {style} }}}}
    >
{_indent(body, 6)}
    </div>
  );
}}

export default {name};
"""


async def _vision_code(region: Region, options: StrategyOptions) -> Optional[str]:
    """Vision-generated source, or None to fall back to the template."""
    if not (options.use_vision and options.vision_generator and region.screenshot_path):
        return None
    try:
        result = await options.vision_generator.generate(
            region.screenshot_path, region, options.design_tokens
        )
    except Exception as e:
        logger.warning(f"Vision generation raised for {region.type.value}, using template: {e}")
        return None
    if not result.success or not result.code:
        logger.warning(f"Vision generation failed for {region.type.value}, using template: {result.error}")
        return None
    return result.code


# ---------------------------------------------------------------------------
# Semantic and accessible
# ---------------------------------------------------------------------------

def build_semantic(region: Region, options: StrategyOptions) -> str:
    name = component_name_for(region.type)
    landmark = landmark_for(region.type)
    copy = build_section_copy(region)
    body = render_section_body(region.type, copy, accessible=False)

    role = f' role="{landmark.role}"' if landmark.native and landmark.role else ''
    return f"""'use client';

import React from 'react';

{_props_interface(name)}

export function {name}({{ className = '', children }}: {name}Props) {{
  return (
    <{landmark.tag}{role} className={{`{_css_class(region.type)} ${{className}}`.trim()}}>
{_indent(body, 6)}
    </{landmark.tag}>
  );
}}

export default {name};
"""


def _accessibility_contract(region: Region, heading_level: int, body: str) -> str:
    """Doc comment listing the guarantees the rendered body actually meets."""
    landmark = landmark_for(region.type)
    role = landmark.role or "region"
    lines = [
        f"{display_name_for(region.type)}",
        "",
        "Accessibility contract:",
        f"- Rendered as a <{landmark.tag}> landmark (role {role}) labelled \"{landmark.aria_label}\"",
    ]
    if f"<h{heading_level}" in body:
        lines.append(f"- Exactly one top-level heading (h{heading_level}); item headings are h3")
    else:
        lines.append("- No section heading; the landmark label names the section")
    if 'role="list"' in body:
        lines.append("- Repeated items are exposed as lists")
    lines.extend([
        "- Images carry alt text; decorative content is hidden from assistive tech",
        "- Memoized to avoid re-rendering when props are unchanged",
    ])
    return "/**\n" + "\n".join(f" * {line}".rstrip() for line in lines) + "\n */"


def build_accessible(region: Region, options: StrategyOptions) -> str:
    name = component_name_for(region.type)
    landmark = landmark_for(region.type)
    heading_level = 1 if region.type == SectionType.HERO else 2
    heading_id = f"{region.type.value}-heading"
    copy = build_section_copy(region)
    body = render_section_body(region.type, copy, accessible=True, heading_id=heading_id)

    attributes = []
    if landmark.role:
        attributes.append(f'role="{landmark.role}"')
    attributes.append(f'aria-label="{landmark.aria_label}"')
    attributes.append(f'className={{`{_css_class(region.type)} ${{className}}`.trim()}}')
    attribute_block = '\n'.join(f'      {attr}' for attr in attributes)

    return f"""'use client';

import React, {{ memo }} from 'react';

{_props_interface(name)}

{_accessibility_contract(region, heading_level, body)}
function {name}Component({{ className = '', children }}: {name}Props) {{
  return (
    <{landmark.tag}
{attribute_block}
    >
{_indent(body, 6)}
    </{landmark.tag}>
  );
}}

export const {name} = memo({name}Component);
{name}.displayName = '{name}';

export default {name};
"""


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

async def _pixel_faithful(region: Region, options: StrategyOptions) -> str:
    code = await _vision_code(region, options)
    return code if code is not None else build_pixel_faithful(region, options)


async def _semantic(region: Region, options: StrategyOptions) -> str:
    return build_semantic(region, options)


async def _accessible(region: Region, options: StrategyOptions) -> str:
    return build_accessible(region, options)


STRATEGY_BUILDERS: Dict[VariantStrategy, Callable[[Region, StrategyOptions], Awaitable[str]]] = {
    VariantStrategy.PIXEL_FAITHFUL: _pixel_faithful,
    VariantStrategy.SEMANTIC: _semantic,
    VariantStrategy.ACCESSIBLE: _accessible,
}


async def synthesize_strategy(
    region: Region,
    strategy: VariantStrategy,
    options: Optional[StrategyOptions] = None,
) -> StrategyResult:
    """
    Render one region with one strategy.

    Args:
        region: Detected region to render
        strategy: Which rendering to produce
        options: Design tokens, enhancement context and vision settings

    Returns:
        StrategyResult with either a Variant or the error text
    """
    strategy = VariantStrategy(strategy)
    options = options or StrategyOptions()
    try:
        builder = STRATEGY_BUILDERS[strategy]
        code = await builder(region, options)
        if not code or not code.strip():
            raise StrategyError(strategy.value, "produced empty source")
        config = VARIANT_CONFIGS[strategy]
        variant = Variant(
            strategy=strategy,
            name=config.name,
            description=config.description,
            code=code,
            preview_image=region.screenshot_path,
        )
        return StrategyResult(strategy=strategy, variant=variant)
    except Exception as e:
        logger.warning(f"{strategy.value} strategy failed for {region.type.value}: {e}")
        return StrategyResult(strategy=strategy, error=str(e))
