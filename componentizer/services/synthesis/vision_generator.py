"""
VisionCodeGenerator - screenshot-driven component generation with Claude.

Sends a region's screenshot plus its extracted text and design tokens to
the Anthropic Messages API and returns the generated component source.
Every failure (missing key, unreadable screenshot, API error) comes back
as a VisionGenerationResult with success=False; generate() never raises.
"""

import base64
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import anthropic
from pydantic import BaseModel

from ...core.config import Config
from ..content_extractor import extract_region_content
from ..models import Region, RegionContent, component_name_for

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = """You are an expert React/TypeScript developer who recreates page sections as components that match a screenshot exactly.

## Code
- TypeScript with a props interface
- Tailwind CSS for styling; inline styles only for values Tailwind cannot express
- Start the file with the 'use client' directive
- Provide both a named export and a default export
- Use semantic elements (header, nav, section, footer)

## Visual accuracy
- Match layout, spacing and proportions from the screenshot
- Use the provided design tokens for colors and typography
- Keep the visual hierarchy of the original

## Content
- Use the extracted text verbatim; never invent copy
- Place each piece of text where it appears in the screenshot

## Responsiveness
- Mobile-first with md: and lg: breakpoints

## Output
- Output only the complete component source, with no explanation and no markdown"""

_CODE_FENCE_RE = re.compile(r'```(?:typescript|tsx|jsx|ts)?\n([\s\S]*?)```')


class VisionGenerationResult(BaseModel):
    success: bool
    code: Optional[str] = None
    error: Optional[str] = None
    tokens_used: Optional[int] = None
    model: Optional[str] = None


def _media_type(path: str) -> str:
    return 'image/png' if path.lower().endswith('.png') else 'image/jpeg'


def strip_code_fences(text: str) -> str:
    """Pull the component out of a ```tsx block when the model wrapped it."""
    match = _CODE_FENCE_RE.search(text)
    return match.group(1).strip() if match else text.strip()


def ensure_use_client(code: str) -> str:
    if "'use client'" in code or '"use client"' in code:
        return code
    return "'use client';\n\n" + code


def format_content(content: RegionContent) -> str:
    sections: List[str] = []
    if content.headings:
        sections.append('### Headings')
        sections.extend(
            f'- h{level}: "{text}"'
            for text, level in zip(content.headings, content.heading_levels or [2] * len(content.headings))
        )
    if content.paragraphs:
        sections.append('### Paragraphs')
        sections.extend(f'- "{text}"' for text in content.paragraphs[:10])
    if content.buttons:
        sections.append('### Buttons')
        sections.extend(f'- "{b.text}" -> {b.href or "#"}' for b in content.buttons)
    if content.links:
        sections.append('### Links')
        sections.extend(f'- "{link.text}" -> {link.href or "#"}' for link in content.links[:15])
    if content.images:
        sections.append('### Images')
        sections.extend(f'- {image.src} (alt: "{image.alt}")' for image in content.images[:10])
    return '\n'.join(sections) if sections else '(no text extracted)'


def format_design_tokens(tokens: Optional[Dict[str, Any]]) -> str:
    """Render an arbitrary token mapping as nested markdown bullets."""
    if not tokens:
        return '(no design tokens provided)'
    lines: List[str] = []
    for group, values in tokens.items():
        lines.append(f'### {group}')
        if isinstance(values, dict):
            lines.extend(f'- {key}: {value}' for key, value in values.items() if value)
        elif isinstance(values, (list, tuple)):
            lines.append('- ' + ', '.join(str(v) for v in values[:5]))
        else:
            lines.append(f'- {values}')
    return '\n'.join(lines)


def build_user_prompt(
    region: Region,
    design_tokens: Optional[Dict[str, Any]] = None,
    previous_feedback: Optional[str] = None,
    previous_accuracy: Optional[float] = None,
) -> str:
    content = region.content or extract_region_content(region.html_snapshot)
    name = component_name_for(region.type)
    prompt = f"""Generate a "{name}" component of type "{region.type.value}" that matches the screenshot exactly.

## Extracted Content (use these EXACT texts)
{format_content(content)}

## Design Tokens
{format_design_tokens(design_tokens)}

## Component Requirements
- Component name: {name}
- Type: {region.type.value}
- Framework: React with TypeScript
- Styling: Tailwind CSS
- Responsive (mobile-first with md: and lg: breakpoints)"""

    if previous_feedback and previous_accuracy is not None:
        prompt += f"""

## Refinement Feedback
The previous attempt scored {previous_accuracy:.1f}% visual accuracy.
Issues to fix: {previous_feedback}

Fix these issues while keeping the overall structure."""
    return prompt


class VisionCodeGenerator:
    """
    Generates component source from a screenshot using Claude vision.

    The client is created lazily so constructing the generator without an
    API key is allowed; generate() then reports the missing key.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        client: Optional[Any] = None,
    ):
        self.api_key = api_key or Config.ANTHROPIC_API_KEY
        self.model = model or Config.VISION_MODEL
        self.max_tokens = max_tokens or Config.VISION_MAX_TOKENS
        self._client = client

    @property
    def available(self) -> bool:
        return bool(self._client or self.api_key)

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = anthropic.AsyncAnthropic(api_key=self.api_key)
        return self._client

    async def generate(
        self,
        screenshot_path: str,
        region: Region,
        design_tokens: Optional[Dict[str, Any]] = None,
        previous_feedback: Optional[str] = None,
        previous_accuracy: Optional[float] = None,
    ) -> VisionGenerationResult:
        """
        Generate component source for a region from its screenshot.

        Args:
            screenshot_path: PNG/JPEG capture of the region
            region: The region being recreated (text is taken from it)
            design_tokens: Optional design tokens to steer colors and type
            previous_feedback: Issues reported for a previous attempt
            previous_accuracy: Accuracy score (0-100) of a previous attempt

        Returns:
            VisionGenerationResult with code on success, error text otherwise
        """
        if not self.available:
            return VisionGenerationResult(success=False, error="ANTHROPIC_API_KEY environment variable is not set")

        try:
            image_data = base64.b64encode(Path(screenshot_path).read_bytes()).decode('utf-8')
        except OSError as e:
            logger.warning(f"Could not read screenshot {screenshot_path}: {e}")
            return VisionGenerationResult(success=False, error=f"Screenshot unreadable: {e}")

        prompt = build_user_prompt(region, design_tokens, previous_feedback, previous_accuracy)

        try:
            response = await self._get_client().messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=SYSTEM_PROMPT,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {
                                "type": "image",
                                "source": {
                                    "type": "base64",
                                    "media_type": _media_type(screenshot_path),
                                    "data": image_data,
                                },
                            },
                            {"type": "text", "text": prompt},
                        ],
                    }
                ],
            )
        except anthropic.RateLimitError:
            logger.warning(f"Vision generation rate limited for {region.type.value}")
            return VisionGenerationResult(success=False, error="Rate limit exceeded. Please wait and try again.")
        except anthropic.AuthenticationError:
            return VisionGenerationResult(success=False, error="Invalid API key. Check ANTHROPIC_API_KEY.")
        except anthropic.APIError as e:
            logger.error(f"Vision generation failed for {region.type.value}: {e}")
            return VisionGenerationResult(success=False, error=str(e))

        text = next((block.text for block in response.content if getattr(block, 'type', None) == 'text'), None)
        if not text:
            return VisionGenerationResult(success=False, error="No text response from Claude")

        code = ensure_use_client(strip_code_fences(text))
        usage = getattr(response, 'usage', None)
        logger.info(f"Vision generated {len(code)} chars for {region.type.value}")
        return VisionGenerationResult(
            success=True,
            code=code,
            tokens_used=getattr(usage, 'output_tokens', None),
            model=self.model,
        )
