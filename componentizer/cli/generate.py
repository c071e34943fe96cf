"""
Generate command for Componentizer CLI

Open a page in headless Chromium and run the component generation pipeline.
"""

import asyncio
import json
from typing import Optional

import click

from ..services.models import GenerationProgress, GenerationResult, SectionType


@click.command('generate')
@click.argument('url')
@click.option('--website-id', required=True, help='Website identifier used for output paths')
@click.option('--max-sections', default=None, type=int, help='Maximum sections to detect (default: 10)')
@click.option('--output-dir', default=None, type=click.Path(), help='Output root directory')
@click.option('--save-metadata/--no-save-metadata', default=False, help='Record components in Supabase')
@click.option('--skip-screenshots', is_flag=True, help='Skip section screenshots')
@click.option('--vision', is_flag=True, help='Use Claude vision for pixel-faithful variants')
@click.option('--output-json', type=click.Path(), help='Export the result to a JSON file')
def generate_command(
    url: str,
    website_id: str,
    max_sections: Optional[int],
    output_dir: Optional[str],
    save_metadata: bool,
    skip_screenshots: bool,
    vision: bool,
    output_json: Optional[str],
):
    """
    Generate React components from a landing page.

    Examples:
        componentizer generate https://example.com --website-id example
        componentizer generate https://example.com --website-id example --max-sections 6 --output-json result.json
    """
    result = asyncio.run(_execute_generation(
        url=url,
        website_id=website_id,
        max_sections=max_sections,
        output_dir=output_dir,
        save_metadata=save_metadata,
        skip_screenshots=skip_screenshots,
        use_vision=vision,
    ))

    _display_results(result)

    if output_json:
        with open(output_json, 'w') as f:
            json.dump(result.to_dict(), f, indent=2)
        click.echo(f"\n📄 Results exported to: {output_json}")

    if not result.success:
        raise SystemExit(1)


def _echo_progress(progress: GenerationProgress) -> None:
    click.echo(f"  [{progress.percent:3d}%] {progress.message}")


async def _execute_generation(
    url: str,
    website_id: str,
    max_sections: Optional[int],
    output_dir: Optional[str],
    save_metadata: bool,
    skip_screenshots: bool,
    use_vision: bool,
) -> GenerationResult:
    """Open the page and run the pipeline while the browser is alive"""
    from ..pipelines.component_generation import run_component_generation
    from ..services.capture import open_page

    click.echo("\n" + "="*60)
    click.echo(f"🧩 Generating components for {url}")
    click.echo("="*60 + "\n")

    async with open_page(url) as page:
        return await run_component_generation(
            page,
            website_id,
            max_regions=max_sections,
            output_dir=output_dir,
            save_metadata=save_metadata,
            skip_screenshots=skip_screenshots,
            use_vision=use_vision,
            on_progress=_echo_progress,
        )


def _display_results(result: GenerationResult) -> None:
    meta = result.metadata

    click.echo("\n" + "="*60)
    click.echo("✅ Generation complete" if result.success else "❌ Generation failed")
    click.echo("="*60)
    click.echo(f"  Detected:  {meta.detected_count}")
    click.echo(f"  Generated: {meta.generated_count}")
    click.echo(f"  Failed:    {meta.failed_count}")
    if meta.output_dir:
        click.echo(f"  Output:    {meta.output_dir}")

    if result.components:
        click.echo("\nComponents:")
        for component in result.components:
            status = "❌" if component.is_failed else "✅"
            click.echo(f"  {status} {component.order:2d}. {component.name} ({len(component.variants)} variants)")

    if result.errors:
        click.echo("\nErrors:")
        for error in result.errors:
            kind = error.component_type.value if isinstance(error.component_type, SectionType) else "page"
            click.echo(f"  • [{error.phase.value}] {kind}: {error.message}")
