"""
Error commands for Componentizer CLI

Inspect and clear persisted failed-component records.
"""

from typing import Optional

import click

from ..services.models import SectionType
from ..services.recovery import FailedComponentStore, describe_error_code, format_error, summarize_errors


@click.group('errors')
def errors_group():
    """Inspect failed components from previous runs"""
    pass


@errors_group.command('summary')
@click.option('--website-id', required=True, help='Website identifier')
@click.option('--websites-dir', default=None, type=click.Path(), help='Override WEBSITES_DIR')
def errors_summary(website_id: str, websites_dir: Optional[str]):
    """
    Print every persisted error and a summary for a website.

    Example:
        componentizer errors summary --website-id example
    """
    store = FailedComponentStore(websites_dir)
    errors = store.load(website_id)

    if not errors:
        click.echo(f"✅ No failed components recorded for {website_id}")
        return

    for error in errors:
        click.echo(format_error(error))

    summary = summarize_errors(errors)
    click.echo("\n" + "="*60)
    click.echo(f"📊 {summary.total} errors for {website_id}")
    click.echo("="*60)
    click.echo(f"  Recoverable:     {summary.recoverable}")
    click.echo(f"  Non-recoverable: {summary.non_recoverable}")
    click.echo(f"  Retryable now:   {summary.retryable}")

    click.echo("\nBy code:")
    for code, count in sorted(summary.by_code.items(), key=lambda item: -item[1]):
        click.echo(f"  {code.value:<25} {count:>3}  {describe_error_code(code)}")

    click.echo("\nBy component:")
    for scope, count in sorted(summary.by_component_type.items()):
        click.echo(f"  {scope:<25} {count}")


@errors_group.command('clear')
@click.option('--website-id', required=True, help='Website identifier')
@click.option(
    '--type', 'component_type',
    type=click.Choice([t.value for t in SectionType]),
    default=None,
    help='Only clear one component type',
)
@click.option('--websites-dir', default=None, type=click.Path(), help='Override WEBSITES_DIR')
def errors_clear(website_id: str, component_type: Optional[str], websites_dir: Optional[str]):
    """
    Delete persisted error files for a website.

    Examples:
        componentizer errors clear --website-id example
        componentizer errors clear --website-id example --type hero
    """
    store = FailedComponentStore(websites_dir)

    if component_type:
        if store.clear_type(website_id, SectionType(component_type)):
            click.echo(f"🗑️  Cleared {component_type} errors for {website_id}")
        else:
            click.echo(f"No {component_type} errors recorded for {website_id}")
        return

    removed = store.clear_all(website_id)
    click.echo(f"🗑️  Cleared {removed} error files for {website_id}")
