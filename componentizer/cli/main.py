"""
Main CLI entry point for Componentizer
"""

import logging

import click

from ..core.observability import setup_logfire
from .errors import errors_group
from .generate import generate_command


@click.group()
@click.version_option(version='0.1.0')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def cli(verbose: bool):
    """
    Componentizer - Turn landing pages into React components

    Detects the sections of a live page and generates pixel-faithful,
    semantic and accessible TSX variants for each one.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
    setup_logfire()


@cli.command('pipeline')
def pipeline_command():
    """Show the generation steps, what each reads and writes"""
    from ..pipelines.component_generation import PIPELINE_NODES
    from ..pipelines.metadata import describe_pipeline

    for step, node in enumerate(describe_pipeline(PIPELINE_NODES), start=1):
        fatal = "  (ends run on failure)" if node.get('ends_run_on_failure') else ""
        click.echo(f"{step}. {node['node']} [{node.get('phase', '')}]{fatal}")
        click.echo(f"   reads:    {', '.join(node.get('inputs', [])) or '-'}")
        click.echo(f"   writes:   {', '.join(node.get('outputs', [])) or '-'}")
        click.echo(f"   services: {', '.join(node.get('services', [])) or '-'}")


# Register command groups
cli.add_command(generate_command)
cli.add_command(errors_group)


if __name__ == '__main__':
    cli()
