"""
Configuration Commands for INFT CLI

Inspect the merged configuration, change single keys, and check or persist
the result.
"""

import sys
from typing import Any, Optional

import click

from ..config import parse_env_value
from ..context import CLIContext, handle_cli_error, pass_context


def _lookup_or_exit(ctx: CLIContext, key: str) -> Any:
    value = ctx.config_manager.get(key)
    if value is None:
        click.echo(f"Configuration key not found: {key}", err=True)
        sys.exit(1)
    return value


@click.group()
@pass_context
def config(ctx: CLIContext):
    """
    Configuration commands.

    Storage endpoints, retry policy, encryption method and output settings.
    """
    ctx.logger.debug("config group invoked")


@config.command('show')
@click.option('--key', help='Only show this dotted key or section')
@click.option('--sources', is_flag=True, help='List the layers that were merged')
@pass_context
@handle_cli_error
def show_config(ctx: CLIContext, key: Optional[str], sources: bool):
    """
    Print the merged configuration.

    Examples:
        inft config show
        inft config show --key storage
        inft --profile local config show --sources
    """
    merged = ctx.load_config()

    if sources:
        click.echo("Configuration sources (lowest to highest precedence):")
        for position, label in enumerate(ctx.config_manager.get_sources(), 1):
            click.echo(f"  {position}. {label}")
        return

    if key:
        value = _lookup_or_exit(ctx, key)
        ctx.output(value if isinstance(value, dict) else {key: value})
        return

    # Nested sections read better as YAML than as a flat table
    ctx.output(merged, 'yaml' if ctx.output_format == 'table' else None)


@config.command('get')
@click.argument('key')
@pass_context
@handle_cli_error
def get_config(ctx: CLIContext, key: str):
    """
    Print one configuration value.

    Examples:
        inft config get storage.storage_url
    """
    ctx.load_config()
    value = _lookup_or_exit(ctx, key)

    if isinstance(value, dict):
        ctx.output(value)
    else:
        click.echo(value)


@config.command('set')
@click.argument('key')
@click.argument('value')
@click.option('--save', is_flag=True, help='Persist to the project config file (.inft.yml)')
@pass_context
@handle_cli_error
def set_config(ctx: CLIContext, key: str, value: str, save: bool):
    """
    Change one configuration value.

    Without --save the change only lasts for this invocation.

    Examples:
        inft config set encryption.method aes_256_gcm --save
        inft config set storage.timeout 60 --save
    """
    ctx.load_config()
    parsed = parse_env_value(value)
    ctx.config_manager.set(key, parsed)
    click.echo(f"Set {key} = {parsed}")

    if save:
        click.echo(f"Saved to {ctx.config_manager.save()}")


@config.command('validate')
@pass_context
@handle_cli_error
def validate_config(ctx: CLIContext):
    """
    Check the merged configuration.

    Exits with status 1 when a problem is found.
    """
    ctx.load_config()
    problems = ctx.config_manager.validate()

    if not problems:
        click.echo("Configuration is valid")
        return

    click.echo("Configuration validation failed:")
    for problem in problems:
        click.echo(f"  - {problem}")
    sys.exit(1)


@config.command('save')
@click.option('--path', type=click.Path(dir_okay=False), help='Destination file')
@click.option('--format', 'file_format', type=click.Choice(['yaml', 'json']),
              default='yaml', show_default=True, help='File format')
@pass_context
@handle_cli_error
def save_config(ctx: CLIContext, path: Optional[str], file_format: str):
    """
    Write the merged configuration to a file.

    Examples:
        inft config save
        inft config save --path ~/.inft/config.json --format json
    """
    ctx.load_config()
    click.echo(f"Configuration saved to {ctx.config_manager.save(path, file_format)}")
