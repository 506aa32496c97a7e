#!/usr/bin/env python3
"""
INFT - Command Line Interface

A CLI for storing and reading the encrypted AI agent metadata behind
ERC-7857 Intelligent NFTs.
"""

import sys
from typing import Optional

import click

from . import __version__
from .commands.agent import agent
from .commands.config import config
from .context import CLIContext, pass_context


@click.group(context_settings={'help_option_names': ['-h', '--help']})
@click.option('--config-file', '-c',
              type=click.Path(dir_okay=False),
              help='Path to configuration file')
@click.option('--profile',
              type=click.Choice(['testnet', 'local']),
              help='Configuration profile')
@click.option('--output-format', '-o',
              type=click.Choice(['table', 'json', 'yaml']),
              help='Output format')
@click.option('--verbose', '-v',
              count=True,
              help='Increase verbosity (-v for INFO, -vv for DEBUG)')
@click.version_option(__version__, '--version', prog_name='INFT CLI')
@pass_context
def cli(ctx: CLIContext, config_file: Optional[str], profile: Optional[str],
        output_format: Optional[str], verbose: int):
    """
    Intelligent NFT (ERC-7857) metadata CLI

    Encrypts AI agent metadata, stores it on 0G storage (with a data: URI
    fallback), and reads or updates it again.

    Examples:
        inft agent create --owner 0xabc... --model GPT-4 --description "Chat agent"
        inft agent retrieve 0g://0x1234... --key 9f86d0...
        inft config show
    """
    ctx.config_file = config_file
    ctx.profile = profile
    ctx.output_format = output_format
    ctx.verbose = verbose

    ctx.setup_logging()
    ctx.load_config()

    ctx.logger.debug("CLI initialized with context")


cli.add_command(agent)
cli.add_command(config)


def main():
    """Console script entry point."""
    return cli(prog_name='inft')


if __name__ == '__main__':
    sys.exit(main())
