"""
Shared state for INFT CLI commands

One CLIContext travels with every invocation. It owns the verbosity and
logging setup, the loaded configuration, the lazily built MetadataManager
and result output.
"""

import functools
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Any, Dict, Optional

import click

from inft.manager import MetadataManager

from .config import ConfigurationManager, build_manager
from .output import OutputFormatter

LOGGER_NAME = 'inft-cli'

# Loggers whose level follows -v; the handler is attached to each of them
VERBOSITY_LOGGERS = (LOGGER_NAME, 'inft', 'inft_crypto')

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def verbosity_level(verbose: int) -> int:
    """Map a -v count to a logging level."""
    if verbose >= 2:
        return logging.DEBUG
    if verbose == 1:
        return logging.INFO
    return logging.WARNING


def configure_logging(verbose: int) -> None:
    """
    Route INFT logs to stderr at the level selected by -v.

    The handler is named so that a repeated invocation in the same process
    replaces it instead of stacking another one.
    """
    level = verbosity_level(verbose)

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(LOGGER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    for name in VERBOSITY_LOGGERS:
        logger = logging.getLogger(name)
        for stale in [h for h in logger.handlers if h.get_name() == LOGGER_NAME]:
            logger.removeHandler(stale)
        logger.addHandler(handler)
        logger.setLevel(level)

    # HTTP client chatter only at -vv
    http_level = logging.DEBUG if verbose >= 2 else logging.WARNING
    for name in ('requests', 'urllib3'):
        logging.getLogger(name).setLevel(http_level)


class CLIContext:
    """Per-invocation CLI state shared by all command groups."""

    def __init__(self):
        self.config_file: Optional[str] = None
        self.profile: Optional[str] = None
        self.output_format: Optional[str] = None
        self.verbose: int = 0
        self.config_manager: Optional[ConfigurationManager] = None
        self.manager: Optional[MetadataManager] = None
        self.logger = logging.getLogger(LOGGER_NAME)

    def setup_logging(self):
        configure_logging(self.verbose)

    def load_config(self) -> Dict[str, Any]:
        """Load configuration; the configured output format applies unless -o was given."""
        if self.config_manager is None:
            self.config_manager = ConfigurationManager(self.config_file, self.profile)

        config = self.config_manager.load()
        if self.output_format is None:
            self.output_format = config.get('cli', {}).get('output_format', 'table')
        return config

    def get_manager(self) -> MetadataManager:
        """The metadata manager, built from configuration on first use."""
        if self.manager is None:
            self.manager = build_manager(self.load_config())
            self.logger.debug("Built metadata manager from configuration")
        return self.manager

    def output(self, data: Any, format_override: Optional[str] = None):
        formatter = OutputFormatter(format_override or self.output_format or 'table')
        click.echo(formatter.format(data))


pass_context = click.make_pass_decorator(CLIContext, ensure=True)


def _report_error(error: Exception) -> None:
    click_ctx = click.get_current_context(silent=True)
    cli_ctx = click_ctx.find_object(CLIContext) if click_ctx else None

    click.echo(f"Error: {error}", err=True)
    if cli_ctx is not None and cli_ctx.verbose >= 2:
        click.echo(traceback.format_exc(), err=True)
    else:
        click.echo("Use -vv for detailed error information.", err=True)


def handle_cli_error(func):
    """
    Turn unexpected exceptions from a command into a short message.

    Usage errors raised by click keep click's own handling. Anything else
    prints 'Error: ...' and exits 1; Ctrl-C exits 130.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except click.ClickException:
            raise
        except KeyboardInterrupt:
            click.echo("\nOperation cancelled by user.", err=True)
            sys.exit(130)
        except Exception as e:
            _report_error(e)
            sys.exit(1)

    return wrapper


def load_json_file(file_path: str) -> Dict[str, Any]:
    """
    Read a JSON object from disk.

    Raises:
        click.FileError: If the file is missing, not JSON, or not an object
    """
    path = Path(file_path)
    if not path.is_file():
        raise click.FileError(file_path, hint="file not found")

    try:
        data = json.loads(path.read_text(encoding='utf-8'))
    except ValueError as e:
        raise click.FileError(file_path, hint=f"invalid JSON: {e}")

    if not isinstance(data, dict):
        raise click.FileError(file_path, hint="expected a JSON object")
    return data


def save_json_file(data: Dict[str, Any], file_path: str, indent: int = 2):
    """Write data as pretty-printed JSON, creating parent directories."""
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=indent, ensure_ascii=False, default=str) + '\n', encoding='utf-8')
