"""
Agent Metadata Commands for INFT CLI

Commands for creating, retrieving, updating, and validating encrypted AI
agent metadata referenced by Intelligent NFTs.
"""

import sys
from typing import Any, Dict, Optional, Tuple

import click

from inft.metadata import MetadataValidator, create_test_metadata, validate_ai_model_data

from ..config import parse_env_value
from ..context import CLIContext, handle_cli_error, load_json_file, pass_context, save_json_file
from ..output import format_diff


def parse_assignment(assignment: str) -> Tuple[str, Any]:
    """
    Parse a 'field=value' assignment.

    Values follow the same rules as INFT_* environment variables: JSON
    literals (numbers, lists, booleans), yes/no, otherwise plain text.
    """
    if '=' not in assignment:
        raise click.BadParameter(f"expected field=value, got '{assignment}'", param_hint='--set')

    key, raw_value = assignment.split('=', 1)
    key = key.strip()
    if not key:
        raise click.BadParameter(f"empty field name in '{assignment}'", param_hint='--set')

    return key, parse_env_value(raw_value)


@click.group()
@pass_context
def agent(ctx: CLIContext):
    """
    AI agent metadata commands.

    Create, retrieve, and update the encrypted metadata behind an INFT.
    """
    ctx.logger.debug("Agent command group invoked")


@agent.command('create')
@click.option('--owner', required=True, help='Owner public key or address')
@click.option('--model', help='Model name')
@click.option('--weights', help='Location of the model weights')
@click.option('--description', help='Agent description')
@click.option('--capability', 'capabilities', multiple=True, help='Agent capability (repeatable)')
@click.option('--model-version', help='Semantic version of the agent metadata')
@click.option('--from-file', type=click.Path(exists=True, dir_okay=False),
              help='JSON file with model data; options override its fields')
@click.option('--save-result', type=click.Path(dir_okay=False),
              help='Write the locator, hash and key to a JSON file')
@pass_context
@handle_cli_error
def create_agent(ctx: CLIContext, owner: str, model: Optional[str], weights: Optional[str],
                 description: Optional[str], capabilities: Tuple[str, ...],
                 model_version: Optional[str], from_file: Optional[str],
                 save_result: Optional[str]):
    """
    Encrypt and store metadata for a new AI agent.

    Prints the locator, keccak-256 metadata hash and encryption key needed
    to mint the INFT and to read the metadata back.

    Examples:
        inft agent create --owner 0xabc... --model GPT-4 --description "Chat agent"
        inft agent create --owner 0xabc... --from-file agent.json --capability summarization
    """
    model_data: Dict[str, Any] = load_json_file(from_file) if from_file else {}

    overrides = {
        'model': model,
        'weights': weights,
        'description': description,
        'version': model_version
    }
    model_data.update({k: v for k, v in overrides.items() if v is not None})
    if capabilities:
        model_data['capabilities'] = list(capabilities)

    if not validate_ai_model_data(model_data):
        ctx.logger.warning("Model data is missing model or description; defaults will be used")

    result = ctx.get_manager().create_ai_agent(model_data, owner)

    if result.used_fallback:
        click.echo("Warning: remote storage unavailable, metadata embedded in data: URI", err=True)

    if save_result:
        save_json_file(result.to_dict(), save_result)
        ctx.logger.info(f"Saved storage result to {save_result}")

    ctx.output(result.to_dict())


@agent.command('retrieve')
@click.argument('uri')
@click.option('--key', required=True, help='Hex encryption key returned by create')
@click.option('--validate', is_flag=True, help='Validate the record against the agent schema')
@pass_context
@handle_cli_error
def retrieve_agent(ctx: CLIContext, uri: str, key: str, validate: bool):
    """
    Retrieve and decrypt AI agent metadata.

    Examples:
        inft agent retrieve 0g://0x1234... --key 9f86d0...
        inft agent retrieve "data:application/json;base64,..." --key 9f86d0...
    """
    record = ctx.get_manager().retrieve_ai_agent(uri, key, validate=validate)
    ctx.output(record)


@agent.command('update')
@click.argument('uri')
@click.option('--key', required=True, help='Hex encryption key of the current metadata')
@click.option('--set', 'assignments', multiple=True, metavar='FIELD=VALUE',
              help='Field to overwrite (repeatable); values are parsed as JSON when possible')
@click.option('--from-file', type=click.Path(exists=True, dir_okay=False),
              help='JSON file with fields to overwrite')
@click.option('--show-diff', is_flag=True, help='Show changed fields')
@pass_context
@handle_cli_error
def update_agent(ctx: CLIContext, uri: str, key: str, assignments: Tuple[str, ...],
                 from_file: Optional[str], show_diff: bool):
    """
    Update AI agent metadata and store it under a new locator.

    The patch version is bumped on every update.

    Examples:
        inft agent update 0g://0x1234... --key 9f86d0... --set description="New text"
        inft agent update 0g://0x1234... --key 9f86d0... --set 'capabilities=["chat"]'
    """
    updates: Dict[str, Any] = load_json_file(from_file) if from_file else {}
    for assignment in assignments:
        field_name, value = parse_assignment(assignment)
        updates[field_name] = value

    if not updates:
        raise click.UsageError("Nothing to update: pass --set or --from-file")

    manager = ctx.get_manager()

    if show_diff:
        original = manager.retrieve_ai_agent(uri, key)
        updated = manager.apply_update(original, updates)
        result = manager.store_metadata(updated)
        click.echo(format_diff(original, updated.to_dict(), color=False), err=True)
    else:
        result = manager.update_ai_agent(uri, key, updates)

    ctx.output(result.to_dict())


@agent.command('sample')
@click.option('--output', 'output_path', type=click.Path(dir_okay=False),
              help='Write sample model data to a JSON file')
@pass_context
@handle_cli_error
def sample_agent(ctx: CLIContext, output_path: Optional[str]):
    """
    Print sample model data for a new agent.

    Examples:
        inft agent sample --output agent.json
    """
    sample = create_test_metadata()

    if output_path:
        save_json_file(sample, output_path)
        click.echo(f"Sample model data written to {output_path}")
    else:
        ctx.output(sample, 'json')


@agent.command('validate')
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
@click.option('--schema', 'schema_type', type=click.Choice(['model_data', 'agent']),
              default='model_data', show_default=True, help='Schema to validate against')
@pass_context
@handle_cli_error
def validate_agent(ctx: CLIContext, file: str, schema_type: str):
    """
    Validate model data or a stored agent record in a JSON file.

    Examples:
        inft agent validate agent.json
        inft agent validate record.json --schema agent
    """
    data = load_json_file(file)
    errors = MetadataValidator().get_validation_errors(data, schema_type)

    if errors:
        click.echo(f"{file} has {len(errors)} validation error(s):")
        for error in errors:
            click.echo(f"  - {error}")
        sys.exit(1)

    click.echo(f"{file} is valid {schema_type} metadata")
