"""
Tests for the INFT command line interface.

Commands run through click's CliRunner with a metadata manager backed by
in-memory storage injected into the CLI context.
"""

import json
import logging

import click
import pytest
from click.testing import CliRunner

from inft_cli import __version__
from inft_cli.commands.agent import parse_assignment
from inft_cli.context import LOGGER_NAME, VERBOSITY_LOGGERS, CLIContext
from inft_cli.main import cli


@pytest.fixture(autouse=True)
def cli_env(clean_config_env):
    """Isolate configuration and drop CLI log handlers after each test."""
    yield clean_config_env

    for name in VERBOSITY_LOGGERS:
        logger = logging.getLogger(name)
        for handler in [h for h in logger.handlers if h.get_name() == LOGGER_NAME]:
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)


@pytest.fixture
def runner():
    return CliRunner()


def context_for(manager):
    """CLI context that uses the given metadata manager."""
    ctx = CLIContext()
    ctx.manager = manager
    return ctx


class TestAgentCreate:
    """Test 'agent create'."""

    def test_create(self, runner, manager, owner_key):
        result = runner.invoke(cli, [
            '-o', 'json', 'agent', 'create',
            '--owner', owner_key,
            '--model', 'GPT-4',
            '--description', 'Chat agent',
            '--capability', 'chat',
            '--capability', 'search',
        ], obj=context_for(manager))

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data['encrypted_uri'].startswith('0g://')
        assert data['data_descriptions'] == ['Chat agent']

        record = manager.retrieve_ai_agent(data['encrypted_uri'], data['encryption_key'])
        assert record['capabilities'] == ['chat', 'search']
        assert record['owner'] == owner_key

    def test_create_from_file(self, runner, manager, owner_key, sample_model_data, cli_env):
        model_file = cli_env / 'agent.json'
        model_file.write_text(json.dumps(sample_model_data))
        result_file = cli_env / 'result.json'

        result = runner.invoke(cli, [
            '-o', 'json', 'agent', 'create',
            '--owner', owner_key,
            '--from-file', str(model_file),
            '--model', 'GPT-4o',
            '--save-result', str(result_file),
        ], obj=context_for(manager))

        assert result.exit_code == 0, result.output
        saved = json.loads(result_file.read_text())
        assert saved == json.loads(result.output)

        record = manager.retrieve_ai_agent(saved['encrypted_uri'], saved['encryption_key'])
        assert record['model'] == 'GPT-4o'
        assert record['description'] == sample_model_data['description']

    def test_create_fallback_warning(self, runner, fallback_manager, owner_key):
        result = runner.invoke(cli, [
            'agent', 'create', '--owner', owner_key, '--model', 'GPT-4', '--description', 'd',
        ], obj=context_for(fallback_manager))

        assert result.exit_code == 0
        assert 'remote storage unavailable' in result.output
        assert 'data:application/json;base64,' in result.output

    def test_owner_required(self, runner, manager):
        result = runner.invoke(cli, ['agent', 'create', '--model', 'GPT-4'], obj=context_for(manager))

        assert result.exit_code == 2
        assert '--owner' in result.output


class TestAgentRetrieve:
    """Test 'agent retrieve'."""

    def test_retrieve(self, runner, manager, sample_model_data, owner_key):
        stored = manager.create_ai_agent(sample_model_data, owner_key)

        result = runner.invoke(cli, [
            '-o', 'json', 'agent', 'retrieve', stored.encrypted_uri,
            '--key', stored.encryption_key, '--validate',
        ], obj=context_for(manager))

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)['model'] == 'GPT-4'

    def test_retrieve_table(self, runner, manager, sample_model_data, owner_key):
        stored = manager.create_ai_agent(sample_model_data, owner_key)

        result = runner.invoke(cli, [
            'agent', 'retrieve', stored.encrypted_uri, '--key', stored.encryption_key,
        ], obj=context_for(manager))

        assert result.exit_code == 0
        assert 'text-generation, question-answering, summarization' in result.output

    def test_unsupported_scheme(self, runner, manager):
        result = runner.invoke(cli, [
            'agent', 'retrieve', 'ipfs://QmHash', '--key', '00',
        ], obj=context_for(manager))

        assert result.exit_code == 1
        assert 'Error: Unsupported locator scheme: ipfs' in result.output
        assert 'Use -vv' in result.output


class TestAgentUpdate:
    """Test 'agent update'."""

    def test_update(self, runner, manager, sample_model_data, owner_key):
        stored = manager.create_ai_agent(sample_model_data, owner_key)

        result = runner.invoke(cli, [
            '-o', 'json', 'agent', 'update', stored.encrypted_uri,
            '--key', stored.encryption_key,
            '--set', 'description=Updated agent',
            '--set', 'capabilities=["chat"]',
        ], obj=context_for(manager))

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        record = manager.retrieve_ai_agent(data['encrypted_uri'], data['encryption_key'])
        assert record['description'] == 'Updated agent'
        assert record['capabilities'] == ['chat']
        assert record['version'] == '1.0.1'

    def test_show_diff(self, runner, manager, memory_storage, sample_model_data, owner_key):
        stored = manager.create_ai_agent(sample_model_data, owner_key)

        result = runner.invoke(cli, [
            'agent', 'update', stored.encrypted_uri, '--key', stored.encryption_key,
            '--set', 'model=GPT-5', '--show-diff',
        ], obj=context_for(manager))

        assert result.exit_code == 0
        assert '- model: GPT-4' in result.output
        assert '+ model: GPT-5' in result.output
        assert '+ version: 1.0.1' in result.output
        assert memory_storage.retrieve_calls == 1

    def test_nothing_to_update(self, runner, manager, sample_model_data, owner_key):
        stored = manager.create_ai_agent(sample_model_data, owner_key)

        result = runner.invoke(cli, [
            'agent', 'update', stored.encrypted_uri, '--key', stored.encryption_key,
        ], obj=context_for(manager))

        assert result.exit_code == 2
        assert 'Nothing to update' in result.output

    def test_bad_assignment(self, runner, manager):
        result = runner.invoke(cli, [
            'agent', 'update', '0g://0xroot', '--key', '00', '--set', 'novalue',
        ], obj=context_for(manager))

        assert result.exit_code == 2


class TestAgentSampleAndValidate:
    """Test 'agent sample' and 'agent validate'."""

    def test_sample_stdout(self, runner):
        result = runner.invoke(cli, ['agent', 'sample'])

        assert result.exit_code == 0
        assert json.loads(result.output)['model'] == 'GPT-4'

    def test_sample_to_file(self, runner, cli_env):
        path = cli_env / 'sample.json'

        result = runner.invoke(cli, ['agent', 'sample', '--output', str(path)])

        assert result.exit_code == 0
        assert 'Sample model data written to' in result.output
        assert json.loads(path.read_text())['description']

    def test_validate_valid(self, runner, cli_env, sample_model_data):
        path = cli_env / 'agent.json'
        path.write_text(json.dumps(sample_model_data))

        result = runner.invoke(cli, ['agent', 'validate', str(path)])

        assert result.exit_code == 0
        assert 'is valid model_data metadata' in result.output

    def test_validate_invalid(self, runner, cli_env):
        path = cli_env / 'agent.json'
        path.write_text(json.dumps({"model": "GPT-4", "capabilities": "chat"}))

        result = runner.invoke(cli, ['agent', 'validate', str(path)])

        assert result.exit_code == 1
        assert '2 validation error(s)' in result.output
        assert "'description' is a required property" in result.output

    def test_validate_agent_schema(self, runner, cli_env, sample_model_data):
        path = cli_env / 'record.json'
        path.write_text(json.dumps(sample_model_data))

        result = runner.invoke(cli, ['agent', 'validate', str(path), '--schema', 'agent'])

        assert result.exit_code == 1
        assert "'createdAt' is a required property" in result.output

    def test_validate_non_object(self, runner, cli_env):
        path = cli_env / 'list.json'
        path.write_text('[1, 2]')

        result = runner.invoke(cli, ['agent', 'validate', str(path)])

        assert result.exit_code == 1
        assert 'expected a JSON object' in result.output


class TestConfigCommands:
    """Test 'config' commands."""

    def test_get(self, runner):
        result = runner.invoke(cli, ['config', 'get', 'storage.timeout'])

        assert result.exit_code == 0
        assert result.output.strip() == '30'

    def test_get_with_profile(self, runner):
        result = runner.invoke(cli, ['--profile', 'local', 'config', 'get', 'storage.storage_url'])
        assert result.output.strip() == 'http://localhost:5678'

    def test_get_missing(self, runner):
        result = runner.invoke(cli, ['config', 'get', 'storage.nope'])

        assert result.exit_code == 1
        assert 'Configuration key not found' in result.output

    def test_set_and_save(self, runner, cli_env):
        result = runner.invoke(cli, ['config', 'set', 'storage.timeout', '60', '--save'])

        assert result.exit_code == 0
        assert 'Set storage.timeout = 60' in result.output
        assert 'timeout: 60' in (cli_env / '.inft.yml').read_text()

        result = runner.invoke(cli, ['config', 'get', 'storage.timeout'])
        assert result.output.strip() == '60'

    def test_set_uses_same_value_rules_as_environment(self, runner):
        result = runner.invoke(cli, ['config', 'set', 'cli.color', 'on'])
        assert 'Set cli.color = True' in result.output

        result = runner.invoke(cli, ['config', 'set', 'storage.retry_delay', '0.5'])
        assert 'Set storage.retry_delay = 0.5' in result.output

    def test_validate(self, runner):
        result = runner.invoke(cli, ['config', 'validate'])

        assert result.exit_code == 0
        assert 'Configuration is valid' in result.output

    def test_validate_failure(self, runner, monkeypatch):
        monkeypatch.setenv('INFT_ENCRYPTION__METHOD', 'rot13')

        result = runner.invoke(cli, ['config', 'validate'])

        assert result.exit_code == 1
        assert 'Invalid encryption method: rot13' in result.output

    def test_show_json(self, runner):
        result = runner.invoke(cli, ['-o', 'json', 'config', 'show'])

        assert result.exit_code == 0
        assert json.loads(result.output)['encryption']['method'] == 'base64'

    def test_show_sources(self, runner):
        result = runner.invoke(cli, ['--profile', 'testnet', 'config', 'show', '--sources'])

        assert '1. defaults' in result.output
        assert '2. profile:testnet' in result.output

    def test_save(self, runner, cli_env):
        path = cli_env / 'saved.json'

        result = runner.invoke(cli, ['config', 'save', '--path', str(path), '--format', 'json'])

        assert result.exit_code == 0
        assert json.loads(path.read_text())['cli']['output_format'] == 'table'


class TestGlobalOptions:
    """Test top-level CLI behavior."""

    def test_version(self, runner):
        result = runner.invoke(cli, ['--version'])

        assert result.exit_code == 0
        assert f'INFT CLI, version {__version__}' in result.output

    def test_help(self, runner):
        result = runner.invoke(cli, ['--help'])

        assert result.exit_code == 0
        assert 'agent' in result.output
        assert 'config' in result.output


class TestParseAssignment:
    """Test --set value parsing."""

    @pytest.mark.parametrize("assignment,expected", [
        ('description=hello world', ('description', 'hello world')),
        ('capabilities=["a", "b"]', ('capabilities', ['a', 'b'])),
        ('count=3', ('count', 3)),
        ('version=1.0.1', ('version', '1.0.1')),
        ('note=a=b', ('note', 'a=b')),
        ('enabled=yes', ('enabled', True)),
        ('model=123', ('model', 123)),
    ])
    def test_parse(self, assignment, expected):
        assert parse_assignment(assignment) == expected

    @pytest.mark.parametrize("assignment", ['novalue', '=value'])
    def test_invalid(self, assignment):
        with pytest.raises(click.BadParameter):
            parse_assignment(assignment)
