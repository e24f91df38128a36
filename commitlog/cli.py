#!/usr/bin/env python3

import asyncio
import json
import os
from typing import Optional, Tuple, List

import click

from commitlog import exit_codes
from commitlog.config import (
    load_config,
    save_config,
    get_config_path,
    get_default_config,
    configure_logging,
)
from commitlog.domain import Attribute, ATTRIBUTE_SOURCES
from commitlog.infra import GitProcessError
from commitlog.output import emit, emit_error
from commitlog.services import LogService, LogRequest


@click.group()
@click.version_option(package_name='commitlog')
@click.option('-v', '--verbose', is_flag=True, help='Log git invocations and parsing to stderr')
@click.pass_context
def cli(ctx, verbose):
    """commitlog - Structured commit metadata from git history.

    Lists commits as JSONL (or a table), with exactly the attributes
    you ask for.
    """
    config = load_config()
    configure_logging(config, level='DEBUG' if verbose else None)
    ctx.obj = config


def _split_names(values: Tuple[str, ...]) -> List[str]:
    """Flatten repeated and comma-separated --include values."""
    names = []
    for value in values:
        names.extend(name.strip() for name in value.split(',') if name.strip())
    return names


@cli.command('log')
@click.argument('directory', required=False, type=click.Path(exists=True, file_okay=False))
@click.option('--from', 'start_ref', help='Start of the range (exclusive)')
@click.option('--to', 'end_ref', help='End of the range (inclusive, default: HEAD)')
@click.option('-i', '--include', 'include', multiple=True,
              help='Optional attribute to extract (repeatable, comma-separated). '
                   'Use "diff" for touched files.')
@click.option('--diff', 'include_diff', is_flag=True, help='Collect the files touched by each commit')
@click.option('--pretty/--json', 'pretty', default=None,
              help='Render a table instead of JSONL (default from config)')
@click.option('--async', 'use_async', is_flag=True,
              help='Run git through asyncio and fetch diffs concurrently')
@click.pass_obj
def log_handler(config, directory, start_ref, end_ref, include, include_diff, pretty, use_async):
    """List commits in a reference range.

    DIRECTORY: Path to a git repository (default: current directory)

    \b
    Examples:
        # Every commit reachable from HEAD
        commitlog log
        # Commits after v1.0 up to main, with parents and refs
        commitlog log --from v1.0 --to main -i parent_hashes,refs
        # Files touched by each commit, fetched concurrently
        commitlog log --diff --async
        # Human-readable table
        commitlog log --pretty
    """
    log_config = config.get('log', {})
    directory = directory or os.getcwd()
    names = list(log_config.get('include', [])) + _split_names(include)
    include_diff = include_diff or bool(log_config.get('include_diff', False))
    if pretty is None:
        pretty = bool(config.get('output', {}).get('pretty', False))

    ctx = click.get_current_context()
    try:
        request = LogRequest.build(names, include_diff)
    except ValueError as e:
        emit_error(str(e), type="invalid_attribute")
        ctx.exit(exit_codes.DATA_ERROR)

    try:
        service = LogService(config=config)
        if use_async:
            commits = asyncio.run(service.log(directory, start_ref, end_ref, request))
        else:
            commits = service.log_sync(directory, start_ref, end_ref, request)
    except GitProcessError as e:
        emit_error(str(e), type="git_error", context={"code": e.code})
        ctx.exit(exit_codes.GIT_ERROR)
    except ValueError as e:
        emit_error(str(e), type="data_error")
        ctx.exit(exit_codes.DATA_ERROR)

    emit(commits, pretty=pretty)


@cli.command('attributes')
@click.option('--pretty', is_flag=True, help='Render a table instead of JSONL')
def attributes_handler(pretty):
    """List the attributes commitlog can extract.

    Default attributes are always included; the others are requested
    with --include.
    """
    rows = [
        {
            'name': attribute.value,
            'camel_name': attribute.camel_name,
            'tokens': list(ATTRIBUTE_SOURCES[attribute].tokens),
            'default': attribute.is_default,
        }
        for attribute in Attribute
    ]
    rows.append({'name': 'diff', 'camel_name': 'diff', 'tokens': [], 'default': False})
    emit(rows, pretty=pretty, columns=['name', 'camel_name', 'tokens', 'default'])


@cli.group('config')
def config_cmd():
    """Configuration management commands."""
    pass


@config_cmd.command('show')
@click.option('--pretty', is_flag=True, help='Display as formatted JSON instead of single-line JSONL')
@click.option('--path', is_flag=True, help='Show the config file path being used')
@click.pass_obj
def show_config(config, pretty, path):
    """Show the current configuration with all merges applied.

    By default, outputs single-line JSON (JSONL format).
    Use --pretty for human-readable formatted output.
    Use --path to see which config file is being used.
    """
    if path:
        print(json.dumps({"config_path": str(get_config_path())}))
        return

    if pretty:
        print(json.dumps(config, indent=2, ensure_ascii=False))
    else:
        print(json.dumps(config, ensure_ascii=False))


@config_cmd.command('init')
@click.option('--force', is_flag=True, help='Overwrite an existing config file')
def init_config(force):
    """Write the default configuration to the config file."""
    config_path = get_config_path()
    if config_path.exists() and not force:
        click.echo(f"Configuration already exists at {config_path} (use --force to overwrite)", err=True)
        return
    written = save_config(get_default_config(), config_path)
    click.echo(f"Default configuration written to {written}")


def main(argv: Optional[List[str]] = None) -> int:
    """Run the CLI and translate failures into exit codes."""
    try:
        result = cli.main(args=argv, prog_name='commitlog', standalone_mode=False)
    except click.ClickException as e:
        e.show()
        return e.exit_code
    except (click.exceptions.Abort, KeyboardInterrupt):
        click.echo("Interrupted", err=True)
        return exit_codes.INTERRUPTED
    except (exit_codes.CommandError, GitProcessError) as e:
        emit_error(str(e), type=e.__class__.__name__)
        return exit_codes.get_exit_code_for_exception(e)
    return result if isinstance(result, int) else exit_codes.SUCCESS


if __name__ == "__main__":
    raise SystemExit(main())
