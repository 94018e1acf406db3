# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
pr-mirror CLI - Main entry point

Usage:
    clone-pr <pr-url> [branch-name]          - Mirror a pull request into your fork
    prmirror clone <pr-url> [branch-name]    - Same as clone-pr
    prmirror cleanup <pr-url> [branch-name]  - Remove branches left by an aborted run
    prmirror config                          - Show/set CLI configuration
"""

from typing import Optional

import click
from rich.markup import escape

from prmirror import __version__
from prmirror.cli.helpers import (
    build_config_table,
    console,
    print_error,
    print_step,
    print_success,
    print_warning,
)
from prmirror.config import MirrorConfig, load_config, load_config_file, save_config_value
from prmirror.constants import CONFIG_FILE
from prmirror.exceptions import MirrorError
from prmirror.mirror import MirrorOrchestrator
from prmirror.utils.logging import setup_logging


_MIRROR_OPTIONS = [
    click.option('--repo-path', default=None, help='Local clone of the fork (default: enclosing git repository)'),
    click.option('--upstream', 'upstream_remote', default=None, help="Remote of the source repository (default: 'upstream')"),
    click.option('--origin', 'origin_remote', default=None, help="Remote of your fork (default: 'origin')"),
    click.option('--main-branch', default=None, help="Branch checked out after cleanup (default: 'main')"),
    click.option('--marker-comment', default=None, help='Comment posted on the closed pull request'),
    click.option('--label-color', default=None, help='Hex color of the pr-<number> label'),
    click.option('--verbose', '-v', is_flag=True, default=False, help='Show every git/gh command'),
    click.option('--log-file', default=None, type=click.Path(dir_okay=False), help='Also write the log to this file'),
]


def mirror_options(func):
    """Options shared by commands that operate on a pull request."""
    for option in reversed(_MIRROR_OPTIONS):
        func = option(func)
    return func


def _build_orchestrator(options: dict) -> MirrorOrchestrator:
    setup_logging(verbose=options.pop('verbose'), log_file=options.pop('log_file'))
    config = load_config(cli_overrides=options, config_file=CONFIG_FILE)
    orchestrator = MirrorOrchestrator(config)
    orchestrator.on_step = print_step
    orchestrator.on_warning = print_warning
    return orchestrator


@click.command(name='clone')
@click.argument('pr_url')
@click.argument('branch_name', required=False)
@mirror_options
def clone(pr_url: str, branch_name: Optional[str], **options):
    """Mirror a pull request into your fork on its original base commit.

    Replays the pull request's commits onto the parent of its first commit,
    opens a pull request on the fork with the same title, body and a pr-<N>
    label, verifies the diff, closes it with the marker comment, and deletes
    every branch it created.

    \b
    Examples:
        clone-pr https://github.com/PlutoLang/Pluto/pull/1337
        clone-pr https://github.com/PlutoLang/Pluto/pull/1337 os-dnsresolve
    """
    orchestrator = _build_orchestrator(options)
    try:
        result = orchestrator.run(pr_url, branch_name)
    except MirrorError as e:
        raise click.ClickException(str(e))

    if result.diff_matches:
        print_success(f'Mirrored {result.commit_count} commit(s): {result.pull_request_url}')
    else:
        print_error(f'Mirrored with a diff mismatch: {result.pull_request_url}')


@click.command(name='cleanup')
@click.argument('pr_url')
@click.argument('branch_name', required=False)
@mirror_options
def cleanup(pr_url: str, branch_name: Optional[str], **options):
    """Delete the local and remote session branches of a pull request.

    Safe to run repeatedly; branches that are already gone are skipped.
    """
    orchestrator = _build_orchestrator(options)
    try:
        orchestrator.cleanup(pr_url, branch_name)
    except MirrorError as e:
        raise click.ClickException(str(e))
    print_success('Session branches removed')


@click.group(name='config', invoke_without_command=True)
@click.pass_context
def config_group(ctx):
    """CLI configuration management.

    Show current configuration (default) or set config values.

    \b
    Subcommands:
        set <key> <value>    Set a config value
    """
    if ctx.invoked_subcommand is None:
        show_config()


def show_config():
    """Show configured values merged over the defaults"""
    console.print('\n[bold]pr-mirror Configuration[/bold]\n')

    values = MirrorConfig().to_dict()
    values.update(load_config_file(CONFIG_FILE))
    console.print(build_config_table(values))

    if CONFIG_FILE.exists():
        console.print(f'\n[dim]Config file: {CONFIG_FILE}[/dim]\n')
    else:
        console.print(f'\n[dim]Showing defaults; no config file at {CONFIG_FILE}[/dim]\n')


@config_group.command('set')
@click.argument('key', type=click.Choice(MirrorConfig.keys()))
@click.argument('value', type=str)
def config_set(key: str, value: str):
    """Set a configuration value.

    \b
    Examples:
        prmirror config set upstream_remote source
        prmirror config set marker_comment "@ci-bot e2e-test"
    """
    old_value = save_config_value(key, value, config_file=CONFIG_FILE)

    if old_value is not None:
        console.print(f'[green]Updated {key}:[/green] {escape(str(old_value))} → {escape(value)}', highlight=False)
    else:
        console.print(f'[green]Set {key}:[/green] {escape(value)}', highlight=False)


@click.group()
@click.version_option(version=__version__, prog_name='pr-mirror')
def cli():
    """pr-mirror - Mirror upstream pull requests into your fork"""
    pass


cli.add_command(clone)
cli.add_command(cleanup)
cli.add_command(config_group)


def clone_pr_main():
    """Entry point for the standalone clone-pr command"""
    clone(prog_name='clone-pr')


def main():
    """Main entry point for the CLI"""
    cli()


if __name__ == '__main__':
    main()
