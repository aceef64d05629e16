"""
Command Line Interface for ccompose.
"""
import os
import click
from ..PARSERS.compose_parser import ComposeParser, DEFAULT_COMPOSE_FILE
from ..MANAGERS.service_orchestrator import ServiceOrchestrator
from ..MODELS.batch_outcome import ServiceState
from ..RUNNERS.command_translator import CommandTranslator
from ..RUNNERS.process_runner import ContainerRunner, DEFAULT_BINARY
from ..UTILS.logging_setup import setup_logging
from ..exceptions import ComposeError, ConfigError
from .. import __version__

@click.group()
@click.version_option(version=__version__)
@click.option('--file', '-f', default=DEFAULT_COMPOSE_FILE, envvar='CCOMPOSE_FILE', help='Compose file path')
@click.option('--binary', default=DEFAULT_BINARY, envvar='CCOMPOSE_BINARY', help='Container CLI to drive')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, file, binary, verbose):
    """
    ccompose - run docker-compose.yml services with the container CLI.
    """
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj['file'] = file
    ctx.obj['binary'] = binary

def _orchestrator(ctx) -> ServiceOrchestrator:
    """
    Loads the compose file and builds the orchestrator, exiting on config errors.
    """
    try:
        config = ComposeParser().parse(ctx.obj['file'])
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)
    return ServiceOrchestrator(config,
                               ContainerRunner(ctx.obj['binary']),
                               CommandTranslator(os.getcwd()))

@cli.command()
@click.pass_context
def start(ctx):
    """Start services that are not already running."""
    orchestrator = _orchestrator(ctx)
    outcome = orchestrator.start()
    if outcome.failed:
        failed = [o.name for o in outcome.outcomes if o.state == ServiceState.FAILED]
        click.echo(f"Error: failed to start {', '.join(failed)}", err=True)
        ctx.exit(1)

@cli.command()
@click.pass_context
def status(ctx):
    """Show the status of every service."""
    orchestrator = _orchestrator(ctx)
    outcome = orchestrator.status()
    click.echo(f"{'SERVICE':15} {'STATUS':10}")
    click.echo("-" * 25)
    for o in outcome.outcomes:
        if o.state == ServiceState.REPORTED:
            state = o.detail
        elif o.state == ServiceState.NOT_FOUND:
            state = "not found"
        else:
            state = f"unknown ({o.detail})"
        click.echo(f"{o.name:15} {state:10}")

@cli.command()
@click.pass_context
def stop(ctx):
    """Stop every service, aborting on the first failure."""
    orchestrator = _orchestrator(ctx)
    try:
        orchestrator.stop()
    except ComposeError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

@cli.command(context_settings={'ignore_unknown_options': True, 'allow_interspersed_args': False})
@click.argument('service')
@click.argument('args', nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def run(ctx, service, args):
    """Run one service in the foreground, passing ARGS to its command."""
    orchestrator = _orchestrator(ctx)
    try:
        exit_code = orchestrator.run(service, args)
    except ComposeError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)
    ctx.exit(shell_exit_code(exit_code))

def shell_exit_code(returncode: int) -> int:
    """
    Maps a child killed by signal N (returncode -N) to 128 + N, as shells do.
    """
    if returncode < 0:
        return 128 - returncode
    return returncode

def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={})

if __name__ == '__main__':
    main()
