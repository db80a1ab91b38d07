"""Repsheet operator command line"""

import json
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from functools import wraps

import click

from .. import __version__
from ..backend import (
    check_connection, connect_from_config, EvidenceLedger, ReputationStore
)
from ..core.address import remote_address
from ..core.config import ConfigManager
from ..core.exceptions import ConnectError, RepsheetError
from ..core.models import ConnectionState, RequestRecord, Status
from .logging_setup import setup_logging

logger = logging.getLogger(__name__)

KIND_CHOICE = click.Choice(['ip', 'user', 'users'], case_sensitive=False)


def handle_errors(func):
    """Turn Repsheet errors into a clean CLI failure"""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except RepsheetError as e:
            logger.error(f"{func.__name__} failed: {e}")
            raise click.ClickException(str(e)) from e
    return wrapper


@contextmanager
def open_stores(ctx):
    """Yield (reputation, evidence) bound to a fresh connection"""
    with connect_from_config(ctx.obj['config']) as connection:
        yield ReputationStore(connection), EvidenceLedger(connection)


@click.group(context_settings={'help_option_names': ['-h', '--help']})
@click.version_option(version=__version__, prog_name="repsheet")
@click.option('-c', '--config', 'config_path', type=click.Path(dir_okay=False), help='YAML or JSON config file')
@click.option('-H', '--host', 'redis_host', help='Redis host')
@click.option('-p', '--port', 'redis_port', type=int, help='Redis port')
@click.option('-T', '--timeout', 'redis_timeout_ms', type=int, help='Connect timeout in milliseconds')
@click.option('-V', '--verbose', is_flag=True, help='Verbose output (DEBUG level)')
@click.pass_context
@handle_errors
def cli(ctx, config_path, redis_host, redis_port, redis_timeout_ms, verbose):
    """Inspect and update actor reputation stored in Redis."""
    manager = ConfigManager(config_path, cli_overrides={
        'redis_host': redis_host,
        'redis_port': redis_port,
        'redis_timeout_ms': redis_timeout_ms,
    })
    config = manager.config
    setup_logging(config.log_level, config.log_file, verbose=verbose)
    ctx.ensure_object(dict)
    ctx.obj['config'] = config


@cli.command()
@click.pass_context
@handle_errors
def ping(ctx):
    """Check that Redis is reachable."""
    try:
        with connect_from_config(ctx.obj['config']) as connection:
            state = check_connection(connection)
    except ConnectError as e:
        logger.warning(f"ping failed: {e}")
        state = ConnectionState.DISCONNECTED
    click.echo(state.name)
    if state is not ConnectionState.HEALTHY:
        ctx.exit(1)


@cli.command()
@click.argument('kind', type=KIND_CHOICE)
@click.argument('actor')
@click.pass_context
@handle_errors
def status(ctx, kind, actor):
    """Show the effective status of an actor."""
    with open_stores(ctx) as (reputation, _):
        actor_status, reason = reputation.actor_status(kind, actor)
    click.echo(f"{actor_status.name}\t{reason}" if reason else actor_status.name)


@cli.command()
@click.argument('kind', type=KIND_CHOICE)
@click.argument('actor')
@click.option('-n', '--limit', type=int, default=10, show_default=True, help='Recent requests to include')
@click.pass_context
@handle_errors
def inspect(ctx, kind, actor, limit):
    """Dump status, rule counts and recent requests as JSON."""
    with open_stores(ctx) as (reputation, evidence):
        report = evidence.report(reputation, kind, actor, limit)
    click.echo(json.dumps(report.to_dict(), indent=2))


@cli.command()
@click.argument('kind', type=KIND_CHOICE)
@click.argument('actor')
@click.option('-r', '--reason', help='Audit note')
@click.pass_context
@handle_errors
def mark(ctx, kind, actor, reason):
    """Put an actor on the repsheet."""
    with open_stores(ctx) as (reputation, _):
        reputation.mark_actor(kind, actor, reason)
    click.echo(f"{actor} marked")


@cli.command()
@click.argument('kind', type=KIND_CHOICE)
@click.argument('actor')
@click.option('-r', '--reason', required=True, help='Audit note (required)')
@click.option('-t', '--ttl', type=int, help='Expire the blacklist entry after N seconds')
@click.pass_context
@handle_errors
def blacklist(ctx, kind, actor, reason, ttl):
    """Blacklist an actor, optionally for a limited time."""
    with open_stores(ctx) as (reputation, _):
        if ttl is None:
            reputation.blacklist_actor(kind, actor, reason)
            click.echo(f"{actor} blacklisted")
        else:
            reputation.blacklist_and_expire(kind, actor, ttl, reason)
            click.echo(f"{actor} blacklisted for {ttl}s")


@cli.command()
@click.argument('kind', type=KIND_CHOICE)
@click.argument('actor')
@click.option('-r', '--reason', help='Audit note')
@click.pass_context
@handle_errors
def whitelist(ctx, kind, actor, reason):
    """Whitelist an actor."""
    with open_stores(ctx) as (reputation, _):
        reputation.whitelist_actor(kind, actor, reason)
    click.echo(f"{actor} whitelisted")


@cli.command()
@click.argument('code')
@click.option('-m', '--mark', 'mark_it', is_flag=True, help='Add the country to the marked set first')
@click.pass_context
@handle_errors
def country(ctx, code, mark_it):
    """Show (or set) the marked status of a country code.

    CODE is upper-cased, matching ISO 3166 alpha-2 spelling.
    """
    code = code.strip().upper()
    with open_stores(ctx) as (reputation, _):
        if mark_it:
            reputation.mark_country(code)
        country_status = reputation.country_status(code)
    click.echo("MARKED" if country_status is Status.MARKED else "OK")


@cli.command()
@click.argument('kind', type=KIND_CHOICE)
@click.pass_context
@handle_errors
def history(ctx, kind):
    """List every actor ever blacklisted with an expiry."""
    with open_stores(ctx) as (reputation, _):
        members = reputation.blacklist_history(kind)
    for member in sorted(members):
        click.echo(member)


@cli.command()
@click.argument('actor')
@click.argument('rule')
@click.pass_context
@handle_errors
def trigger(ctx, actor, rule):
    """Count one trigger of RULE for ACTOR."""
    with open_stores(ctx) as (_, evidence):
        count = evidence.increment_rule_count(actor, rule)
    click.echo(f"{rule}: {count}")


@cli.command()
@click.argument('actor')
@click.option('--user-agent', help='User-Agent header')
@click.option('--method', help='HTTP method')
@click.option('--uri', help='Request path')
@click.option('--args', 'arguments', help='Query string')
@click.pass_context
@handle_errors
def record(ctx, actor, user_agent, method, uri, arguments):
    """Append a request to ACTOR's history."""
    config = ctx.obj['config']
    entry = RequestRecord(
        timestamp=datetime.now(timezone.utc).strftime('%Y-%m-%dT%H:%M:%SZ'),
        user_agent=user_agent,
        method=method,
        uri=uri,
        arguments=arguments,
    )
    with open_stores(ctx) as (_, evidence):
        evidence.record_request(actor, entry, config.max_history_length, config.history_ttl)
    click.echo(entry.to_log_line())


@cli.command()
@click.option('-a', '--remote-addr', help='Address of the direct peer')
@click.option('-f', '--forwarded-for', help='X-Forwarded-For header value')
def resolve(remote_addr, forwarded_for):
    """Resolve the origin address of a request (no Redis needed)."""
    address = remote_address(remote_addr, forwarded_for)
    if address is None:
        raise click.ClickException("No valid address found")
    click.echo(address)


def main():
    cli(obj={})


if __name__ == '__main__':
    main()
