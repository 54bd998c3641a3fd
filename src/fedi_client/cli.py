"""CLI interface for fedi-client.

Commands:
    setup          - Choose a server and store an access token
    login          - Check (or ask for) the token of a server
    servers        - List servers with stored tokens
    instance       - Show server information
    account        - Show an account
    followers      - List an account's followers (paged)
    following      - List accounts an account follows (paged)
    timeline       - Read a timeline (paged)
    notifications  - Read notifications (paged)
    follow         - Follow an account
    unfollow       - Unfollow an account
    post           - Publish a status
"""

import json
import sys
from pathlib import Path

import click

from . import codec
from .auth import StoredTokenLogin
from .builder import ServerInfo
from .client import Failure, MastodonClient, Response
from .config import CONFIG_FILE, AppConfig, config_exists, load_config, save_config
from .logging_config import setup_logging
from .models import Visibility
from .render import render_entity, render_relationship
from .request import (
    GetAccount,
    GetFollowers,
    GetFollowing,
    GetGroupTimeline,
    GetHomeTimeline,
    GetInstance,
    GetListTimeline,
    GetNotifications,
    GetPublicTimeline,
    GetTagTimeline,
    GetVerifyCredentials,
    Paging,
    PostFollow,
    PostStatus,
    PostUnfollow,
    Request,
    effective_paging,
)
from .session import Session
from .store import JsonFileStore, known_servers, load_token, save_token


class PromptLogin:
    """Ask for a token created under Preferences → Development on the server."""

    def login(self, server: str) -> str:
        click.echo(f"Create an application on https://{server}/settings/applications")
        click.echo("and paste its access token below.")
        return click.prompt("Access token", hide_input=True)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--config", type=click.Path(), default=None, help="Config file path")
@click.pass_context
def main(ctx, verbose, config):
    """Fediverse client — Read and post on Mastodon-compatible servers."""
    setup_logging(debug=verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = Path(config) if config else CONFIG_FILE


def _load(ctx) -> AppConfig:
    config_path = ctx.obj["config_path"]
    if not config_exists(config_path):
        click.echo("Error: No config found. Run 'fedi-client setup' first.", err=True)
        sys.exit(1)
    try:
        return load_config(config_path)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _session(ctx, smart: bool | None = None) -> Session:
    config = _load(ctx)
    store = JsonFileStore(config.store_path)
    server_info = ServerInfo(config.server, load_token(store, config.server))
    client = ctx.with_resource(MastodonClient(timeout=config.timeout))
    return Session(
        client,
        server_info,
        smart_paging=config.smart_paging if smart is None else smart,
    )


def _output_options(func):
    func = click.option(
        "--show-raw",
        is_flag=True,
        help="Print the received JSON next to the decoded entity",
    )(func)
    func = click.option(
        "--show-request", is_flag=True, help="Print the HTTP request that was sent"
    )(func)
    return func


def _paging_options(func):
    func = click.option(
        "--smart/--no-smart",
        default=None,
        help="Advance the cursor from each page (default: from config)",
    )(func)
    func = click.option("--pages", default=1, show_default=True, help="Pages to fetch")(func)
    func = click.option("--limit", type=int, default=None, help="Items per page")(func)
    return func


def _run(session: Session, request: Request, show_request=False, show_raw=False) -> Response:
    result = session.send(request)

    if show_request and result.raw_request is not None:
        raw = result.raw_request
        click.echo(f"{raw.method} {raw.url}")
        for name, value in raw.headers.items():
            if name == "Authorization":
                value = "Bearer ****"
            click.echo(f"{name}: {value}")
        click.echo()

    if isinstance(result, Failure):
        click.echo(f"Error: {result.error.message}", err=True)
        sys.exit(1)

    if show_raw:
        click.echo("Received:")
        click.echo(json.dumps(result.entity.v, indent=2, ensure_ascii=False))
        click.echo("Decoded:")
        click.echo(json.dumps(codec.encode(result.entity), indent=2, ensure_ascii=False))
        click.echo()

    return result


def _run_pages(session, request, pages, show_request, show_raw) -> None:
    for page_num in range(pages):
        result = _run(session, request, show_request, show_raw)
        if not result.entity.items:
            click.echo("No more results.")
            return
        click.echo(render_entity(result.entity))

        if page_num + 1 < pages:
            next_request = session.next_page(request)
            if effective_paging(next_request) == effective_paging(request):
                click.echo("\nNo further pages.")
                return
            click.echo("\n=== next page ===\n")
            request = next_request


@main.command()
@click.pass_context
def setup(ctx):
    """Choose a server and store an access token for it."""
    config_path = ctx.obj["config_path"]

    click.echo("Fediverse client — Setup")
    click.echo("=" * 40)
    server = click.prompt("Server (e.g. mastodon.social)").strip().rstrip("/")
    limit = click.prompt("Items per page", default=20, type=int)

    config = AppConfig(
        server=server, page_limit=limit, store_path=config_path.with_name("store.json")
    )
    if config_exists(config_path):
        config.store_path = load_config(config_path).store_path
    save_config(config, config_path)

    store = JsonFileStore(config.store_path)
    save_token(store, server, PromptLogin().login(server))

    click.echo(f"\nConfig saved to {config_path}")
    click.echo("Run 'fedi-client login' to check the token.")


@main.command()
@click.argument("server", required=False)
@_output_options
@click.pass_context
def login(ctx, server, show_request, show_raw):
    """Check the stored token of SERVER (default: configured server)."""
    config = _load(ctx)
    server = server or config.server
    store = JsonFileStore(config.store_path)
    server_info = StoredTokenLogin(store, PromptLogin()).server_info(server)

    client = ctx.with_resource(MastodonClient(timeout=config.timeout))
    session = Session(client, server_info)
    _run(session, GetVerifyCredentials(), show_request, show_raw)
    click.echo(f"Logged in to {server} as @{session.account.acct}")


@main.command()
@click.pass_context
def servers(ctx):
    """List servers with a stored token."""
    config = _load(ctx)
    names = known_servers(JsonFileStore(config.store_path))
    if not names:
        click.echo("No stored tokens.")
        return
    for name in names:
        marker = "*" if name == config.server else " "
        click.echo(f"{marker} {name}")


@main.command()
@_output_options
@click.pass_context
def instance(ctx, show_request, show_raw):
    """Show information about the configured server."""
    session = _session(ctx)
    result = _run(session, GetInstance(), show_request, show_raw)
    click.echo(render_entity(result.entity))


@main.command()
@click.argument("account_id")
@_output_options
@click.pass_context
def account(ctx, account_id, show_request, show_raw):
    """Show the account ACCOUNT_ID."""
    session = _session(ctx)
    result = _run(session, GetAccount(account_id), show_request, show_raw)
    click.echo(render_entity(result.entity))


@main.command()
@click.argument("account_id")
@_paging_options
@_output_options
@click.pass_context
def followers(ctx, account_id, limit, pages, smart, show_request, show_raw):
    """List followers of ACCOUNT_ID."""
    session = _session(ctx, smart)
    limit = limit or _load(ctx).page_limit
    _run_pages(session, GetFollowers(account_id, limit=limit), pages, show_request, show_raw)


@main.command()
@click.argument("account_id")
@_paging_options
@_output_options
@click.pass_context
def following(ctx, account_id, limit, pages, smart, show_request, show_raw):
    """List accounts ACCOUNT_ID follows."""
    session = _session(ctx, smart)
    limit = limit or _load(ctx).page_limit
    _run_pages(session, GetFollowing(account_id, limit=limit), pages, show_request, show_raw)


def _timeline_request(kind: str, paging: Paging) -> Request:
    if kind == "home":
        return GetHomeTimeline(paging=paging)
    if kind == "public":
        return GetPublicTimeline(paging=paging)
    if kind == "local":
        return GetPublicTimeline(local=True, paging=paging)
    prefix, _, value = kind.partition(":")
    if value and prefix == "tag":
        return GetTagTimeline(value.lstrip("#"), paging=paging)
    if value and prefix == "list":
        return GetListTimeline(value, paging=paging)
    if value and prefix == "group":
        return GetGroupTimeline(value, paging=paging)
    raise click.BadParameter(
        "expected home, public, local, tag:NAME, list:ID or group:ID", param_hint="KIND"
    )


@main.command()
@click.argument("kind", default="home")
@_paging_options
@_output_options
@click.pass_context
def timeline(ctx, kind, limit, pages, smart, show_request, show_raw):
    """Read a timeline: home, public, local, tag:NAME, list:ID or group:ID."""
    paging = Paging(limit=limit or _load(ctx).page_limit)
    request = _timeline_request(kind, paging)
    session = _session(ctx, smart)
    _run_pages(session, request, pages, show_request, show_raw)


@main.command()
@_paging_options
@_output_options
@click.pass_context
def notifications(ctx, limit, pages, smart, show_request, show_raw):
    """Read notifications, newest first."""
    session = _session(ctx, smart)
    paging = Paging(limit=limit or _load(ctx).page_limit)
    _run_pages(session, GetNotifications(paging=paging), pages, show_request, show_raw)


@main.command()
@click.argument("account_id")
@click.option("--reblogs/--no-reblogs", default=True, help="Show their boosts at home")
@_output_options
@click.pass_context
def follow(ctx, account_id, reblogs, show_request, show_raw):
    """Follow ACCOUNT_ID."""
    session = _session(ctx)
    result = _run(session, PostFollow(account_id, reblogs=reblogs), show_request, show_raw)
    click.echo(render_relationship(result.entity))


@main.command()
@click.argument("account_id")
@_output_options
@click.pass_context
def unfollow(ctx, account_id, show_request, show_raw):
    """Unfollow ACCOUNT_ID."""
    session = _session(ctx)
    result = _run(session, PostUnfollow(account_id), show_request, show_raw)
    click.echo(render_relationship(result.entity))


@main.command()
@click.argument("text")
@click.option(
    "--visibility",
    type=click.Choice([v.value for v in Visibility]),
    default=None,
    help="Defaults to the account's preference",
)
@click.option("--cw", "spoiler_text", default=None, help="Content warning")
@click.option("--reply-to", default=None, help="Status ID to reply to")
@_output_options
@click.pass_context
def post(ctx, text, visibility, spoiler_text, reply_to, show_request, show_raw):
    """Publish TEXT as a new status."""
    session = _session(ctx)
    request = PostStatus(
        status=text,
        in_reply_to_id=reply_to,
        spoiler_text=spoiler_text,
        visibility=Visibility(visibility) if visibility else None,
    )
    result = _run(session, request, show_request, show_raw)
    click.echo(render_entity(result.entity))
