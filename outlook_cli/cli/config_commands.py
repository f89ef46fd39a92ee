"""CLI commands for client credentials, login and status."""

import json
import logging
import sys
import webbrowser

import click

from outlook_cli.sdk import auth as sdk_auth
from outlook_cli.sdk.config import get_config_dir, get_client_settings, save_client_credentials

from .decorators import fail, json_output, mask_secret, report_errors, show_login_guidance

logger = logging.getLogger(__name__)


@click.command("config")
@click.argument("client_id")
@click.argument("client_secret", required=False)
@click.option("--tenant", default="common", show_default=True,
              help="Directory (tenant) ID; 'common' accepts work and personal accounts.")
@click.option("--public", is_flag=True,
              help="Public client registration: do not use a client secret.")
def config_cmd(client_id, client_secret, tenant, public):
    """Set OAuth client credentials (from Azure App Registration).

    CLIENT_ID is the Application (client) ID. CLIENT_SECRET is prompted for
    (hidden) when omitted, unless --public is given.
    """
    if public:
        if client_secret:
            fail("--public cannot be combined with a client secret")
        client_secret = None
    elif client_secret is None:
        client_secret = click.prompt("Client Secret", hide_input=True,
                                     default="", show_default=False)
        if not client_secret:
            fail("Client secret cannot be empty")

    save_client_credentials(client_id, client_secret, tenant)
    click.echo(f"Credentials saved to {get_config_dir()}")
    click.echo("\nNext step:")
    click.echo("  outlook login")


@click.command("login")
@report_errors
def login_cmd():
    """Authenticate with Microsoft (opens browser)."""
    if not get_client_settings().get("client_id"):
        fail("Not configured. Run 'outlook config <client-id>' first")

    result = sdk_auth.login(open_browser=webbrowser.open)
    click.secho("Login successful! Tokens saved.", fg="green")
    if result.get("username"):
        click.echo(f"  Account: {result['username']}")


@click.command("logout")
def logout_cmd():
    """Remove the stored tokens."""
    if sdk_auth.logout():
        click.echo("Logged out.")
    else:
        click.echo("Not logged in.")


@click.command("status")
@json_output
def status_cmd(as_json):
    """Show configuration and login status."""
    status = sdk_auth.get_login_status()
    settings = get_client_settings()

    if as_json:
        click.echo(json.dumps(dict(status, client_id=settings.get("client_id")), indent=2))
        sys.exit(0 if status["logged_in"] else 1)

    click.echo("\n" + "=" * 50)
    click.echo("outlook Status")
    click.echo("=" * 50)

    click.echo(f"\nConfig directory: {get_config_dir()}")
    if status["configured"]:
        click.echo(f"  Client ID:     {settings['client_id']}")
        click.echo(f"  Client Type:   {status['client_type']}")
        if status["client_type"] == "confidential":
            click.echo(f"  Client Secret: {mask_secret(settings.get('client_secret'))}")
        click.echo(f"  Tenant:        {status['tenant']}")
    else:
        click.secho("  No client credentials configured.", fg="yellow")

    click.echo("\nLogin:")
    if status["logged_in"]:
        click.secho(f"  Logged in as {status['username'] or 'unknown account'}", fg="green")
    else:
        click.secho("  Not logged in.", fg="yellow")
    click.echo(f"  Token cache: {status['token_cache']}")

    click.echo("\n" + "=" * 50)
    show_login_guidance(status)
    if not status["logged_in"]:
        sys.exit(1)
