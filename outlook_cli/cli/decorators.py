"""CLI decorators for login checks, error reporting and JSON output.

Also contains shared display helpers used by several commands.
"""

import hashlib
import logging
import sys
from functools import wraps

import click

from outlook_cli.sdk.auth import get_login_status
from outlook_cli.sdk.exceptions import OutlookError

logger = logging.getLogger(__name__)


# =============================================================================
# Shared Display Helpers
# =============================================================================

def mask_secret(secret: str) -> str:
    """Describe a secret without revealing it: a short hash prefix."""
    if not secret:
        return "NOT SET"
    secret_hash = hashlib.sha256(secret.encode()).hexdigest()[:8]
    return f"configured (hash: {secret_hash}...)"


def show_login_guidance(status: dict):
    """Show the next step based on the login status dict."""
    if not status["configured"]:
        click.echo("\nTo get started:")
        click.echo("  outlook config <client-id>    # From your Azure App Registration")
        click.echo("  outlook login")
    elif not status["logged_in"]:
        click.echo("\nTo fix:")
        click.echo("  outlook login")
    else:
        click.secho("Ready to use.", fg="green")


def fail(message: str):
    """Print an error in red and exit with status 1."""
    click.secho(f"Error: {message}", fg="red", err=True)
    sys.exit(1)


# =============================================================================
# Decorators
# =============================================================================

def require_login(f):
    """
    Ensure client credentials are configured and a login is cached.

    This is a local check only; an expired refresh token is reported when
    the first Graph call fails.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        status = get_login_status()
        if not status["configured"]:
            click.secho("Error: Not configured. Run 'outlook config <client-id>' first", fg="red", err=True)
            sys.exit(1)
        if not status["logged_in"]:
            click.secho("Error: Not logged in. Run 'outlook login' first", fg="red", err=True)
            sys.exit(1)
        return f(*args, **kwargs)
    return decorated_function


def report_errors(f):
    """
    Turn SDK errors into a red message and exit code 1.

    Known outlook-cli errors are printed as-is; anything else is logged
    with its traceback.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except OutlookError as e:
            logger.debug(f"{f.__name__} failed: {e}", exc_info=True)
            fail(str(e))
        except Exception as e:
            logger.critical(f"An error occurred during {f.__name__}: {e}", exc_info=True)
            sys.exit(1)
    return decorated_function


def json_output(f):
    """
    Add a per-command --json flag, merged with the global ``outlook --json``.

    The wrapped command receives ``as_json``.
    """
    @wraps(f)
    def decorated_function(*args, as_json=False, **kwargs):
        root = click.get_current_context().find_root()
        global_json = bool((root.obj or {}).get("json"))
        return f(*args, as_json=as_json or global_json, **kwargs)
    return click.option('--json', 'as_json', is_flag=True, help='Output as JSON.')(decorated_function)
