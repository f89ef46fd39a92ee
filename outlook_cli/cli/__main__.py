"""outlook CLI - Command-line interface for Microsoft Graph Mail."""

import logging
import os

import click
from dotenv import load_dotenv

from outlook_cli import __version__

from .config_commands import config_cmd, login_cmd, logout_cmd, status_cmd
from .mail_commands import MAIL_COMMANDS


# Configure logging at the application level
if not logging.root.handlers:
    LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.WARNING),
                        format='%(asctime)s - %(levelname)s - %(message)s')
# Suppress noisy INFO logs from msal and urllib3
logging.getLogger('msal').setLevel(logging.WARNING)
logging.getLogger('urllib3').setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


@click.group()
@click.version_option(__version__, prog_name="outlook")
@click.option('--json', 'as_json', is_flag=True, help='Output as JSON.')
@click.pass_context
def outlook(ctx, as_json):
    """CLI tool to access Microsoft Graph Mail API.

    Run 'outlook config <client-id>' once, then 'outlook login'.
    """
    ctx.ensure_object(dict)
    ctx.obj["json"] = as_json


outlook.add_command(config_cmd)
outlook.add_command(login_cmd)
outlook.add_command(logout_cmd)
outlook.add_command(status_cmd)
for command in MAIL_COMMANDS:
    outlook.add_command(command)


def main():
    """Entry point for the CLI."""
    load_dotenv()
    outlook(obj={})


if __name__ == "__main__":
    main()
