"""outlook-cli - Microsoft Graph Mail from the command line.

Namespace package containing:
- outlook_cli.sdk: Core SDK for programmatic access to Graph mail APIs
- outlook_cli.cli: Command-line interface (the ``outlook`` command)
"""

__version__ = "0.3.0"
