"""outlook-cli SDK - Core library for Microsoft Graph mail access.

This SDK owns everything that talks to Microsoft: the OAuth login and token
cache, the Graph HTTP client, and the mail operations. It is used by the
``outlook`` CLI and can be used directly by scripts.

Example usage:
    from outlook_cli.sdk import mail

    # List unread inbox messages
    for msg in mail.list_messages("inbox", unread_only=True):
        print(f"{msg['id']}: {msg['subject']}")

    # Tag a message
    mail.add_category("message_id_here", "Receipts")
"""

from . import config
from . import auth
from . import mail

__all__ = ["config", "auth", "mail"]
