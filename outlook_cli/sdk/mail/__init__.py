"""Outlook mail operations for the outlook-cli SDK.

Provides functions for listing, reading, moving and categorizing messages
through Microsoft Graph.

Example usage:
    from outlook_cli.sdk import mail

    # List the newest unread inbox messages
    messages = mail.list_messages("inbox", unread_only=True, max_results=20)

    # Read a specific message
    message = mail.read("message_id_here")

    # Categorize and archive it
    mail.add_category("message_id_here", "Receipts")
    mail.archive("message_id_here")
"""

from .service import get_graph_client
from .folders import normalize_folder, list_folders, get_folder
from .messages import (
    format_sender, format_recipients, get_header,
    parse_unsubscribe_header, get_unsubscribe_url,
)
from .search import list_messages, search_messages
from .read import get_message, read_message, mark_read, mark_unread
from .move import move_message, archive, mark_spam, unspam, trash
from .label import list_categories, update_categories, add_category, remove_category
from .unsubscribe import find_unsubscribe_url, unsubscribe

__all__ = [
    "get_graph_client",
    "normalize_folder",
    "list_folders",
    "get_folder",
    "format_sender",
    "format_recipients",
    "get_header",
    "parse_unsubscribe_header",
    "get_unsubscribe_url",
    "list_messages",
    "search_messages",
    "get_message",
    "read_message",
    "mark_read",
    "mark_unread",
    "move_message",
    "archive",
    "mark_spam",
    "unspam",
    "trash",
    "list_categories",
    "update_categories",
    "add_category",
    "remove_category",
    "find_unsubscribe_url",
    "unsubscribe",
]

# Convenience aliases
search = search_messages
read = read_message
