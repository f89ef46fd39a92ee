"""Message read operations."""

import logging
from typing import Dict, Any

from ..graph import encode_segment
from .messages import detail
from .service import get_graph_client

logger = logging.getLogger(__name__)

READ_SELECT = (
    "id,subject,from,toRecipients,body,bodyPreview,receivedDateTime,"
    "isRead,categories,internetMessageHeaders,parentFolderId"
)


def get_message(message_id: str, client=None) -> Dict[str, Any]:
    """
    Retrieve the raw Graph resource for a message, including body and headers.

    Args:
        message_id: The Graph message ID
        client: Optional GraphClient

    Returns:
        Message resource dict as returned by Graph
    """
    client = get_graph_client(client)
    logger.debug(f"Retrieving message with ID: {message_id}")
    return client.get(
        f"/me/messages/{encode_segment(message_id)}",
        params={"$select": READ_SELECT},
    )


def read_message(message_id: str, client=None) -> Dict[str, Any]:
    """
    Retrieve a message for display.

    Returns:
        Dict containing id, from, to, subject, date, body, snippet, isRead
        and categories
    """
    msg = get_message(message_id, client=client)
    logger.debug(f"Successfully retrieved message: '{msg.get('subject')}'")
    return detail(msg)


def _set_read_flag(message_id: str, is_read: bool, client=None):
    client = get_graph_client(client)
    client.patch(f"/me/messages/{encode_segment(message_id)}", json={"isRead": is_read})
    logger.debug(f"Set isRead={is_read} on message {message_id}")


def mark_read(message_id: str, client=None):
    """Mark a message as read."""
    _set_read_flag(message_id, True, client=client)


def mark_unread(message_id: str, client=None):
    """Mark a message as unread."""
    _set_read_flag(message_id, False, client=client)
