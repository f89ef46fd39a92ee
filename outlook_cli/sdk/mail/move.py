"""Move operations: archive, junk, inbox and Deleted Items."""

import logging
from typing import Dict, Any

from ..graph import encode_segment
from .folders import normalize_folder
from .service import get_graph_client

logger = logging.getLogger(__name__)


def move_message(message_id: str, destination: str, client=None) -> Dict[str, Any]:
    """
    Move a message to another folder.

    Args:
        message_id: The Graph message ID
        destination: Folder alias, well-known name or folder ID
        client: Optional GraphClient

    Returns:
        The moved message resource. Graph assigns the moved copy a new ID.
    """
    client = get_graph_client(client)
    destination_id = normalize_folder(destination)
    moved = client.post(
        f"/me/messages/{encode_segment(message_id)}/move",
        json={"destinationId": destination_id},
    )
    logger.debug(f"Moved message {message_id} to '{destination_id}' (new ID: {moved.get('id')})")
    return moved


def archive(message_id: str, client=None) -> Dict[str, Any]:
    """Move a message to the Archive folder."""
    return move_message(message_id, "archive", client=client)


def mark_spam(message_id: str, client=None) -> Dict[str, Any]:
    """Move a message to Junk Email."""
    return move_message(message_id, "junkemail", client=client)


def unspam(message_id: str, client=None) -> Dict[str, Any]:
    """Move a message back to the Inbox."""
    return move_message(message_id, "inbox", client=client)


def trash(message_id: str, client=None) -> Dict[str, Any]:
    """Move a message to Deleted Items (recoverable)."""
    return move_message(message_id, "deleteditems", client=client)
