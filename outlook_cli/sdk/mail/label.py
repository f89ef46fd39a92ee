"""Category operations (Outlook's equivalent of labels)."""

import logging
from typing import Dict, Any, List

from ..graph import encode_segment
from .read import get_message
from .service import get_graph_client

logger = logging.getLogger(__name__)


def list_categories(client=None) -> List[Dict[str, Any]]:
    """
    List the mailbox's master categories.

    Returns:
        List of category dicts with 'id', 'displayName', 'color' fields
    """
    client = get_graph_client(client)
    result = client.get("/me/outlook/masterCategories")
    return result.get("value", [])


def update_categories(
    message_id: str,
    categories: List[str],
    client=None,
) -> List[str]:
    """
    Replace the categories of a message.

    Args:
        message_id: The Graph message ID
        categories: Full list of category names to set
        client: Optional GraphClient

    Returns:
        The category list that was set
    """
    client = get_graph_client(client)
    client.patch(
        f"/me/messages/{encode_segment(message_id)}",
        json={"categories": categories},
    )
    logger.debug(f"Set categories {categories} on message {message_id}")
    return categories


def _current_categories(message_id: str, client) -> List[str]:
    return list(get_message(message_id, client=client).get("categories") or [])


def add_category(
    message_id: str,
    category: str,
    client=None,
) -> List[str]:
    """
    Add a category to a message.

    Category names compare case-insensitively; if the message already has
    the category no update is sent.

    Returns:
        The message's categories after the change
    """
    client = get_graph_client(client)
    categories = _current_categories(message_id, client)

    if any(c.lower() == category.lower() for c in categories):
        logger.debug(f"Message {message_id} already has category '{category}'")
        return categories

    categories.append(category)
    return update_categories(message_id, categories, client=client)


def remove_category(
    message_id: str,
    category: str,
    client=None,
) -> List[str]:
    """
    Remove a category (case-insensitive) from a message.

    Returns:
        The message's categories after the change
    """
    client = get_graph_client(client)
    categories = [
        c for c in _current_categories(message_id, client)
        if c.lower() != category.lower()
    ]
    return update_categories(message_id, categories, client=client)
