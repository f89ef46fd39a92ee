"""Message listing and search operations."""

import logging
from typing import List, Dict, Any

from ..graph import encode_segment
from .folders import normalize_folder
from .messages import summarize
from .service import get_graph_client

logger = logging.getLogger(__name__)

LIST_SELECT = "id,subject,from,receivedDateTime,bodyPreview,isRead,categories"
DEFAULT_MAX_RESULTS = 100
# Graph caps $top for messages at 1000; larger requests are paged
MAX_PAGE_SIZE = 1000
# Lower bound that matches every message, so receivedDateTime can lead a $filter
EPOCH_FILTER_DATE = "1900-01-01T00:00:00Z"


def list_messages(
    folder: str = "inbox",
    unread_only: bool = False,
    max_results: int = DEFAULT_MAX_RESULTS,
    client=None,
) -> List[Dict[str, Any]]:
    """
    List messages in a folder, newest first.

    Args:
        folder: Folder alias (inbox, sent, drafts, archive, trash, spam), well-known name or ID
        unread_only: Only return messages with isRead false
        max_results: Maximum number of messages to return
        client: Optional GraphClient

    Returns:
        List of message summary dicts: id, from, subject, date, snippet, isRead, categories
    """
    client = get_graph_client(client)
    folder_name = normalize_folder(folder)
    logger.debug(f"Listing up to {max_results} messages in '{folder_name}' (unread_only={unread_only})")

    params = {
        "$top": min(max_results, MAX_PAGE_SIZE),
        "$select": LIST_SELECT,
        "$orderby": "receivedDateTime desc",
    }
    if unread_only:
        # Graph requires the $orderby property to lead the $filter
        params["$filter"] = f"receivedDateTime ge {EPOCH_FILTER_DATE} and isRead eq false"

    messages = client.paginate(
        f"/me/mailFolders/{encode_segment(folder_name)}/messages",
        params=params,
        limit=max_results,
    )
    logger.debug(f"Found {len(messages)} messages")
    return [summarize(m) for m in messages]


def search_messages(
    query: str,
    max_results: int = DEFAULT_MAX_RESULTS,
    client=None,
) -> List[Dict[str, Any]]:
    """
    Search messages across all folders.

    Uses Graph's $search (KQL), e.g. ``from:alice`` or ``invoice``. Results
    are ranked by relevance; $search cannot be combined with $orderby.

    Args:
        query: Search query
        max_results: Maximum number of messages to return
        client: Optional GraphClient

    Returns:
        List of message summary dicts
    """
    client = get_graph_client(client)
    logger.debug(f"Searching messages with query: '{query}'")

    # The query is sent as a quoted string; embedded quotes would end it early
    sanitized = query.replace('"', '')
    params = {
        "$search": f'"{sanitized}"',
        "$top": min(max_results, MAX_PAGE_SIZE),
        "$select": LIST_SELECT,
    }
    messages = client.paginate(
        "/me/messages",
        params=params,
        limit=max_results,
        headers={"ConsistencyLevel": "eventual"},
    )
    logger.debug(f"Found {len(messages)} messages")
    return [summarize(m) for m in messages]
