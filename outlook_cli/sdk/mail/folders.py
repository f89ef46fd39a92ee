"""Mail folder operations."""

import logging
from typing import Dict, Any, List

from ..graph import encode_segment
from .service import get_graph_client

logger = logging.getLogger(__name__)

# Aliases accepted on the command line, mapped to Graph well-known folder names
FOLDER_ALIASES = {
    "inbox": "inbox",
    "sent": "sentitems",
    "sentitems": "sentitems",
    "drafts": "drafts",
    "draft": "drafts",
    "trash": "deleteditems",
    "deleted": "deleteditems",
    "deleteditems": "deleteditems",
    "spam": "junkemail",
    "junk": "junkemail",
    "junkemail": "junkemail",
    "archive": "archive",
    "outbox": "outbox",
}


def normalize_folder(folder: str) -> str:
    """
    Map a folder alias to its well-known Graph name.

    Matching is case-insensitive. Anything that is not an alias is assumed
    to be a folder ID and returned unchanged (IDs are case-sensitive).
    """
    return FOLDER_ALIASES.get(folder.lower(), folder)


def list_folders(client=None) -> List[Dict[str, Any]]:
    """
    List the top-level mail folders.

    Returns:
        List of folder dicts with 'id', 'displayName', 'parentFolderId',
        'totalItemCount' and 'unreadItemCount'
    """
    client = get_graph_client(client)
    result = client.get("/me/mailFolders", params={"$top": 100})
    folders = result.get("value", [])
    logger.debug(f"Found {len(folders)} mail folders")
    return folders


def get_folder(name_or_id: str, client=None) -> Dict[str, Any]:
    """Get a folder by alias, well-known name or ID."""
    client = get_graph_client(client)
    folder = normalize_folder(name_or_id)
    return client.get(f"/me/mailFolders/{encode_segment(folder)}")
