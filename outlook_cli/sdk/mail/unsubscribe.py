"""Unsubscribe support via the List-Unsubscribe header."""

import logging
import webbrowser
from typing import Callable

from ..exceptions import NoUnsubscribeLinkError
from .messages import get_unsubscribe_url
from .read import get_message

logger = logging.getLogger(__name__)


def find_unsubscribe_url(message_id: str, client=None) -> str:
    """
    Return the unsubscribe target of a message.

    Raises:
        NoUnsubscribeLinkError: If the message has no List-Unsubscribe target
    """
    url = get_unsubscribe_url(get_message(message_id, client=client))
    if not url:
        raise NoUnsubscribeLinkError()
    return url


def unsubscribe(
    message_id: str,
    open_link: Callable[[str], bool] = webbrowser.open,
    client=None,
) -> str:
    """
    Open the unsubscribe link of a message.

    ``mailto:`` targets are handed to the system mail handler.

    Returns:
        The URL that was opened
    """
    url = find_unsubscribe_url(message_id, client=client)
    logger.debug(f"Opening unsubscribe link for {message_id}: {url}")
    open_link(url)
    return url
