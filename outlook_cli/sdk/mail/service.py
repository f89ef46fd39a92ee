"""Graph client factory for the mail SDK."""

import logging
from typing import Optional

from ..graph import GraphClient

logger = logging.getLogger(__name__)


def get_graph_client(client: Optional[GraphClient] = None) -> GraphClient:
    """
    Return ``client`` if given, else a new client authenticated from the token cache.

    Every mail function accepts an optional client so that callers issuing
    several requests (and tests) can share one session.
    """
    if client is not None:
        return client
    logger.debug("Building Graph client using cached credentials")
    return GraphClient()
