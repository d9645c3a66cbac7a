"""Draining of server-driven (``@odata.nextLink``) pagination."""
from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional, Sequence

from .exceptions import GraphAPIError, RemoteOperationError
from .transport import GraphTransport

logger = logging.getLogger(__name__)

PAGE_SIZE = 100


def drain(transport: GraphTransport, url: str, fields: Optional[Sequence[str]] = None) -> List[Dict[str, Any]]:
    """Fetch every page of a collection and return the concatenated ``value`` arrays.

    ``$select`` and ``$top`` are sent with the first request only; each
    following request uses the server's next link, resolved against the
    transport's base URI when it is relative.

    Args:
        transport: Authenticated transport
        url: Collection path relative to the API base
        fields: Fields to select, or None for the server default

    Returns:
        Raw records in page order

    Raises:
        RemoteOperationError: If any page is rejected; partial results are discarded
    """
    entries: List[Dict[str, Any]] = []
    params: Dict[str, Any] = {"$top": PAGE_SIZE}
    if fields:
        params = {"$select": ",".join(fields), **params}

    next_url: Optional[str] = url
    page = 0
    while next_url is not None:
        try:
            resp = transport.get(next_url, params)
        except GraphAPIError as exc:
            raise RemoteOperationError("Unable to fetch paginated data", exc.status_code) from exc

        body = resp.json()
        values = body.get("value") or []
        page += 1
        logger.debug("Fetched page %d of %s (%d items)", page, url, len(values))
        entries.extend(values)
        next_url = body.get("@odata.nextLink")
        params = {}  # Only needed for the first request

    return entries
