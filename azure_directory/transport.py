"""Low-level HTTP transport for the Microsoft Graph API.

Handles the client-credentials token exchange and authenticated HTTP
operations. Every response with status >= 400 is turned into a
GraphAPIError; connectivity problems raised by ``requests`` propagate as-is.
"""
from __future__ import annotations
import logging
from typing import Any, Dict, Optional
from urllib.parse import quote, urlencode, urljoin

import requests

from .exceptions import GraphAPIError

logger = logging.getLogger(__name__)

GRAPH_BASE_URI = "https://graph.microsoft.com/beta/"
LOGIN_AUTHORITY = "https://login.microsoftonline.com"
GRAPH_SCOPE = "https://graph.microsoft.com/.default"
REQUEST_TIMEOUT = 30


def acquire_token(
    client_id: str,
    client_secret: str,
    tenant: str,
    session: Optional[requests.Session] = None,
    authority: str = LOGIN_AUTHORITY,
    scope: str = GRAPH_SCOPE,
    timeout: float = REQUEST_TIMEOUT,
) -> str:
    """Fetch an application token using the client credentials flow.

    Args:
        client_id: Application (client) ID
        client_secret: Application secret
        tenant: Tenant ID or domain
        session: Pre-configured session for the token request

    Returns:
        Access token

    Raises:
        GraphAPIError: If the identity endpoint rejects the request
    """
    url = f"{authority.rstrip('/')}/{tenant}/oauth2/v2.0/token"
    data = {
        "client_id": client_id,
        "client_secret": client_secret,
        "scope": scope,
        "grant_type": "client_credentials",
    }
    post = session.post if session is not None else requests.post
    resp = post(url, data=data, timeout=timeout)
    if resp.status_code >= 400:
        raise GraphAPIError(resp.status_code, resp.text, url)
    token = resp.json()["access_token"]
    logger.info("Acquired Graph access token for client %s", client_id)
    return str(token)


def build_url(base_uri: str, path: str, params: Optional[Dict[str, Any]] = None) -> str:
    """Resolve ``path`` against the base URI and append an encoded query string.

    Resolution follows RFC 3986: absolute URLs (server-supplied next links)
    are kept verbatim, root-relative paths replace the base path, and
    anything else is appended to the base URI. Query values are
    percent-encoded with ``%20`` for spaces.
    """
    url = urljoin(base_uri, path)
    if params:
        # Encoded here rather than via requests' params=, which writes spaces as "+"
        separator = "&" if "?" in url else "?"
        url = f"{url}{separator}{urlencode(params, quote_via=quote)}"
    return url


class GraphTransport:
    """Authenticated HTTP client for the Graph API.

    Usage:
        transport = GraphTransport(token)
        response = transport.get("groups/abc")
    """

    def __init__(
        self,
        token: str,
        session: Optional[requests.Session] = None,
        base_uri: str = GRAPH_BASE_URI,
        timeout: float = REQUEST_TIMEOUT,
    ):
        self.base_uri = base_uri if base_uri.endswith("/") else f"{base_uri}/"
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.timeout = timeout
        self._token = token

    def __repr__(self) -> str:
        return f"GraphTransport(base_uri={self.base_uri!r})"

    def __enter__(self) -> "GraphTransport":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Close the session if this transport created it."""
        if self._owns_session:
            self.session.close()

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/json",
            "Authorization": f"Bearer {self._token}",
        }

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        """Execute a GET request.

        Raises:
            GraphAPIError: On HTTP error
        """
        return self._request("GET", build_url(self.base_uri, path, params))

    def post(self, path: str, json: Optional[Dict[str, Any]] = None) -> requests.Response:
        """Execute a POST request with a JSON body.

        Raises:
            GraphAPIError: On HTTP error
        """
        return self._request("POST", build_url(self.base_uri, path), json=json)

    def patch(self, path: str, json: Optional[Dict[str, Any]] = None) -> requests.Response:
        """Execute a PATCH request with a JSON body.

        Raises:
            GraphAPIError: On HTTP error
        """
        return self._request("PATCH", build_url(self.base_uri, path), json=json)

    def delete(self, path: str) -> requests.Response:
        """Execute a DELETE request.

        Raises:
            GraphAPIError: On HTTP error
        """
        return self._request("DELETE", build_url(self.base_uri, path))

    def _request(self, method: str, url: str, json: Optional[Dict[str, Any]] = None) -> requests.Response:
        logger.debug("%s %s", method, url)
        kwargs: Dict[str, Any] = {"headers": self.headers, "timeout": self.timeout}
        if json is not None:
            kwargs["json"] = json
        resp = self.session.request(method, url, **kwargs)
        self._handle_error(resp, url)
        return resp

    def _handle_error(self, resp: requests.Response, url: str) -> None:
        if resp.status_code >= 400:
            raise GraphAPIError(resp.status_code, resp.text, url)
