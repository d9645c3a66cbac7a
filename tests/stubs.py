"""HTTP stubs shared by the test suite."""
import json
from typing import Optional

GROUP_PAYLOAD = {
    "id": "some-id",
    "displayName": "some-display-name",
    "description": "some description",
    "mailNickname": "mail",
}

USER_PAYLOAD = {
    "id": "user-id",
    "displayName": "Some User",
    "mail": "user@example.com",
    "accountEnabled": True,
}


class StubResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code: int = 200, payload: Optional[object] = None, url: str = ""):
        self.status_code = status_code
        self._payload = payload
        self.text = json.dumps(payload) if payload is not None else ""
        self.url = url

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload


class StubSession:
    """Records every request and replays queued responses in order.

    A queued exception instance is raised instead of returned.
    """

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.history = []

    def _next(self, method, url, **kwargs):
        self.history.append({"method": method, "url": url, **kwargs})
        if not self.responses:
            raise AssertionError(f"Unexpected request: {method} {url}")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        response.url = response.url or url
        return response

    def request(self, method, url, **kwargs):
        return self._next(method, url, **kwargs)

    def post(self, url, **kwargs):
        return self._next("POST", url, **kwargs)


def token_response():
    return StubResponse(200, {"access_token": "some secret token", "token_type": "Bearer"})


def page(values, next_link=None):
    body = {"value": values}
    if next_link is not None:
        body["@odata.nextLink"] = next_link
    return StubResponse(200, body)
