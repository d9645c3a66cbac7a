"""Pytest shared fixtures for the directory client tests."""
import pathlib
import sys

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
import requests

from azure_directory import DirectoryClient
from tests.stubs import StubSession, token_response


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def _block_network(monkeypatch):
    """Fail any test that reaches a real HTTP endpoint."""

    def _refuse(*args, **kwargs):
        raise RuntimeError(f"Unexpected network access in tests: {args} {kwargs}")

    monkeypatch.setattr(requests, "get", _refuse)
    monkeypatch.setattr(requests, "post", _refuse)
    monkeypatch.setattr(requests.Session, "request", _refuse)


# ─────────────────────────────────────────────────────────────────────────────
# Client factory
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture()
def make_client():
    """Build a DirectoryClient whose API session replays ``responses``.

    Returns (client, api_session).
    """

    def _make(*responses):
        auth_session = StubSession([token_response()])
        api_session = StubSession(responses)
        client = DirectoryClient("id", "secret", "tenant", auth_session=auth_session, http_session=api_session)
        return client, api_session

    return _make
