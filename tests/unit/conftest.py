"""
Unit test configuration.

Every unit test gets its own config directory so that nothing touches the
user's real ~/.config/outlook-cli, and environment overrides are cleared.
"""

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch) -> Path:
    """Point outlook-cli at an empty, temporary config directory."""
    config_dir = tmp_path / "outlook-cli"
    monkeypatch.setenv("OUTLOOK_CLI_CONFIG_DIR", str(config_dir))
    for var in ("OUTLOOK_CLI_CONFIG_FILE", "OUTLOOK_CLIENT_ID",
                "OUTLOOK_CLIENT_SECRET", "OUTLOOK_TENANT"):
        monkeypatch.delenv(var, raising=False)
    return config_dir


@pytest.fixture
def configured(isolated_config):
    """Store a confidential client registration in the isolated config."""
    from outlook_cli.sdk.config import save_client_credentials
    save_client_credentials("test-client-id", "test-secret", "common")
    return isolated_config


@pytest.fixture
def graph():
    """A stand-in GraphClient for SDK mail functions."""
    client = MagicMock()
    client.get.return_value = {}
    client.post.return_value = {}
    client.patch.return_value = {}
    client.paginate.return_value = []
    return client


def _make_response(status_code: int = 200, body=None, headers: dict = None) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    if headers:
        response.headers.update(headers)
    if body is None:
        response._content = b""
    elif isinstance(body, str):
        response._content = body.encode("utf-8")
    else:
        response._content = json.dumps(body).encode("utf-8")
    return response


@pytest.fixture
def make_response():
    """Factory for real requests.Response objects with a JSON (or raw string) body."""
    return _make_response
