"""Pytest fixtures for tinify_client tests."""

import io
import os
from unittest.mock import MagicMock

import pytest
from dotenv import load_dotenv
from PIL import Image

from tinify_client import TinifyClient

# Live tests read TINIFY_KEY from a local .env file
load_dotenv()


@pytest.fixture
def make_response():
    def _make(status_code=201, content=b"", headers=None):
        response = MagicMock()
        response.status_code = status_code
        response.content = content
        response.headers = headers or {}
        return response

    return _make


@pytest.fixture
def client():
    return TinifyClient("test_key")


@pytest.fixture
def png_bytes():
    buf = io.BytesIO()
    Image.new("RGB", (40, 20), "red").save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def live_key():
    key = os.getenv("TINIFY_KEY")
    if not key:
        pytest.skip("TINIFY_KEY not set")
    return key
