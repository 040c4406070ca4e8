import json
import os
import sys

import pytest
from unittest.mock import MagicMock

# Add the project root to sys.path to allow importing streamed
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from streamed.utils.settings import reload_settings

FIXTURES_DIR = os.path.join(os.path.dirname(__file__), "fixtures")


def load_fixture(name):
    with open(os.path.join(FIXTURES_DIR, name), "r", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    for key in list(os.environ):
        if key.startswith("STREAMED_"):
            monkeypatch.delenv(key)
    reload_settings()
    yield
    reload_settings()


@pytest.fixture
def mock_session():
    return MagicMock()


@pytest.fixture
def torbox_mylist():
    return load_fixture("torbox_mylist.json")


@pytest.fixture
def torrentio_streams():
    return load_fixture("torrentio_streams.json")


@pytest.fixture
def zilean_response():
    return load_fixture("zilean_response.json")
