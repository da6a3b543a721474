from __future__ import annotations

from pathlib import Path

import pytest
import requests

from briefpdf import config
from briefpdf.models import reset_engine


@pytest.fixture(autouse=True)
def no_network(monkeypatch):
    """Logo fetches never leave the machine during tests."""

    def blocked(*args, **kwargs):  # noqa: ARG001 - test helper
        raise requests.ConnectionError("network disabled in tests")

    monkeypatch.setattr("briefpdf.layout.header.requests.get", blocked)


@pytest.fixture
def out_dir(tmp_path: Path):
    original = config.OUT_DIR
    target = tmp_path / "out"
    config.set_out_dir(target)
    reset_engine()
    yield target
    config.set_out_dir(original)
    reset_engine()
