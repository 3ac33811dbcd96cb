"""Shared fixtures."""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest


@pytest.fixture(autouse=True)
def _reset_semcp_logger() -> Iterator[None]:
    """Undo CLI logging setup so caplog sees records in every test."""
    yield
    root = logging.getLogger("semcp")
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(logging.NOTSET)
    root.propagate = True
