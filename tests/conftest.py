"""Shared pytest fixtures for the full wikistyle test suite."""

from __future__ import annotations

from collections.abc import Iterator
import os

from loguru import logger
import pytest


@pytest.fixture(autouse=True)
def _isolate_wikistyle_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop `WIKISTYLE_*` variables so env-based config starts from defaults."""

    for name in list(os.environ):
        if name.startswith("WIKISTYLE_"):
            monkeypatch.delenv(name)


@pytest.fixture(autouse=True)
def _reset_loguru_sinks() -> Iterator[None]:
    """Remove log sinks added by a test so later tests never write to closed streams."""

    yield
    logger.remove()
