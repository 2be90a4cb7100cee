from __future__ import annotations

import logging

import pytest

from econcal.config import configure_logging


@pytest.mark.parametrize(("verbose", "level"), [(False, logging.WARNING), (True, logging.DEBUG)])
def test_configure_logging_sets_library_levels(verbose: bool, level: int) -> None:  # noqa: FBT001
    configure_logging(verbose=verbose)

    assert logging.getLogger("httpx").level == level
    assert logging.getLogger("sqlalchemy.engine").level == level
