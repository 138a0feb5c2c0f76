from __future__ import annotations

import logging
from typing import Iterator

import pytest

from designsync.models import TokenCollection
from designsync.normalization import Normalizer
from tests._fixtures.tokens import raw_collection


@pytest.fixture(autouse=True)
def _reset_designsync_logger() -> Iterator[None]:
    """Undo CLI logging setup so caplog keeps seeing designsync records."""
    yield
    logger = logging.getLogger("designsync")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def raw_tokens() -> TokenCollection:
    """Provide a freshly built raw collection for each test."""
    return raw_collection()


@pytest.fixture
def normalized_tokens(raw_tokens: TokenCollection) -> TokenCollection:
    return Normalizer().normalize(raw_tokens)
