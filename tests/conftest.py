"""Shared fixtures for statement builder tests."""

import re

import pytest

from stmt_builder import StatementBuilder

TOKEN_RX = re.compile(r':[a-z]{4,12}\b')


@pytest.fixture
def builder() -> StatementBuilder:
    """A fresh builder with the default dialect."""
    return StatementBuilder('test')


@pytest.fixture
def mask_tokens():
    """Replace generated tokens so two builds can be compared structurally."""
    def _mask(sql: str) -> str:
        return TOKEN_RX.sub(':?', sql)
    return _mask
