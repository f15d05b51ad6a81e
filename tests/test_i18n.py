"""Tests for i18n lookups"""
import pytest

from storefront.errors import (
    ERROR_ADD_FAILED,
    ERROR_REMOVE_FAILED,
    ERROR_STOCK_INSUFFICIENT,
    ERROR_UPDATE_FAILED,
)
from storefront.i18n import detect_language, get_text, reload_translations


@pytest.fixture(autouse=True)
def _fresh_cache():
    reload_translations()
    yield
    reload_translations()


@pytest.mark.parametrize(
    "key,expected",
    [
        (ERROR_STOCK_INSUFFICIENT, "Requested quantity exceeds available stock"),
        (ERROR_ADD_FAILED, "Failed to add product"),
        (ERROR_REMOVE_FAILED, "Failed to remove product"),
        (ERROR_UPDATE_FAILED, "Failed to change product quantity"),
    ],
)
def test_english_messages(key, expected):
    assert get_text(key, "en") == expected


def test_portuguese_messages():
    assert get_text(ERROR_STOCK_INSUFFICIENT, "pt") == "Quantidade solicitada fora de estoque"
    assert get_text(ERROR_ADD_FAILED, "pt-BR") == "Erro na adição do produto"


def test_unknown_language_falls_back_to_english():
    assert get_text(ERROR_ADD_FAILED, "xx") == "Failed to add product"


def test_unknown_key_returns_default_or_key():
    assert get_text("cart.missing") == "cart.missing"
    assert get_text("cart.missing", default="fallback") == "fallback"


def test_partial_key_is_not_returned_as_text():
    assert get_text("cart") == "cart"


@pytest.mark.parametrize(
    "code,expected",
    [(None, "en"), ("", "en"), ("pt-BR", "pt"), ("pt_PT", "pt"), ("EN", "en"), ("de", "en")],
)
def test_detect_language(code, expected):
    assert detect_language(code) == expected
