"""Internationalization for user-facing cart messages"""

import json
from pathlib import Path
from typing import Any

SUPPORTED_LANGUAGES = {
    "en": "English",
    "pt": "Português",
}

DEFAULT_LANGUAGE = "en"

# Cache for loaded translations
_translations: dict[str, dict[str, Any]] = {}


def _get_locales_path() -> Path:
    """Locales ship inside the package (storefront/locales)."""
    return Path(__file__).parent.parent / "locales"


def _load_translations(lang: str) -> dict[str, Any]:
    """Load translations for a language"""
    if lang in _translations:
        return _translations[lang]

    file_path = _get_locales_path() / f"{lang}.json"

    if not file_path.exists():
        if lang != DEFAULT_LANGUAGE:
            return _load_translations(DEFAULT_LANGUAGE)
        return {}

    try:
        with open(file_path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError):
        return {}

    if isinstance(data, dict):
        _translations[lang] = data
        return data
    return {}


def _lookup(translations: dict[str, Any], key: str) -> Any:
    """Resolve dotted keys ("cart.add_failed") against nested dicts."""
    current: Any = translations
    for part in key.split("."):
        if not isinstance(current, dict) or part not in current:
            return None
        current = current[part]
    return current


def get_text(key: str, lang: str = DEFAULT_LANGUAGE, default: str | None = None, **kwargs) -> str:
    """
    Get translated text by key.

    Args:
        key: Translation key (e.g., "cart.add_failed")
        lang: Language code (e.g., "en", "pt-BR")
        default: Value returned if the key is missing (instead of the key)
        **kwargs: Variables to format into the string

    Returns:
        Translated string, falling back to English, then to default/key
    """
    lang = detect_language(lang)

    text = _lookup(_load_translations(lang), key)
    if text is None and lang != DEFAULT_LANGUAGE:
        text = _lookup(_load_translations(DEFAULT_LANGUAGE), key)

    if not isinstance(text, str):
        return default if default is not None else key

    if kwargs:
        try:
            return text.format(**kwargs)
        except (KeyError, ValueError, AttributeError):
            return text

    return text


def detect_language(language_code: str | None) -> str:
    """Normalize a language code ("pt-BR" -> "pt"); unknown codes map to English."""
    if not language_code:
        return DEFAULT_LANGUAGE

    lang = language_code.split("-")[0].split("_")[0].lower()
    return lang if lang in SUPPORTED_LANGUAGES else DEFAULT_LANGUAGE


def reload_translations() -> None:
    """Clear translation cache and reload"""
    _translations.clear()
