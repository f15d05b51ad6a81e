# Internationalization Module
from .translations import SUPPORTED_LANGUAGES, detect_language, get_text, reload_translations

__all__ = ["SUPPORTED_LANGUAGES", "detect_language", "get_text", "reload_translations"]
