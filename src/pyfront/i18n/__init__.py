"""
=============================================================================
I18N MODULE
=============================================================================

    locale.py   LocaleResolver: ?lang= override → cookie → default
    store.py    TranslationStore: per-language tables, get/set

    request ──► LocaleResolver.resolve() ──► "fr" ──► store.activate("fr")
                                                          │
                                  script: t("greeting") ◄─┘
=============================================================================
"""

from .locale import LocaleResolver, LocaleDecision, LanguageSource
from .store import TranslationStore, parse_json, parse_lang, is_valid_code

__all__ = [
    "LocaleResolver",
    "LocaleDecision",
    "LanguageSource",
    "TranslationStore",
    "parse_json",
    "parse_lang",
    "is_valid_code",
]
