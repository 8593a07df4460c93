"""
=============================================================================
LANGUAGE NEGOTIATION
=============================================================================

Picks the active language for a request, in fixed priority order:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   1. ?lang=fr        valid?  ──yes──►  select "fr", persist         │
    │          │no                                                         │
    │          ▼                                                           │
    │   2. Cookie lang=fr  valid?  ──yes──►  select "fr"                  │
    │          │no                                                         │
    │          ▼                                                           │
    │   3. default         ───────────────►  select default, persist      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

"Valid" means a translation file for the code exists right now: the
directory is rescanned on every resolution, so dropping ``de.json`` into it
takes effect on the next request.

"Persist" writes the preference cookie, but only when it would change
something: never when the cookie already holds the chosen code.
=============================================================================
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

from ..http.request import HTTPRequest
from ..http.response import ResponseStream
from .store import AVAILABLE_EXTENSIONS, is_valid_code


logger = logging.getLogger(__name__)


class LanguageSource(str, Enum):
    """Where the selected language came from."""

    OVERRIDE = "override"
    PREFERENCE = "preference"
    DEFAULT = "default"


@dataclass(frozen=True)
class LocaleDecision:
    language: str
    source: LanguageSource
    persist: bool


class LocaleResolver:
    """
    Chooses a language per request and maintains the preference cookie.

    Usage:
        locale = LocaleResolver("/site/private/vocabulary", default_language="en")
        code = locale.resolve(request, response)   # sets the cookie if needed
        store.activate(code)
    """

    def __init__(
        self,
        directory: Union[str, Path],
        default_language: str = "en",
        param: str = "lang",
        cookie_name: str = "lang",
        cookie_max_age: int = 10 * 365 * 24 * 60 * 60,
        cookie_path: str = "/",
    ):
        self.directory = Path(directory)
        self.default_language = default_language
        self.param = param
        self.cookie_name = cookie_name
        self.cookie_max_age = cookie_max_age
        self.cookie_path = cookie_path

    def available_languages(self) -> List[str]:
        """Codes with a translation file, sorted. Rescanned on every call."""
        if not self.directory.is_dir():
            logger.warning(f"Translations directory not found: {self.directory}")
            return []

        codes = set()
        for path in self.directory.iterdir():
            ext = path.suffix.lstrip(".")
            if ext in AVAILABLE_EXTENSIONS and path.is_file() and is_valid_code(path.stem):
                codes.add(path.stem)
        return sorted(codes)

    def decide(self, request: HTTPRequest) -> LocaleDecision:
        """Pick the language for ``request`` without side effects."""
        available = self.available_languages()
        persisted = request.get_cookie(self.cookie_name)
        override = request.get_query(self.param)

        if override is not None and override in available:
            return LocaleDecision(override, LanguageSource.OVERRIDE, persist=override != persisted)

        if override is not None:
            logger.debug(f"Ignoring unknown language override {override!r}")

        if persisted is not None and persisted in available:
            return LocaleDecision(persisted, LanguageSource.PREFERENCE, persist=False)

        return LocaleDecision(
            self.default_language,
            LanguageSource.DEFAULT,
            persist=persisted != self.default_language,
        )

    def resolve(self, request: HTTPRequest, response: Optional[ResponseStream] = None) -> str:
        """
        Pick the language and, when needed, write the preference cookie.

        Returns:
            The selected language code.
        """
        decision = self.decide(request)
        if decision.persist and response is not None:
            response.set_cookie(
                self.cookie_name,
                decision.language,
                max_age=self.cookie_max_age,
                path=self.cookie_path,
            )
        logger.debug(f"Language {decision.language!r} selected from {decision.source.value}")
        return decision.language
