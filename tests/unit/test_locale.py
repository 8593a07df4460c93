"""
Unit tests for language negotiation.
"""

import pytest

from pyfront.http import HTTPRequest, ResponseStream
from pyfront.i18n.locale import LocaleResolver, LocaleDecision, LanguageSource


@pytest.fixture
def vocabulary(site):
    return site / "private" / "vocabulary"


@pytest.fixture
def locale(vocabulary):
    return LocaleResolver(vocabulary, default_language="en")


def resolve(locale, uri="/", cookie=None):
    cookies = {"lang": cookie} if cookie is not None else {}
    response = ResponseStream()
    code = locale.resolve(HTTPRequest.from_uri(uri, cookies=cookies), response)
    written = response.cookies["lang"].value if "lang" in response.cookies else None
    return code, written


class TestAvailableLanguages:
    def test_scan(self, locale):
        """json and lang files count; the reserved format does not."""
        assert locale.available_languages() == ["en", "fr"]

    def test_rescanned_every_time(self, locale, vocabulary):
        (vocabulary / "de.json").write_text('{"greeting": "Hallo"}')
        assert "de" in locale.available_languages()

        (vocabulary / "de.json").unlink()
        assert "de" not in locale.available_languages()

    def test_ignores_other_files(self, locale, vocabulary):
        (vocabulary / "notes.txt").write_text("x")
        (vocabulary / "bad code.json").write_text("{}")
        (vocabulary / "sub.json").mkdir()
        assert locale.available_languages() == ["en", "fr"]

    def test_missing_directory(self, tmp_path, caplog):
        locale = LocaleResolver(tmp_path / "nowhere")
        assert locale.available_languages() == []
        assert "not found" in caplog.text


class TestPriority:
    """Override → preference → default."""

    def test_override_beats_preference_and_is_persisted(self, locale):
        assert resolve(locale, "/?lang=en", cookie="fr") == ("en", "en")

    def test_preference_is_not_rewritten(self, locale):
        assert resolve(locale, "/", cookie="fr") == ("fr", None)

    def test_first_visit_persists_default(self, locale):
        assert resolve(locale, "/") == ("en", "en")

    def test_override_equal_to_preference_not_rewritten(self, locale):
        assert resolve(locale, "/?lang=fr", cookie="fr") == ("fr", None)

    def test_unknown_override_ignored(self, locale):
        assert resolve(locale, "/?lang=de", cookie="fr") == ("fr", None)

    @pytest.mark.parametrize("override", ["../etc", "", "xx", "EN"])
    def test_invalid_overrides(self, locale, override):
        """Unavailable codes (including the reserved-format one) are ignored."""
        code, written = resolve(locale, f"/?lang={override}")
        assert code == "en"
        assert written == "en"

    def test_stale_preference_replaced_by_default(self, locale):
        assert resolve(locale, "/", cookie="de") == ("en", "en")

    def test_default_already_persisted(self, locale):
        """An invalid override with the default already stored writes nothing."""
        assert resolve(locale, "/?lang=zz", cookie="en") == ("en", None)

    def test_default_without_translation_file(self, vocabulary):
        locale = LocaleResolver(vocabulary, default_language="it")
        assert resolve(locale, "/") == ("it", "it")

    def test_decide_has_no_side_effects(self, locale):
        decision = locale.decide(HTTPRequest.from_uri("/?lang=fr"))
        assert decision == LocaleDecision("fr", LanguageSource.OVERRIDE, persist=True)

    def test_sources(self, locale):
        assert locale.decide(HTTPRequest.from_uri("/", cookies={"lang": "fr"})).source is LanguageSource.PREFERENCE
        assert locale.decide(HTTPRequest.from_uri("/")).source is LanguageSource.DEFAULT


class TestCookie:
    def test_cookie_attributes(self, vocabulary):
        locale = LocaleResolver(vocabulary, cookie_name="site_lang", cookie_max_age=120, param="hl")
        response = ResponseStream()
        code = locale.resolve(HTTPRequest.from_uri("/?hl=fr"), response)

        assert code == "fr"
        morsel = response.cookies["site_lang"]
        assert morsel.value == "fr"
        assert morsel["max-age"] == "120"
        assert morsel["path"] == "/"

    def test_default_lifetime_is_ten_years(self, locale):
        response = ResponseStream()
        locale.resolve(HTTPRequest.from_uri("/"), response)
        assert response.cookies["lang"]["max-age"] == str(10 * 365 * 24 * 60 * 60)

    def test_without_response(self, locale):
        assert locale.resolve(HTTPRequest.from_uri("/?lang=fr")) == "fr"

    def test_after_output_cookie_is_skipped(self, locale, caplog):
        response = ResponseStream()
        response.write("already started")
        assert locale.resolve(HTTPRequest.from_uri("/?lang=fr"), response) == "fr"
        assert "lang" not in response.cookies
        assert "Headers already sent" in caplog.text
