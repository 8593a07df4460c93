"""
Unit tests for the plugin loader.
"""

import pytest

from pyfront.plugins import PluginLoader


@pytest.fixture
def loader(site):
    return PluginLoader(site / "private" / "plugins")


class TestLoad:
    def test_load(self, loader):
        module = loader.load("acme.widget")
        assert module is not None
        assert module.render("en") == "widget[en]"

    def test_cached(self, loader):
        first = loader.load("acme.widget")
        assert loader.load("acme.widget") is first
        assert "acme.widget" in loader
        assert loader.loaded() == ["acme.widget"]

    def test_path_for(self, loader, site):
        assert loader.path_for("acme.widget") == site / "private" / "plugins" / "acme" / "widget.py"

    def test_missing(self, loader, caplog):
        assert loader.load("acme.gadget") is None
        assert "Plugin not found" in caplog.text
        assert "acme.gadget" not in loader

    def test_import_error(self, loader, site, caplog):
        (site / "private" / "plugins" / "acme" / "bad.py").write_text("import does_not_exist_anywhere\n")
        assert loader.load("acme.bad") is None
        assert "Plugin failed to import" in caplog.text


class TestIdentifiers:
    """Identifiers may never leave the plugins directory."""

    @pytest.mark.parametrize("identifier", [
        "..acme.widget",
        "acme..widget",
        "acme/widget",
        "../private/plugins/acme/widget",
        "\\acme.widget",
        "",
        "acme.wid get",
    ])
    def test_rejected(self, loader, identifier, caplog):
        assert not loader.is_valid_identifier(identifier)
        assert loader.load(identifier) is None
        assert "Refusing plugin identifier" in caplog.text

    @pytest.mark.parametrize("identifier", ["acme.widget", "single", "a.b.c"])
    def test_accepted(self, loader, identifier):
        assert loader.is_valid_identifier(identifier)
