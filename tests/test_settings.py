"""
Settings tests
"""

from nutcompiler.config import AppSettings
from nutcompiler.lib.compiler import Compiler
from nutcompiler.models.tags import TagSet


class TestAppSettings:
    """Test defaults, helpers and environment overrides"""

    def test_default_delimiters(self):
        tags = TagSet.from_settings(AppSettings())
        assert tags == TagSet()
        assert tags.content == ("{{", "}}")
        assert tags.directive == ("{@", "}")
        assert tags.comment == ("{{--", "--}}")

    def test_fragment_make(self):
        assert AppSettings().fragment_make("} else {") == "<?php } else { ?>"

    def test_variable_make(self):
        assert AppSettings().variable_make("user") == "$user"

    def test_environment_prefix(self, monkeypatch):
        monkeypatch.setenv("NUT_STRICT_MODE", "true")
        monkeypatch.setenv("NUT_DIRECTIVE_TAG_OPEN", "{%")
        monkeypatch.setenv("NUT_DIRECTIVE_TAG_CLOSE", "%}")
        settings = AppSettings()
        assert settings.strict_mode is True
        assert Compiler(settings=settings).compile("{%else%}") == "<?php } else { ?>"
