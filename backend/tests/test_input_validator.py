"""
Tests for prefix normalization and validation
"""
import re

import pytest

from services.input_validator import InputValidator

PREFIX_RE = re.compile(r"^[a-z0-9_-]*$")


class TestNormalizePrefix:
    """normalize_prefix always yields a [a-z0-9_-]* token"""

    @pytest.mark.parametrize("raw", [
        "My API!! v2",
        "  leading and trailing  ",
        "Ünïcödé Prefix",
        "slash/in/the/middle",
        "tabs\tand\nnewlines",
        "emoji 🚀 api",
        "中文接口",
        "İstanbul",
        "KELVINK",
        "../../etc/passwd",
        "%2Fencoded%2F",
        "",
    ])
    def test_output_matches_character_class(self, raw):
        assert PREFIX_RE.match(InputValidator.normalize_prefix(raw))

    def test_whitespace_runs_become_single_hyphen(self):
        assert InputValidator.normalize_prefix("my   api\t\tv2") == "my-api-v2"

    def test_symbols_removed_and_lowercased(self):
        assert InputValidator.normalize_prefix("My API!! v2") == "my-api-v2"

    def test_diacritics_stripped(self):
        assert InputValidator.normalize_prefix("Café Crème") == "cafe-creme"

    def test_underscores_and_hyphens_kept(self):
        assert InputValidator.normalize_prefix("my_api-v1") == "my_api-v1"

    def test_slashes_removed(self):
        assert InputValidator.normalize_prefix("/api/v1/") == "apiv1"

    def test_symbols_only_degrades_to_empty(self):
        assert InputValidator.normalize_prefix("!!!@@@") == ""

    def test_non_string_degrades_to_empty(self):
        assert InputValidator.normalize_prefix(None) == ""
        assert InputValidator.normalize_prefix(42) == ""

    def test_normalization_is_idempotent(self):
        once = InputValidator.normalize_prefix("Héllo Wörld_2")
        assert InputValidator.normalize_prefix(once) == once


class TestValidatePrefix:
    """validate_prefix returns (is_valid, error)"""

    def test_valid_prefix(self):
        valid, error = InputValidator.validate_prefix("my-api")
        assert valid
        assert error is None

    @pytest.mark.parametrize("raw", ["", "   ", None])
    def test_empty_rejected(self, raw):
        valid, error = InputValidator.validate_prefix(raw)
        assert not valid
        assert "empty" in error.lower()

    def test_nothing_left_after_normalization_rejected(self):
        valid, error = InputValidator.validate_prefix("???")
        assert not valid
        assert "empty" in error.lower()

    def test_too_long_rejected(self):
        valid, error = InputValidator.validate_prefix("a" * 101)
        assert not valid
        assert "too long" in error.lower()

    @pytest.mark.parametrize("raw", ["admin", "Health", "__api-root"])
    def test_reserved_rejected(self, raw):
        valid, error = InputValidator.validate_prefix(raw)
        assert not valid
        assert "reserved" in error.lower()


class TestPreviewPrefix:
    """Live preview of the API root a value would produce"""

    def test_preview_shows_api_root(self):
        preview = InputValidator.preview_prefix("My API", "https://Example.com")

        assert preview["prefix"] == "my-api"
        assert preview["is_empty"] is False
        assert preview["can_submit"] is True
        assert preview["preview"] == "https://example.com/my-api/"

    def test_empty_preview_reminds_default(self):
        preview = InputValidator.preview_prefix("   ", "https://example.com")

        assert preview["is_empty"] is True
        assert preview["can_submit"] is False
        assert preview["preview"] == "wp-json"
        assert "cannot be empty" in preview["message"]

    def test_reserved_value_cannot_be_submitted(self):
        preview = InputValidator.preview_prefix("admin", "https://example.com")
        assert preview["can_submit"] is False

    @pytest.mark.parametrize("raw", ["", " ", "   ", "\t\n"])
    def test_blank_input_previewed_as_empty(self, raw):
        """Preview and save agree: blank text can't be submitted"""
        preview = InputValidator.preview_prefix(raw, "https://example.com")

        assert preview["prefix"] == ""
        assert preview["is_empty"] is True
        assert preview["can_submit"] is False
        assert InputValidator.validate_prefix(raw)[0] is False
