"""Tests for inkexpr.errors."""

from inkexpr.errors import ConfigError, InkExprError, RecognitionFailure


class TestRecognitionFailure:
    def test_is_an_inkexpr_error(self):
        assert issubclass(RecognitionFailure, InkExprError)
        assert issubclass(ConfigError, InkExprError)

    def test_message_names_provider(self):
        err = RecognitionFailure("tesseract", "timed out")
        assert str(err) == "tesseract: timed out"
        assert err.provider == "tesseract"
        assert err.message == "timed out"


class TestConfigError:
    def test_field_is_optional(self):
        assert ConfigError("bad").field is None

    def test_field_recorded(self):
        err = ConfigError("scale_factor must be >= 1, got 0", "scale_factor")
        assert err.field == "scale_factor"
        assert str(err) == "scale_factor must be >= 1, got 0"
