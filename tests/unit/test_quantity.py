"""Tests for the quantity codec."""

from decimal import Decimal

import pytest

from kubeshape.core import quantity
from kubeshape.core.errors import DecodeError


class TestParse:
    """Tests for quantity parsing."""

    def test_parse_binary(self):
        value, fmt = quantity.parse("64Mi")

        assert value == Decimal(64 * 1024 * 1024)
        assert fmt == quantity.BINARY_SI

    def test_parse_decimal(self):
        value, fmt = quantity.parse("500m")

        assert value == Decimal("0.5")
        assert fmt == quantity.DECIMAL_SI

    def test_parse_exponent(self):
        value, fmt = quantity.parse("1e3")

        assert value == Decimal(1000)
        assert fmt == quantity.DECIMAL_EXPONENT

    @pytest.mark.parametrize("text", ["", "abc", "64MiB", "1K", "Infinity", "1.2.3", "Mi", " 1Gi"])
    def test_parse_rejects_invalid(self, text):
        """Test that text outside the quantity grammar is a decode error."""
        with pytest.raises(DecodeError):
            quantity.parse(text)

    def test_parse_rejects_non_string(self):
        with pytest.raises(DecodeError):
            quantity.parse(64)


class TestCanonicalize:
    """Tests for canonical quantity text."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("64Mi", "64Mi"),
            ("1024Mi", "1Gi"),
            ("0.5Gi", "512Mi"),
            ("1536", "1536"),
            ("1.5Ki", "1536"),
            ("1000", "1k"),
            ("0.5", "500m"),
            ("100m", "100m"),
            ("1500m", "1500m"),
            ("1e3", "1e3"),
            ("0", "0"),
            ("0Mi", "0"),
            ("2G", "2G"),
            ("10E", "10E"),
            ("16Ei", "16Ei"),
            ("8Ei", "8Ei"),
            ("10000E", "10000E"),
        ],
    )
    def test_canonical_form(self, text, expected):
        assert quantity.canonicalize(text) == expected

    def test_exa_scale_values_keep_their_suffix(self):
        """Test that values past 64 bits are formatted without overflow."""
        value, fmt = quantity.parse("16Ei")

        assert value == Decimal(16 * 1024**6)
        assert quantity.format_quantity(value, fmt) == "16Ei"
        assert quantity.format_quantity(Decimal(10) ** 19) == "10E"

    def test_rejects_values_beyond_working_precision(self):
        with pytest.raises(DecodeError):
            quantity.parse("1e100")

    def test_rounds_up_to_nano(self):
        assert quantity.canonicalize("0.0000000001") == "1n"

    def test_canonical_form_is_stable(self):
        """Test that canonicalizing twice gives the same text."""
        for text in ("64Mi", "1024Mi", "0.5", "1e3", "3Ti"):
            once = quantity.canonicalize(text)
            assert quantity.canonicalize(once) == once
