"""Tests for EPD field normalization and numeric coercion."""

import pytest

from epd_extractor.backend.services.epd import FIELD_MAPPINGS, NOT_FOUND, coerce, normalize


class TestCoerce:
    """Tests for the numeric coercion helper."""

    def test_numbers_pass_through(self):
        """Test that ints and floats are returned unchanged."""
        assert coerce(42) == 42
        assert isinstance(coerce(42), int)
        assert coerce(0.5) == 0.5

    def test_value_with_unit(self):
        """Test that units around the number are discarded."""
        assert coerce("45.2 kg CO2-eq/kg") == 45.2
        assert coerce("264 kg CO2-eq") == 264.0
        assert coerce("2400 kg/m³") == 2400.0

    def test_scientific_notation(self):
        """Test that scientific notation is preserved."""
        assert coerce("1.2e-3") == pytest.approx(0.0012)
        assert coerce("5.1E-6 kg CFC-11-eq") == pytest.approx(5.1e-6)

    def test_signs(self):
        """Test that signed values keep their sign."""
        assert coerce("-3.5") == -3.5
        assert coerce("+7") == 7.0
        assert coerce("GWP-biogenic: -12.4 kg") == -12.4

    def test_thousands_separators(self):
        """Test that thousands separators are removed."""
        assert coerce("1,150") == 1150.0
        assert coerce("1,150,000 MJ") == 1150000.0
        assert coerce("12 345 MJ") == 12345.0

    def test_digits_inside_words_are_ignored(self):
        """Test that digits in chemical formulas are not taken as the value."""
        assert coerce("CO2-eq: 12.5") == 12.5
        assert coerce("abc123") == "abc123"

    def test_non_numeric_text_returned_unchanged(self):
        """Test that unparseable text is returned as given."""
        assert coerce("N/A") == "N/A"
        assert coerce("Not found") == "Not found"
        assert coerce("") == ""
        assert coerce("verified") == "verified"

    def test_non_string_values_pass_through(self):
        """Test that other types are returned unchanged without raising."""
        assert coerce(None) is None
        assert coerce(True) is True
        assert coerce([1, 2]) == [1, 2]

    @pytest.mark.parametrize(
        "value",
        ["45.2 kg CO2-eq/kg", "N/A", "1,150", "1.2e-3", 7, 0.25, None, "", "-0.0"],
    )
    def test_idempotent(self, value):
        """Test that coercing twice equals coercing once."""
        assert coerce(coerce(value)) == coerce(value)


class TestNormalize:
    """Tests for normalize()."""

    def test_structured_numeric_fields(self):
        """Test that well-formed value/unit/source objects keep their values and order."""
        raw = {
            key: {"value": float(index), "unit": f"unit-{key}", "source": "Table 1"}
            for index, (key, _) in enumerate(FIELD_MAPPINGS, start=1)
        }

        record = normalize(raw)

        assert list(record) == [label for _, label in FIELD_MAPPINGS]
        for index, (key, label) in enumerate(FIELD_MAPPINGS, start=1):
            assert record[label] == {
                "value": float(index),
                "unit": f"unit-{key}",
                "source": "Table 1",
            }

    def test_empty_extraction_is_fully_populated(self):
        """Test that every label is present even when nothing was extracted."""
        record = normalize({})

        assert len(record) == len(FIELD_MAPPINGS)
        for field in record.values():
            assert field == {"value": NOT_FOUND, "unit": "", "source": ""}

    def test_sentinel_and_empty_values(self):
        """Test that "Not found", None and empty strings become sentinel entries."""
        record = normalize({"gwp": "Not found", "ap": None, "ep": ""})

        for label in (
            "Global Warming Potential",
            "Acidification Potential",
            "Eutrophication Potential",
        ):
            assert record[label] == {"value": NOT_FOUND, "unit": "", "source": ""}

    def test_string_values_pass_through(self):
        """Test that bare strings are kept as-is, without coercion."""
        record = normalize(
            {"product_name": "Gypsum board 12.5 mm", "functional_unit": "1 m²"}
        )

        assert record["Product Name"] == {
            "value": "Gypsum board 12.5 mm",
            "unit": "",
            "source": "",
        }
        assert record["Functional Unit"]["value"] == "1 m²"

    def test_structured_string_values_are_coerced(self):
        """Test that string values inside objects are coerced to numbers."""
        record = normalize(
            {"gwp": {"value": "264 kg CO2-eq", "unit": "kg CO2-eq", "source": "A1-A3"}}
        )

        assert record["Global Warming Potential"] == {
            "value": 264.0,
            "unit": "kg CO2-eq",
            "source": "A1-A3",
        }

    def test_missing_unit_and_source_default_to_empty(self):
        """Test that objects without unit/source get empty strings."""
        record = normalize({"material_density": {"value": 2400, "unit": None}})

        assert record["Material Density"] == {"value": 2400, "unit": "", "source": ""}

    def test_unknown_keys_are_ignored(self):
        """Test that keys outside the mapping table are not emitted."""
        record = normalize({"reference_study_period": "50 years"})

        assert "reference_study_period" not in record
        assert len(record) == len(FIELD_MAPPINGS)

    def test_custom_mapping_table(self):
        """Test that an injected mapping table controls labels and order."""
        mappings = (("gwp", "GWP"), ("product_name", "Name"))

        record = normalize({"gwp": {"value": 3}, "product_name": "Brick"}, mappings)

        assert list(record) == ["GWP", "Name"]
        assert record["GWP"]["value"] == 3
        assert record["Name"]["value"] == "Brick"

    def test_raw_extraction_not_modified(self, raw_extraction: dict):
        """Test that normalization leaves the raw extraction untouched."""
        snapshot = {k: (dict(v) if isinstance(v, dict) else v) for k, v in raw_extraction.items()}

        normalize(raw_extraction)

        assert raw_extraction == snapshot
