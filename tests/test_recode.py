"""
Tests for recoding survey codes into labels.
"""

from __future__ import annotations

import pandas as pd

from reef_fish_explorer.analysis import CONSUMER_LABELS, TROPHIC_LABELS, recode, recode_value


class TestRecodeValue:
    """Test single-value recoding."""

    def test_known_code(self) -> None:
        assert recode_value("Pisc", TROPHIC_LABELS) == "piscivore"

    def test_unknown_passes_through(self) -> None:
        assert recode_value("XYZ", TROPHIC_LABELS) == "XYZ"

    def test_none_passes_through(self) -> None:
        assert recode_value(None, TROPHIC_LABELS) is None

    def test_unhashable_passes_through(self) -> None:
        assert recode_value(["H"], TROPHIC_LABELS) == ["H"]

    def test_consumer_labels(self) -> None:
        assert recode_value("Apex", CONSUMER_LABELS) == "apex predator"


class TestRecode:
    """Test column recoding on the flat measurement table."""

    def _table(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "measurementType": ["trophic", "trophic", "length", "consumer"],
                "measurementValue": ["H", "Unknown", "12", "Sec"],
            }
        )

    def test_recodes_only_selected_type(self) -> None:
        result = recode(self._table(), TROPHIC_LABELS, measurement_type="trophic")
        assert result["measurementValue"].tolist() == ["herbivore", "Unknown", "12", "Sec"]

    def test_recodes_every_row_without_type(self) -> None:
        table = pd.DataFrame({"measurementValue": ["H", "PLK", "Om"]})
        result = recode(table, TROPHIC_LABELS)
        assert result["measurementValue"].tolist() == ["herbivore", "planktivore", "omnivore"]

    def test_input_untouched(self) -> None:
        table = self._table()
        recode(table, TROPHIC_LABELS, measurement_type="trophic")
        assert table["measurementValue"].tolist() == ["H", "Unknown", "12", "Sec"]

    def test_chained_recodes(self) -> None:
        table = recode(self._table(), TROPHIC_LABELS, measurement_type="trophic")
        table = recode(table, CONSUMER_LABELS, measurement_type="consumer")
        assert table["measurementValue"].tolist() == [
            "herbivore",
            "Unknown",
            "12",
            "secondary consumer",
        ]

    def test_other_column(self) -> None:
        table = pd.DataFrame({"guild": ["MI", "Cor"]})
        result = recode(table, TROPHIC_LABELS, column="guild")
        assert result["guild"].tolist() == ["mobile invertivore", "corallivore"]

    def test_missing_column(self) -> None:
        table = pd.DataFrame({"other": [1]})
        result = recode(table, TROPHIC_LABELS)
        assert result.equals(table)

    def test_missing_type_column(self) -> None:
        table = pd.DataFrame({"measurementValue": ["H"]})
        result = recode(table, TROPHIC_LABELS, measurement_type="trophic")
        assert result["measurementValue"].tolist() == ["H"]

    def test_empty(self) -> None:
        table = pd.DataFrame(columns=["measurementType", "measurementValue"])
        assert recode(table, TROPHIC_LABELS, measurement_type="trophic").empty
