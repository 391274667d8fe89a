"""
Tests for the record loader: typed parsing and the strictness contract.
"""

import pandas as pd
import pytest

from olympics_analysis.core.data_loader import DataLoader, parse_table, read_raw_csv
from olympics_analysis.core.exceptions import ParseError
from olympics_analysis.core.schema import ATHLETE_EVENT_SCHEMA, NOC_REGION_SCHEMA

from conftest import EVENT_COLUMNS, REGION_COLUMNS, event, write_csv


def _load_events(path):
    return parse_table(read_raw_csv(path), ATHLETE_EVENT_SCHEMA, source=path.name)


class TestParseTable:
    """Parsing of well-formed tables."""

    def test_declared_types(self, make_events):
        df = make_events([event(ID=7, Age=23, Height="181.5", Weight=80, Medal="Gold")])
        assert list(df.columns) == EVENT_COLUMNS
        assert str(df["ID"].dtype) == "Int64"
        assert str(df["Year"].dtype) == "Int64"
        assert str(df["Age"].dtype) == "Int64"
        assert str(df["Height"].dtype) == "Float64"
        assert str(df["Weight"].dtype) == "Float64"
        assert df.loc[0, "ID"] == 7
        assert df.loc[0, "Height"] == 181.5
        assert df.loc[0, "Medal"] == "Gold"

    def test_na_and_empty_cells_become_missing(self, make_events):
        df = make_events([event(Age="", Height="NA", Weight="NA", Medal="NA")])
        assert pd.isna(df.loc[0, "Age"])
        assert pd.isna(df.loc[0, "Height"])
        assert pd.isna(df.loc[0, "Weight"])
        assert pd.isna(df.loc[0, "Medal"])

    def test_missing_is_not_zero_or_empty(self, make_events):
        df = make_events([event(Weight="NA"), event(ID=2, Weight="0")])
        assert pd.isna(df.loc[0, "Weight"])
        assert df.loc[1, "Weight"] == 0

    def test_quoted_name_with_comma(self, make_events):
        df = make_events([event(Name="Smith, John")])
        assert df.loc[0, "Name"] == "Smith, John"
        assert df.loc[0, "Team"] == "Team"

    def test_region_may_be_missing(self, make_regions):
        df = make_regions([("ROT", "NA", "Refugee Olympic Team"), ("USA", "USA", "")])
        assert pd.isna(df.loc[0, "region"])
        assert df.loc[1, "region"] == "USA"
        assert pd.isna(df.loc[1, "notes"])


class TestParseErrors:
    """Malformed input fails with the offending row and column."""

    def test_non_numeric_height(self, make_events):
        with pytest.raises(ParseError) as excinfo:
            make_events([event(), event(ID=2, Height="tall")])
        assert excinfo.value.row == 3
        assert excinfo.value.column == "Height"

    def test_fractional_age(self, make_events):
        with pytest.raises(ParseError) as excinfo:
            make_events([event(Age="23.5")])
        assert excinfo.value.row == 2
        assert excinfo.value.column == "Age"

    def test_age_out_of_integer_range(self, make_events):
        with pytest.raises(ParseError) as excinfo:
            make_events([event(), event(ID=2, Age="1e30")])
        assert excinfo.value.row == 3
        assert excinfo.value.column == "Age"

    def test_integer_text_beyond_int64(self, make_events):
        with pytest.raises(ParseError) as excinfo:
            make_events([event(ID="9" * 30)])
        assert excinfo.value.column == "ID"
        assert "out of range" in str(excinfo.value)

    @pytest.mark.parametrize("year", ["2000.0", "2e3", " 2000"])
    def test_year_must_be_plain_integer_text(self, make_events, year):
        with pytest.raises(ParseError) as excinfo:
            make_events([event(Year=year)])
        assert excinfo.value.column == "Year"

    def test_signed_integers_accepted(self, make_events):
        df = make_events([event(Age="+25")])
        assert df.loc[0, "Age"] == 25
        assert str(df["Age"].dtype) == "Int64"

    def test_unknown_sex(self, make_events):
        with pytest.raises(ParseError) as excinfo:
            make_events([event(Sex="X")])
        assert excinfo.value.column == "Sex"

    def test_unknown_medal(self, make_events):
        with pytest.raises(ParseError) as excinfo:
            make_events([event(Medal="Platinum")])
        assert excinfo.value.column == "Medal"

    def test_missing_value_in_required_column(self, make_events):
        with pytest.raises(ParseError) as excinfo:
            make_events([event(Year="NA")])
        assert excinfo.value.column == "Year"

    def test_malformed_noc(self, make_events):
        with pytest.raises(ParseError) as excinfo:
            make_events([event(NOC="AB")])
        assert excinfo.value.column == "NOC"

    def test_duplicate_noc_in_regions(self, make_regions):
        with pytest.raises(ParseError) as excinfo:
            make_regions([("ABC", "Abcland", ""), ("ABC", "Other", "")])
        assert excinfo.value.row == 3
        assert excinfo.value.column == "NOC"

    def test_header_mismatch(self, tmp_path):
        columns = list(EVENT_COLUMNS)
        columns[4] = "Height_cm"
        row = event()
        row["Height_cm"] = row.pop("Height")
        path = write_csv(tmp_path / "bad_header.csv", columns, [row])
        with pytest.raises(ParseError) as excinfo:
            _load_events(path)
        assert excinfo.value.row == 1
        assert excinfo.value.column == "Height"

    def test_too_many_fields(self, tmp_path):
        good = [event()[c] for c in EVENT_COLUMNS]
        path = write_csv(tmp_path / "long.csv", EVENT_COLUMNS, [good, good + ["extra"]])
        with pytest.raises(ParseError) as excinfo:
            _load_events(path)
        assert excinfo.value.row == 3

    def test_too_few_fields(self, tmp_path):
        good = [event()[c] for c in EVENT_COLUMNS]
        path = write_csv(tmp_path / "short.csv", EVENT_COLUMNS, [good, good[:-2]])
        with pytest.raises(ParseError) as excinfo:
            _load_events(path)
        assert excinfo.value.row == 3
        assert excinfo.value.column == "Event"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("", encoding="utf-8")
        with pytest.raises(ParseError):
            _load_events(path)

    def test_error_message_names_file(self, make_events):
        with pytest.raises(ParseError, match=r"events_\d+\.csv: row 2, column 'Weight'"):
            make_events([event(Weight="heavy")])


class TestDataLoader:
    """Config-driven loading of both tables."""

    def test_load_datasets(self, config_file, data_dir):
        loader = DataLoader(str(config_file), str(data_dir))
        datasets = loader.load_datasets()

        assert set(datasets) == {"athlete_events", "noc_regions"}
        assert len(datasets["athlete_events"]) == 17
        assert list(datasets["noc_regions"].columns) == REGION_COLUMNS

    def test_output_directory_defaults_to_results(self, config_file, data_dir):
        loader = DataLoader(str(config_file), str(data_dir))
        assert loader.output_dir == data_dir.resolve() / "results"
        assert loader.output_dir.exists()

    def test_missing_file(self, config_file, data_dir):
        (data_dir / "noc_regions.csv").unlink()
        loader = DataLoader(str(config_file), str(data_dir))
        with pytest.raises(FileNotFoundError):
            loader.load_datasets()

    def test_missing_dataset_entry(self, config_file, data_dir):
        loader = DataLoader(str(config_file), str(data_dir))
        del loader.config["datasets"]["noc_regions"]
        with pytest.raises(ValueError, match="noc_regions"):
            loader.load_datasets()

    def test_dataset_summary(self, config_file, data_dir):
        loader = DataLoader(str(config_file), str(data_dir))
        loader.load_datasets()
        summary = loader.get_dataset_summary()

        assert summary["athlete_events"]["total_records"] == 17
        assert summary["athlete_events"]["columns"] == len(EVENT_COLUMNS)
        assert summary["athlete_events"]["null_counts"] > 0

    def test_missing_config(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            DataLoader(str(tmp_path / "nope.yaml"), str(tmp_path))
