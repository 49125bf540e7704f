"""
Tests for the record writers.
"""

import io
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from output import CSVConfig, CSVWriter, ColumnNamer, JSONWriter, NDJSONWriter, rows_to_dataframe


RECORDS = [
    {"Name": "a", "Value": "1"},
    {"Name": "b", "Value": None},
]


class TestCSVWriter:
    """Tests for CSV writing."""

    def test_to_string(self):
        assert CSVWriter().to_string(RECORDS) == '"Name","Value"\n"a","1"\n"b",""\n'

    def test_quotes_escaped(self):
        csv_string = CSVWriter().to_string([{"text": 'say "hi"'}])
        assert csv_string == '"text"\n"say ""hi"""\n'

    def test_columns(self):
        writer = CSVWriter(columns=["Value", "Name"])
        assert writer.to_string(RECORDS) == '"Value","Name"\n"1","a"\n"","b"\n'

    def test_snake_case_header(self):
        writer = CSVWriter(config=CSVConfig(use_snake_case=True))
        assert writer.to_string([{"Net Sales": "1"}]).startswith('"net_sales"\n')

    def test_no_records(self):
        assert CSVWriter().to_string([]) == ""

    def test_write_file(self, tmp_path):
        path = tmp_path / "out" / "table.csv"
        count = CSVWriter(output_path=path).write_records(iter(RECORDS))
        assert count == 2
        assert path.read_text(encoding="utf-8").splitlines()[0] == '"Name","Value"'

    def test_write_rows(self):
        buffer = io.StringIO()
        CSVWriter().write_rows([["a", "1"], ["b", None]], stream=buffer)
        assert buffer.getvalue() == '"a","1"\n"b",""\n'

    def test_column_namer(self):
        assert ColumnNamer.to_snake_case("Invoice Number") == "invoice_number"
        assert ColumnNamer.to_snake_case("grandTotal") == "grand_total"


class TestJSONWriters:
    """Tests for JSON array and line-delimited output."""

    def test_json_array(self):
        text = JSONWriter().to_string(RECORDS)
        assert text.startswith("[\n") and text.endswith("\n]\n")
        assert json.loads(text) == RECORDS

    def test_empty_json_array(self):
        assert json.loads(JSONWriter().to_string([])) == []

    def test_ndjson(self):
        text = NDJSONWriter().to_string(RECORDS)
        lines = text.splitlines()
        assert len(lines) == 2
        assert json.loads(lines[1]) == {"Name": "b", "Value": None}

    def test_rows_as_json(self):
        text = JSONWriter().to_string([["a", "1"]])
        assert json.loads(text) == [["a", "1"]]


class TestDataFrame:
    """Tests for DataFrame conversion."""

    def test_header_row(self):
        df = rows_to_dataframe([["Name", "Value"], ["a", "1"], ["b", "2"]])
        assert list(df.columns) == ["Name", "Value"]
        assert df["Value"].tolist() == ["1", "2"]

    def test_ragged_rows(self):
        df = rows_to_dataframe([["a", "1"], ["Sub"]], headers=["name", "value"])
        assert len(df) == 2
        assert df["value"].tolist()[0] == "1"
        assert df["value"].isna().tolist() == [False, True]

    def test_extra_columns(self):
        df = rows_to_dataframe([["Name"], ["a", "1"]])
        assert list(df.columns) == ["Name", "1"]
