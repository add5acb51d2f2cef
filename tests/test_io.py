import csv
from io import StringIO

import pytest

from matrixify_prep.diagnostics import Diagnostics
from matrixify_prep.errors import CsvParseWarning, MalformedInputError
from matrixify_prep.io import format_cell, parse_csv_records, parse_json_records, project_rows, write_matrixify_csv
from matrixify_prep.transform import HEADERS, project


def _read(text):
    return list(csv.reader(StringIO(text, newline="")))


def test_project_rows_fixed_width_with_blanks():
    rows = [
        {"Handle": "a", "Title": "A", "Published": True, "Image Position": 1, "Unknown": "dropped"},
        {"Handle": "a", "Image Src": "http://x/2.jpg", "Image Position": 2},
    ]
    parsed = _read(project(rows))
    assert parsed[0] == HEADERS
    assert len(parsed) == 3
    assert all(len(r) == 18 for r in parsed)
    assert parsed[1][HEADERS.index("Published")] == "TRUE"
    assert parsed[1][HEADERS.index("Image Position")] == "1"
    assert parsed[2][HEADERS.index("Title")] == ""
    assert "dropped" not in project(rows)


def test_project_rows_quotes_special_characters():
    rows = [{"Handle": "a", "Title": 'Say "hi", friend', "Body (HTML)": "line1\nline2"}]
    text = project(rows)
    assert '"Say ""hi"", friend"' in text
    parsed = _read(text)
    assert parsed[1][1] == 'Say "hi", friend'
    assert parsed[1][HEADERS.index("Body (HTML)")] == "line1\nline2"
    assert len(parsed[1]) == 18


def test_project_rows_header_only():
    assert _read(project_rows([], ["A", "B"])) == [["A", "B"]]


def test_format_cell():
    assert format_cell(None) == ""
    assert format_cell(False) == "FALSE"
    assert format_cell(0) == "0"
    assert format_cell("0.00") == "0.00"


def test_parse_json_records_shapes():
    assert parse_json_records('[{"productId": "1"}, 3]') == [{"productId": "1"}]
    assert parse_json_records('{"data": [{"productId": "1"}]}') == [{"productId": "1"}]


@pytest.mark.parametrize("text", ["{not json", '{"items": []}', '"text"'])
def test_parse_json_records_malformed(text):
    with pytest.raises(MalformedInputError):
        parse_json_records(text)


def test_parse_csv_records_skips_blank_lines_and_bom():
    text = "\ufeffproductId,name\r\nA1,Dress\r\n,\r\n\r\nA2,Coat\r\n"
    rows = parse_csv_records(text)
    assert rows == [{"productId": "A1", "name": "Dress"}, {"productId": "A2", "name": "Coat"}]


def test_parse_csv_records_reports_ragged_rows():
    diags = Diagnostics()
    rows = parse_csv_records("a,b\n1\n1,2,3\n", diags)
    assert rows == [{"a": "1", "b": ""}, {"a": "1", "b": "2"}]
    assert diags.count(CsvParseWarning) == 2


def test_parse_csv_records_empty_text():
    assert parse_csv_records("") == []


def test_write_matrixify_csv_adds_bom(tmp_path):
    out = tmp_path / "out.csv"
    write_matrixify_csv(out, "Handle\r\nドレス\r\n")
    data = out.read_bytes()
    assert data.startswith(b"\xef\xbb\xbf")
    assert data.decode("utf-8-sig") == "Handle\r\nドレス\r\n"
