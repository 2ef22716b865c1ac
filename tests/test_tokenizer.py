from __future__ import annotations

import io

import openpyxl
from conftest import make_xlsx

from taxonomy_import.tokenizer import (
    decode_text,
    read_text_rows,
    read_workbook_rows,
    sniff_delimiter,
    split_line,
)


def test_sniff_delimiter_prefers_semicolon_only_when_strictly_more() -> None:
    assert sniff_delimiter("a;b;c\n1,2,3,4") == ";"
    assert sniff_delimiter("a,b;c") == ","
    assert sniff_delimiter("a,b,c") == ","
    assert sniff_delimiter("") == ","


def test_sniff_delimiter_uses_first_non_blank_line() -> None:
    text = "\n   \ncategory;subcategory\nТрубы, ПВХ;Муфты, латунь, хром"
    assert sniff_delimiter(text) == ";"


def test_split_line_respects_quotes() -> None:
    line = '"Трубы; ПВХ";"Он сказал ""да""";Муфты'
    assert split_line(line, ";") == ["Трубы; ПВХ", 'Он сказал "да"', "Муфты"]


def test_split_line_trailing_delimiter_yields_empty_cell() -> None:
    assert split_line("Трубы;", ";") == ["Трубы", ""]


def test_read_text_rows_drops_blank_rows_and_bom() -> None:
    text = "\ufeffcategory,subcategory\r\n\r\n , \r\nТрубы,ПВХ\r\n"
    assert read_text_rows(text) == [["category", "subcategory"], ["Трубы", "ПВХ"]]


def test_decode_text_falls_back_to_cp1251() -> None:
    assert decode_text("Трубы;ПВХ".encode("cp1251")) == "Трубы;ПВХ"
    assert decode_text("\ufeffТрубы".encode("utf-8")) == "Трубы"


def test_read_workbook_rows_normalizes_cells() -> None:
    content = make_xlsx([["Трубы", "Фитинги"], ["ПВХ", None], [None, None], [12, "Муфты"]])
    rows, errors = read_workbook_rows(content)
    assert errors == []
    assert [[cell for cell in row if cell] for row in rows] == [
        ["Трубы", "Фитинги"],
        ["ПВХ"],
        ["12", "Муфты"],
    ]


def test_read_workbook_rows_first_sheet_only() -> None:
    workbook = openpyxl.Workbook()
    workbook.active.append(["Трубы"])
    workbook.create_sheet("Other").append(["Краны"])
    buffer = io.BytesIO()
    workbook.save(buffer)

    rows, errors = read_workbook_rows(buffer.getvalue())
    assert errors == []
    assert rows == [["Трубы"]]


def test_read_workbook_rows_reports_corrupt_file() -> None:
    rows, errors = read_workbook_rows(b"PK\x03\x04not really a workbook")
    assert rows == []
    assert len(errors) == 1
