from __future__ import annotations

import pytest
from conftest import SCENARIO_A, csv_bytes, make_xlsx

from taxonomy_import.errors import UnsupportedFileError
from taxonomy_import.models import ImportSettings
from taxonomy_import.parser import (
    FILE_KIND_CSV,
    FILE_KIND_XLSX,
    NO_CATEGORIES_WARNING,
    NO_ROWS_WARNING,
    detect_file_kind,
    parse_csv,
    parse_rows,
    parse_upload,
    parse_workbook,
)


def tree_as_dict(result):
    return {c.name: c.subcategory_names() for c in result.categories}


def test_scenario_a_list_layout_csv() -> None:
    result = parse_upload(SCENARIO_A, filename="taxonomy.csv")

    assert result.ok
    assert [c.name for c in result.categories] == ["Смесители", "Сифоны"]
    assert result.total_subcategories() == 3
    assert result.categories[0].subcategory_names() == ["Джойстики", "Картриджи"]


def test_scenario_c_column_layout() -> None:
    result = parse_rows([["Трубы", "Фитинги"], ["ПВХ", "Муфты"], ["ПНД", ""]])

    assert result.errors == []
    assert tree_as_dict(result) == {"Трубы": ["ПВХ", "ПНД"], "Фитинги": ["Муфты"]}
    assert [c.sort_order for c in result.categories] == [0, 1]


def test_column_layout_with_two_headers_warns_about_ambiguity() -> None:
    result = parse_csv("Трубы,Фитинги\nПВХ,Муфты\n")
    assert len(result.warnings) == 1
    assert tree_as_dict(result) == {"Трубы": ["ПВХ"], "Фитинги": ["Муфты"]}


def test_list_layout_in_workbook() -> None:
    content = make_xlsx(
        [
            ["Категория", "Подкатегория", "Описание"],
            ["Трубы", "ПВХ", "Серые канализационные"],
            ["Трубы", "ПНД", None],
            ["Краны", None, None],
        ]
    )
    result = parse_workbook(content)

    assert result.ok
    assert tree_as_dict(result) == {"Трубы": ["ПВХ", "ПНД"], "Краны": []}


def test_column_layout_workbook_with_title_block() -> None:
    content = make_xlsx(
        [
            ["Прайс-лист"],
            ["ООО Сантехника"],
            ["Тел. 123-45-67"],
            ["Трубы", "Фитинги", "Краны"],
            ["ПВХ", "Муфты", "Шаровые"],
            ["ПНД", "Отводы", None],
        ]
    )
    result = parse_workbook(content)

    assert tree_as_dict(result) == {
        "Трубы": ["ПВХ", "ПНД"],
        "Фитинги": ["Муфты", "Отводы"],
        "Краны": ["Шаровые"],
    }


def test_numeric_cells_become_labels() -> None:
    result = parse_workbook(make_xlsx([["category", "subcategory"], ["Трубы", 110]]))
    assert tree_as_dict(result) == {"Трубы": ["110"]}


def test_long_description_never_becomes_subcategory() -> None:
    description = "Труба для наружной канализации из полипропилена серого цвета длиной два метра и диаметром сто десять"
    result = parse_csv(
        "\n".join(["category;subcategory", f"Трубы;{description}", "Трубы;ПВХ"])
    )
    assert tree_as_dict(result) == {"Трубы": ["ПВХ"]}


def test_empty_file_warns_without_error() -> None:
    result = parse_csv("\n \n;;\n")
    assert result.categories == []
    assert result.errors == []
    assert result.warnings == [NO_ROWS_WARNING]


def test_header_only_file_warns_no_categories() -> None:
    result = parse_csv("category;subcategory\n")
    assert result.categories == []
    assert NO_CATEGORIES_WARNING in result.warnings


def test_corrupt_workbook_is_an_error() -> None:
    result = parse_upload(b"PK\x03\x04broken", filename="taxonomy.xlsx")
    assert result.categories == []
    assert result.errors


def test_settings_override_preferred_header_row() -> None:
    rows = [["Трубы", "Фитинги"], ["ПВХ", "Муфты"], ["ПНД", "Отводы"], ["ППР", "Тройники"]]

    default = parse_rows(rows)
    assert [c.name for c in default.categories] == ["ППР", "Тройники"]

    tuned = parse_rows(rows, ImportSettings(preferred_header_row=None))
    assert tree_as_dict(tuned) == {
        "Трубы": ["ПВХ", "ПНД", "ППР"],
        "Фитинги": ["Муфты", "Отводы", "Тройники"],
    }


def test_cp1251_csv_upload() -> None:
    content = "category;subcategory\nТрубы;ПВХ\n".encode("cp1251")
    result = parse_upload(content, filename="legacy.csv")
    assert tree_as_dict(result) == {"Трубы": ["ПВХ"]}


@pytest.mark.parametrize(
    "filename, content_type, content, expected",
    [
        ("taxonomy.csv", None, b"", FILE_KIND_CSV),
        ("TAXONOMY.CSV", None, b"", FILE_KIND_CSV),
        ("upload", "text/csv", b"", FILE_KIND_CSV),
        ("taxonomy.xlsx", None, b"", FILE_KIND_XLSX),
        (
            "upload",
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            b"",
            FILE_KIND_XLSX,
        ),
        ("upload", "application/octet-stream", b"PK\x03\x04....", FILE_KIND_XLSX),
        ("notes.txt", None, b"a;b", FILE_KIND_CSV),
    ],
)
def test_detect_file_kind(filename, content_type, content, expected) -> None:
    assert detect_file_kind(filename, content_type, content) == expected


def test_detect_file_kind_rejects_other_files() -> None:
    with pytest.raises(UnsupportedFileError):
        detect_file_kind("catalog.pdf", "application/pdf", b"%PDF-1.7")


def test_comma_separated_list_layout_upload() -> None:
    result = parse_upload(csv_bytes("category,subcategory", "Трубы,ПВХ"), filename="a.csv")
    assert tree_as_dict(result) == {"Трубы": ["ПВХ"]}
