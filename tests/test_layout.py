from __future__ import annotations

import pytest

from taxonomy_import.layout import (
    ColumnLayout,
    ListLayout,
    detect_layout,
    is_list_header,
    pick_header_row_index,
)


@pytest.mark.parametrize(
    "header",
    [
        ["category", "subcategory"],
        ["CATEGORY", "SubCategory"],
        ["category_ru", "subcategory_ru"],
        ["Категория", "Подкатегория"],
        ["Категория товара", "подкатегории"],
    ],
)
def test_list_header_variants(header) -> None:
    assert is_list_header(header)
    assert detect_layout([header, ["Трубы", "ПВХ"]]) == ListLayout(header_index=0)


def test_list_header_can_appear_below_title_rows() -> None:
    rows = [["Каталог 2024"], ["Категория", "Подкатегория"], ["Трубы", "ПВХ"]]
    assert detect_layout(rows) == ListLayout(header_index=1)


def test_grid_without_list_header_is_column_layout() -> None:
    rows = [["Трубы", "Фитинги"], ["ПВХ", "Муфты"]]
    assert detect_layout(rows) == ColumnLayout(header_index=0)


def test_single_column_is_never_list_header() -> None:
    assert not is_list_header(["category"])


def test_pick_header_prefers_populated_row_three() -> None:
    rows = [["Прайс"], ["Компания", "Адрес", "Телефон"], ["x"], ["Трубы", "Фитинги"], ["ПВХ", "Муфты"]]
    assert pick_header_row_index(rows) == 3


def test_pick_header_falls_back_to_widest_row() -> None:
    rows = [["Прайс"], ["Трубы", "Фитинги", "Краны"], ["ПВХ", "Муфты"]]
    assert pick_header_row_index(rows) == 1
    assert pick_header_row_index(rows + [["a"], ["b"]], preferred_row=None) == 1


def test_pick_header_only_scans_limit() -> None:
    rows = [["a"]] * 3 + [["b", "c", "d"]]
    assert pick_header_row_index(rows, scan_limit=3, preferred_row=None) == 0
