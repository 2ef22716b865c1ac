from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from taxonomy_import.normalize import normalize_cell, normalize_whitespace, strip_bom


class Unprintable:
    def __str__(self) -> str:
        raise RuntimeError("boom")


def test_normalize_cell_blank_values() -> None:
    assert normalize_cell(None) == ""
    assert normalize_cell("") == ""
    assert normalize_cell("   \t ") == ""


def test_normalize_cell_collapses_whitespace() -> None:
    assert normalize_cell("  Смесители \n  для  кухни ") == "Смесители для кухни"
    assert normalize_cell("Трубы ПВХ") == "Трубы ПВХ"


def test_normalize_cell_numbers() -> None:
    assert normalize_cell(12) == "12"
    assert normalize_cell(12.0) == "12"
    assert normalize_cell(1.5) == "1.5"
    assert normalize_cell(float("nan")) == ""
    assert normalize_cell(Decimal("3.10")) == "3.10"
    assert normalize_cell(True) == "true"


def test_normalize_cell_dates() -> None:
    assert normalize_cell(date(2024, 3, 1)) == "2024-03-01"
    assert normalize_cell(datetime(2024, 3, 1)) == "2024-03-01"
    assert normalize_cell(datetime(2024, 3, 1, 10, 30)) == "2024-03-01 10:30:00"


def test_normalize_cell_never_raises() -> None:
    assert normalize_cell(Unprintable()) == ""


def test_bom_is_removed() -> None:
    assert strip_bom("\ufeffcategory") == "category"
    assert normalize_whitespace("\ufeff  Трубы ") == "Трубы"
