from __future__ import annotations

import io
from typing import Iterable, List

import openpyxl
import pytest

from taxonomy_import.models import ImportSettings
from taxonomy_import.store import MemoryTaxonomyStore


@pytest.fixture()
def store() -> MemoryTaxonomyStore:
    return MemoryTaxonomyStore()


@pytest.fixture()
def settings() -> ImportSettings:
    return ImportSettings()


def make_xlsx(rows: Iterable[List[object]], title: str = "Taxonomy") -> bytes:
    workbook = openpyxl.Workbook()
    sheet = workbook.active
    sheet.title = title
    for row in rows:
        sheet.append(list(row))
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def csv_bytes(*lines: str) -> bytes:
    return ("\n".join(lines) + "\n").encode("utf-8")


SCENARIO_A = csv_bytes(
    "category_ru;subcategory_ru",
    "Смесители;Джойстики",
    "Смесители;Картриджи",
    "Сифоны;Трапы",
)
