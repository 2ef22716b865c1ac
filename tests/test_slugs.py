from __future__ import annotations

import pytest

from taxonomy_import.models import CATEGORY, SUBCATEGORY
from taxonomy_import.slugs import SlugAssigner, slugify


@pytest.mark.parametrize(
    "name, expected",
    [
        ("Смесители", "smesiteli"),
        ("Трубы ПВХ", "truby-pvkh"),
        ("Щётки / Ёршики", "shchyotki-yorshiki"),
        ("Café Crème", "cafe-creme"),
        ("  --Fittings & Valves--  ", "fittings-valves"),
        ("Д.40", "d-40"),
        ("!!!", ""),
        ("", ""),
    ],
)
def test_slugify(name, expected) -> None:
    assert slugify(name) == expected


def test_assign_returns_base_when_free(store) -> None:
    assert SlugAssigner(store, CATEGORY).assign("truby") == "truby"


def test_assign_empty_base_returns_none(store) -> None:
    assert SlugAssigner(store, CATEGORY).assign("") is None


def test_assign_appends_suffix_against_store_and_claimed(store) -> None:
    store.create(CATEGORY, slug="truby", sort_order=0)
    assigner = SlugAssigner(store, CATEGORY)

    assert assigner.assign("truby") == "truby-2"
    assert assigner.assign("truby") == "truby-3"


def test_assign_excludes_own_record(store) -> None:
    record_id = store.create(CATEGORY, slug="truby", sort_order=0)
    assert SlugAssigner(store, CATEGORY).assign("truby", exclude_id=record_id) == "truby"


def test_slugs_are_scoped_per_kind(store) -> None:
    category_id = store.create(CATEGORY, slug="truby", sort_order=0)
    store.create(SUBCATEGORY, slug="truby-pvkh", sort_order=0, category_id=category_id)

    assert SlugAssigner(store, SUBCATEGORY).assign("truby") == "truby"
    assert SlugAssigner(store, CATEGORY).assign("truby-pvkh") == "truby-pvkh"


def test_claimed_slug_is_not_reassigned(store) -> None:
    assigner = SlugAssigner(store, CATEGORY)
    assigner.claim("truby")
    assert assigner.assign("truby") == "truby-2"
