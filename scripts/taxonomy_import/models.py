"""
Modelos de datos del importador de taxonomía.

Define el árbol normalizado que produce el parser, la vista de los registros
persistidos y el informe de conciliación.
"""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

# Modos de importación
MODE_PREVIEW = "preview"
MODE_IMPORT = "import"
MODE_SYNC = "sync"
MODES = (MODE_PREVIEW, MODE_IMPORT, MODE_SYNC)

# Tipos de entidad persistida
CATEGORY = "category"
SUBCATEGORY = "subcategory"
KINDS = (CATEGORY, SUBCATEGORY)

DEFAULT_LOCALE = "ru"


@dataclass
class ParsedSubcategory:
    """Subcategoría tal como aparece en el archivo."""

    name: str
    sort_order: int


@dataclass
class ParsedCategory:
    """Categoría del archivo con sus subcategorías en orden de aparición."""

    name: str
    sort_order: int
    subcategories: List[ParsedSubcategory] = field(default_factory=list)

    def subcategory_names(self) -> List[str]:
        return [sub.name for sub in self.subcategories]


@dataclass
class Counts:
    categories: int = 0
    subcategories: int = 0

    def add(self, kind: str, amount: int = 1) -> None:
        if kind == CATEGORY:
            self.categories += amount
        else:
            self.subcategories += amount


@dataclass
class ParseResult:
    """
    Resultado del parser.

    Si ``errors`` no está vacío el árbol no es utilizable y no debe
    conciliarse contra la base de datos. ``skipped`` cuenta lo que el
    constructor descartó (descripciones, filas sin categoría).
    """

    categories: List[ParsedCategory] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    skipped: Counts = field(default_factory=Counts)

    @property
    def ok(self) -> bool:
        return not self.errors

    def total_subcategories(self) -> int:
        return sum(len(c.subcategories) for c in self.categories)


@dataclass
class PersistedRecord:
    """Categoría o subcategoría almacenada (propiedad del store)."""

    id: int
    slug: Optional[str]
    sort_order: int
    is_active: bool
    category_id: Optional[int] = None  # solo subcategorías
    names: Dict[str, str] = field(default_factory=dict)  # locale -> nombre

    def name(self, locale: str = DEFAULT_LOCALE) -> Optional[str]:
        return self.names.get(locale)


@dataclass
class ReconciliationReport:
    """Contadores de una importación."""

    totals: Counts = field(default_factory=Counts)
    created: Counts = field(default_factory=Counts)
    updated: Counts = field(default_factory=Counts)
    skipped: Counts = field(default_factory=Counts)

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para la respuesta."""
        return asdict(self)


@dataclass(frozen=True)
class ImportSettings:
    """Parámetros del importador, normalmente leídos de config.get_import_config()."""

    max_file_size: int = 5 * 1024 * 1024
    locale: str = DEFAULT_LOCALE
    header_scan_limit: int = 10
    preferred_header_row: Optional[int] = 3
    desc_max_length: int = 80
    desc_max_words: int = 12
    desc_sentence_words: int = 6
    desc_comma_words: int = 8
    download_timeout: int = 30

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "ImportSettings":
        """Construye los ajustes ignorando claves desconocidas."""
        known = set(cls.__dataclass_fields__)
        return cls(**{k: v for k, v in config.items() if k in known})
