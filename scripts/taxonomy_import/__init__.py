"""
Importador de taxonomía de catálogo.

Analiza archivos CSV/XLSX de categorías y subcategorías con formatos
heterogéneos y los concilia con la taxonomía almacenada.
"""

from .errors import (
    FileTooLargeError,
    InvalidModeError,
    TaxonomyImportError,
    TaxonomyStoreError,
    UnsupportedFileError,
)
from .export import export_taxonomy_csv
from .models import ImportSettings, ParseResult, ParsedCategory, ParsedSubcategory
from .parser import parse_csv, parse_rows, parse_upload, parse_workbook
from .service import import_taxonomy

__all__ = [
    "FileTooLargeError",
    "ImportSettings",
    "InvalidModeError",
    "ParseResult",
    "ParsedCategory",
    "ParsedSubcategory",
    "TaxonomyImportError",
    "TaxonomyStoreError",
    "UnsupportedFileError",
    "export_taxonomy_csv",
    "import_taxonomy",
    "parse_csv",
    "parse_rows",
    "parse_upload",
    "parse_workbook",
]
