"""
Excepciones del importador de taxonomía.

Los problemas de contenido del archivo no son excepciones: se devuelven como
``errors``/``warnings`` en el ParseResult. Estas clases cubren los fallos que
abortan la operación completa.
"""


class TaxonomyImportError(Exception):
    """Error base del importador."""


class UnsupportedFileError(TaxonomyImportError):
    """El archivo no es CSV ni XLSX."""


class FileTooLargeError(TaxonomyImportError):
    """El archivo supera el tamaño máximo permitido."""

    def __init__(self, size: int, limit: int):
        super().__init__(f"Archivo demasiado grande: {size} bytes (máximo {limit})")
        self.size = size
        self.limit = limit


class InvalidModeError(TaxonomyImportError, ValueError):
    """Modo de importación desconocido."""


class TaxonomyStoreError(TaxonomyImportError):
    """Fallo del almacenamiento durante la conciliación."""
