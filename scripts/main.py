#!/usr/bin/env python3
"""
CLI para importar y exportar la taxonomía de catálogo.

Uso:
    python main.py taxonomy import archivo.xlsx                 # Vista previa
    python main.py taxonomy import archivo.csv --mode import    # Crear/actualizar
    python main.py taxonomy import archivo.csv --mode sync      # El archivo es la fuente completa
    python main.py taxonomy import --url https://.../cat.csv --mode import

    python main.py taxonomy export --output taxonomy.csv        # Exportar taxonomía activa
    python main.py db init                                      # Crear tablas
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

import database
from config import get_import_config
from taxonomy_import import ImportSettings, export_taxonomy_csv, import_taxonomy
from taxonomy_import.http_client import HttpClient
from taxonomy_import.models import MODE_PREVIEW, MODES
from taxonomy_import.store import PostgresTaxonomyStore

# Configuración de logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def get_settings() -> ImportSettings:
    """Ajustes del importador desde variables de entorno."""
    return ImportSettings.from_config(get_import_config())


def cmd_taxonomy_import(args):
    """Comando: taxonomy import"""
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    settings = get_settings()

    if args.url:
        client = HttpClient(timeout=settings.download_timeout, max_size=settings.max_file_size)
        downloaded = client.download(args.url)
        if downloaded is None:
            logger.error(f"No se pudo descargar {args.url}")
            return 1
        content = downloaded.content
        filename = downloaded.filename
        content_type = downloaded.content_type
    else:
        path = Path(args.file)
        content = path.read_bytes()
        filename = path.name
        content_type = None

    store = None
    if args.mode != MODE_PREVIEW:
        store = PostgresTaxonomyStore(database.get_connection())

    try:
        response = import_taxonomy(
            content,
            filename=filename,
            mode=args.mode,
            store=store,
            content_type=content_type,
            settings=settings,
        )
    finally:
        if store is not None:
            database.close_connection()

    print(json.dumps(response, ensure_ascii=False, indent=2))
    return 1 if response["errors"] else 0


def cmd_taxonomy_export(args):
    """Comando: taxonomy export"""
    settings = get_settings()
    store = PostgresTaxonomyStore(database.get_connection())
    try:
        content = export_taxonomy_csv(store, locale=settings.locale)
    finally:
        database.close_connection()

    if args.output:
        Path(args.output).write_text(content, encoding="utf-8")
        logger.info(f"Taxonomía exportada a {args.output}")
    else:
        sys.stdout.write(content)
    return 0


def cmd_db_init(args):
    """Comando: db init"""
    try:
        return 0 if database.init_database() else 1
    finally:
        database.close_connection()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Importador de taxonomía de catálogo",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Comandos disponibles")

    # Comando: taxonomy
    tax_parser = subparsers.add_parser("taxonomy", help="Importar o exportar taxonomía")
    tax_subparsers = tax_parser.add_subparsers(dest="tax_command")

    # taxonomy import
    import_parser = tax_subparsers.add_parser("import", help="Importar archivo CSV/XLSX")
    source = import_parser.add_mutually_exclusive_group(required=True)
    source.add_argument("file", nargs="?", help="Archivo .csv o .xlsx")
    source.add_argument("--url", help="Descargar el archivo desde una URL")
    import_parser.add_argument(
        "--mode",
        choices=MODES,
        default=MODE_PREVIEW,
        help="preview (sin cambios), import o sync (desactiva lo ausente)",
    )
    import_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Mostrar información detallada",
    )
    import_parser.set_defaults(func=cmd_taxonomy_import)

    # taxonomy export
    export_parser = tax_subparsers.add_parser("export", help="Exportar taxonomía activa a CSV")
    export_parser.add_argument("--output", "-o", metavar="PATH", help="Archivo de salida")
    export_parser.set_defaults(func=cmd_taxonomy_export)

    # Comando: db
    db_parser = subparsers.add_parser("db", help="Gestión de base de datos")
    db_subparsers = db_parser.add_subparsers(dest="db_command")
    init_parser = db_subparsers.add_parser("init", help="Crear tablas de taxonomía")
    init_parser.set_defaults(func=cmd_db_init)

    return parser


def main(argv=None):
    """Punto de entrada del CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    try:
        sys.exit(args.func(args))
    except KeyboardInterrupt:
        logger.warning("Proceso interrumpido por el usuario")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
