"""
Configuración de la aplicación usando variables de entorno.
"""
import os
from dotenv import load_dotenv

# Cargar variables de entorno desde .env
load_dotenv()


def _optional_int(value):
    """Entero o None si la variable está vacía."""
    value = (value or '').strip()
    return int(value) if value else None


def get_db_config():
    """
    Obtiene la configuración de la base de datos desde variables de entorno.

    Returns:
        dict: Diccionario con los parámetros de conexión a PostgreSQL
    """
    return {
        'host': os.getenv('DB_HOST', 'localhost'),
        'port': os.getenv('DB_PORT', '5432'),
        'database': os.getenv('DB_NAME', 'stalviapp'),
        'user': os.getenv('DB_USER', 'postgres'),
        'password': os.getenv('DB_PASSWORD', '')
    }


def get_import_config():
    """
    Obtiene los parámetros de importación de taxonomía.

    Los umbrales del filtro de descripciones se ajustaron con datos de un
    comercio concreto; se exponen aquí para poder afinarlos sin tocar código.

    Returns:
        dict: Parámetros del importador (tamaño máximo, locale, umbrales)
    """
    return {
        'max_file_size': int(os.getenv('TAXONOMY_MAX_FILE_SIZE', str(5 * 1024 * 1024))),
        'locale': os.getenv('TAXONOMY_LOCALE', 'ru'),
        'header_scan_limit': int(os.getenv('TAXONOMY_HEADER_SCAN_LIMIT', '10')),
        'preferred_header_row': _optional_int(os.getenv('TAXONOMY_PREFERRED_HEADER_ROW', '3')),
        'desc_max_length': int(os.getenv('TAXONOMY_DESC_MAX_LENGTH', '80')),
        'desc_max_words': int(os.getenv('TAXONOMY_DESC_MAX_WORDS', '12')),
        'desc_sentence_words': int(os.getenv('TAXONOMY_DESC_SENTENCE_WORDS', '6')),
        'desc_comma_words': int(os.getenv('TAXONOMY_DESC_COMMA_WORDS', '8')),
        'download_timeout': int(os.getenv('TAXONOMY_DOWNLOAD_TIMEOUT', '30')),
    }
