"""
Módulo para manejar la conexión a PostgreSQL.
"""
import logging
import os
import psycopg2
from config import get_db_config

logger = logging.getLogger(__name__)

# Variable global para la conexión
_connection = None


def get_connection():
    """
    Obtiene una conexión a la base de datos PostgreSQL.
    Si ya existe una conexión activa, la reutiliza.

    Returns:
        psycopg2.connection: Conexión a la base de datos

    Raises:
        psycopg2.OperationalError: Si no se puede conectar a la base de datos
    """
    global _connection

    if _connection is None or _connection.closed:
        config = get_db_config()
        try:
            _connection = psycopg2.connect(**config)
            logger.info("✓ Conexión a la base de datos establecida")
        except psycopg2.OperationalError as e:
            logger.error(f"✗ Error al conectar a la base de datos: {e}")
            logger.error("⚠ Verifica que PostgreSQL esté en ejecución, que la base de datos "
                         "exista y que las credenciales de .env sean correctas")
            raise
        except psycopg2.Error as e:
            logger.error(f"✗ Error de base de datos: {e}")
            raise

    return _connection


def close_connection():
    """
    Cierra la conexión a la base de datos.
    """
    global _connection

    if _connection and not _connection.closed:
        _connection.close()
        _connection = None
        logger.info("✓ Conexión a la base de datos cerrada")


def init_database():
    """
    Inicializa la base de datos ejecutando el script de esquema.
    Lee el archivo database_schema.sql y ejecuta las sentencias SQL.

    Returns:
        bool: True si el esquema se aplicó correctamente
    """
    conn = None
    try:
        conn = get_connection()
        cursor = conn.cursor()

        # Leer el archivo de esquema
        schema_path = os.path.join(os.path.dirname(__file__), 'database_schema.sql')
        with open(schema_path, 'r', encoding='utf-8') as f:
            schema_sql = f.read()

        # Ejecutar el esquema
        cursor.execute(schema_sql)
        conn.commit()
        cursor.close()

        logger.info("✓ Base de datos inicializada correctamente")
        return True

    except FileNotFoundError:
        logger.error("✗ No se encontró el archivo database_schema.sql")
        return False
    except psycopg2.Error as e:
        logger.error(f"✗ Error al inicializar la base de datos: {e}")
        if conn:
            conn.rollback()
        return False
