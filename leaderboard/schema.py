"""
Schema setup and discovery for the per-game tables.

Game tables are found by name at runtime: any table in the default schema
whose name starts with the configured prefix is treated as a game table.
Nothing here caches the result.
"""
import logging
from typing import Iterable, List

from sqlalchemy import inspect, text
from sqlalchemy.engine import Connection

from .game_registry import GameRegistry
from .models import db, game_metadata, game_table, is_valid_identifier

logger = logging.getLogger(__name__)


def initialize_schema(registry: GameRegistry) -> List[str]:
    """Create a table for every configured game if it does not exist yet."""
    tables = [game_table(name) for name in registry.names]
    try:
        game_metadata.create_all(bind=db.engine, tables=tables, checkfirst=True)
    except Exception:
        logger.exception("Failed to initialize game tables")
        raise

    logger.info(f"Game tables ready: {', '.join(registry.names) or '(none)'}")
    return list(registry.names)


def list_game_tables(connection: Connection, prefix: str = 'game') -> List[str]:
    """Return the sorted names of all game tables currently in the database."""
    names = inspect(connection).get_table_names()
    return sorted(
        name for name in names
        if name.startswith(prefix) and is_valid_identifier(name)
    )


def game_table_exists(connection: Connection, name: str) -> bool:
    if not is_valid_identifier(name):
        return False
    return inspect(connection).has_table(name)


def clear_all_game_tables(connection: Connection, tables: Iterable[str]) -> int:
    """Remove every row from the given tables and restart their id sequences.

    Runs inside the caller's transaction.
    """
    count = 0
    preparer = connection.dialect.identifier_preparer
    for name in tables:
        if connection.dialect.name == 'postgresql':
            connection.execute(text(f"TRUNCATE TABLE {preparer.quote(name)} RESTART IDENTITY"))
        else:
            # SQLite rowid tables restart numbering once emptied
            connection.execute(game_table(name).delete())
        count += 1

    logger.info(f"Cleared {count} game tables")
    return count
