import re
from datetime import date, datetime
from typing import Any, Dict

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import Column, DateTime, Integer, MetaData, String, Table, func

db = SQLAlchemy()

# Handles for the per-game tables. Kept apart from db.metadata because the
# set of game tables is discovered at runtime rather than declared.
game_metadata = MetaData()

IDENTIFIER_RE = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')


def is_valid_identifier(name: str) -> bool:
    return isinstance(name, str) and bool(IDENTIFIER_RE.match(name))


def _game_columns():
    return [
        Column('id', Integer, primary_key=True, autoincrement=True),
        Column('name', String(100), nullable=False),
        Column('nickname', String(100), nullable=True),
        Column('department', String(100), nullable=True),
        Column('score', Integer, nullable=False, default=0, server_default='0'),
        Column('created_at', DateTime, server_default=func.now()),
        Column('updated_at', DateTime, server_default=func.now()),
    ]


def game_table(name: str) -> Table:
    """Return the Table handle for a game table, building it on first use.

    Every game table shares the same column set, so a handle can be built for
    any discovered table name without reflecting it.
    """
    if not is_valid_identifier(name):
        raise ValueError(f"Invalid game table name: {name!r}")

    table = game_metadata.tables.get(name)
    if table is None:
        table = Table(name, game_metadata, *_game_columns())
    return table


def row_to_dict(row) -> Dict[str, Any]:
    """Serialize a result row, rendering timestamps as ISO-8601 strings."""
    data = {}
    for key, value in row._mapping.items():
        if isinstance(value, (datetime, date)):
            value = value.isoformat()
        data[key] = value
    return data
