import logging
import re
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select

from .errors import ConflictError, NotFoundError, ValidationError
from .game_registry import GameRegistry
from .models import db, game_table, row_to_dict
from .schema import list_game_tables

logger = logging.getLogger(__name__)

MAX_FIELD_LENGTH = 50

# CJK unified ideographs, ASCII letters, digits and whitespace
NAME_PATTERN = re.compile(r'^[一-龥a-zA-Z0-9\s]+$')


def _optional_text(value: Any, label: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{label} must be a string")
    return value if value.strip() else None


class MembershipManager:
    """
    Adds and removes a player across every game table at once.

    Both operations run in a single transaction, so a member is either added
    to all discovered tables or to none of them.
    """

    def __init__(self, registry: GameRegistry):
        self.registry = registry

    def validate_member(
        self,
        name: Any,
        nickname: Any = None,
        department: Any = None
    ) -> Dict[str, Optional[str]]:
        """Check the member fields and return their trimmed values."""
        if not isinstance(name, str) or not name.strip():
            raise ValidationError('Name is required')

        nickname = _optional_text(nickname, 'Nickname')
        department = _optional_text(department, 'Department')

        if len(name) > MAX_FIELD_LENGTH:
            raise ValidationError(f'Name must be at most {MAX_FIELD_LENGTH} characters')
        if nickname and len(nickname) > MAX_FIELD_LENGTH:
            raise ValidationError(f'Nickname must be at most {MAX_FIELD_LENGTH} characters')
        if department and len(department) > MAX_FIELD_LENGTH:
            raise ValidationError(f'Department must be at most {MAX_FIELD_LENGTH} characters')
        if not NAME_PATTERN.match(name):
            raise ValidationError('Name may only contain Chinese characters, letters, digits and spaces')

        return {
            'name': name.strip(),
            'nickname': nickname.strip() if nickname else None,
            'department': department.strip() if department else None,
        }

    def add_member(
        self,
        name: Any,
        nickname: Any = None,
        department: Any = None
    ) -> List[Dict[str, Any]]:
        """Insert a new player with a zero score into every game table."""
        member = self.validate_member(name, nickname, department)

        session = db.session
        try:
            tables = list_game_tables(session.connection(), self.registry.table_prefix)

            for table_name in tables:
                self._check_conflicts(table_name, member['name'], member['nickname'])

            results = []
            for table_name in tables:
                table = game_table(table_name)
                row = session.execute(
                    table.insert()
                    .values(score=0, **member)
                    .returning(*table.c)
                ).one()
                results.append({'game': table_name, 'player': row_to_dict(row)})

            session.commit()
        except Exception:
            session.rollback()
            logger.error(f"Adding member {member['name']!r} rolled back")
            raise

        logger.info(f"Added member {member['name']!r} to {len(results)} game tables")
        return results

    def delete_member(self, name: Any) -> List[Dict[str, Any]]:
        """Delete a player from every game table that has them."""
        if not isinstance(name, str) or not name.strip():
            raise ValidationError('Name is required')

        session = db.session
        try:
            tables = list_game_tables(session.connection(), self.registry.table_prefix)

            results = []
            for table_name in tables:
                table = game_table(table_name)
                rows = session.execute(
                    table.delete()
                    .where(table.c.name == name)
                    .returning(*table.c)
                ).all()
                for row in rows:
                    results.append({'game': table_name, 'deletedPlayer': row_to_dict(row)})

            if not results:
                raise NotFoundError(f'Player not found: {name}')

            session.commit()
        except Exception:
            session.rollback()
            raise

        logger.info(f"Deleted member {name!r} from {len(results)} game tables")
        return results

    def _check_conflicts(self, table_name: str, name: str, nickname: Optional[str]) -> None:
        table = game_table(table_name)

        name_count = db.session.execute(
            select(func.count()).select_from(table).where(table.c.name == name)
        ).scalar()
        if name_count:
            raise ConflictError(
                f'Player {name} already exists in game {table_name}',
                payload={'game': table_name, 'field': 'name'}
            )

        if nickname:
            nickname_count = db.session.execute(
                select(func.count()).select_from(table).where(table.c.nickname == nickname)
            ).scalar()
            if nickname_count:
                raise ConflictError(
                    f'Nickname {nickname} already exists in game {table_name}',
                    payload={'game': table_name, 'field': 'nickname'}
                )
