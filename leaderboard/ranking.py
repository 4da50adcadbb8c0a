import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select

from .errors import NotFoundError, ValidationError
from .game_registry import GameRegistry
from .models import db, game_table, row_to_dict
from .schema import game_table_exists, list_game_tables

logger = logging.getLogger(__name__)

DISPLAY_BY_NICKNAME = 1


class RankingService:
    """Leaderboard queries and score updates for individual game tables."""

    def __init__(self, registry: GameRegistry):
        self.registry = registry

    def _resolve_table(self, game_name: Any):
        if not isinstance(game_name, str) or not self.registry.is_game_table_name(game_name):
            raise ValidationError(f'Invalid game name: {game_name}')
        return game_table(game_name)

    def search_scores(self, game_name: Any) -> List[Dict[str, Any]]:
        """
        Return every player of a game ordered by score, highest first.
        A well-formed name for a table that does not exist fails in the
        database and surfaces as a server error.
        """
        table = self._resolve_table(game_name)
        query = (
            select(table.c.name, table.c.score, table.c.nickname, table.c.department)
            .order_by(table.c.score.desc())
        )
        return [row_to_dict(row) for row in db.session.execute(query)]

    def top3(self) -> Dict[str, List[Dict[str, Any]]]:
        """Return the three best players of every discovered game table."""
        results = {}
        for table_name in list_game_tables(db.session.connection(), self.registry.table_prefix):
            table = game_table(table_name)
            order = table.c.score.desc()
            query = (
                select(
                    func.dense_rank().over(order_by=order).label('dense_rank'),
                    func.rank().over(order_by=order).label('rank'),
                    func.row_number().over(order_by=order).label('row_number'),
                    table.c.name,
                    table.c.score,
                    table.c.nickname,
                    table.c.department,
                )
                .order_by(order)
                .limit(3)
            )
            results[table_name] = [row_to_dict(row) for row in db.session.execute(query)]
        return results

    def update_score(
        self,
        game_name: Any,
        player_name: Optional[str],
        nickname: Optional[str],
        new_score: Any,
        display_type: Any = 0
    ) -> Dict[str, Any]:
        """
        Set the score of one player in one game.

        display_type 1 looks the player up by nickname, anything else by name.
        """
        table = self._resolve_table(game_name)

        # int() would truncate 7.9 to 7
        if isinstance(new_score, bool) or (isinstance(new_score, float) and not new_score.is_integer()):
            raise ValidationError('newScore must be an integer')
        try:
            score = int(new_score)
        except (TypeError, ValueError):
            raise ValidationError('newScore must be an integer')

        by_nickname = str(display_type) == str(DISPLAY_BY_NICKNAME)
        column, key = (table.c.nickname, nickname) if by_nickname else (table.c.name, player_name)
        if not isinstance(key, str) or not key:
            raise ValidationError('nickname is required' if by_nickname else 'playerName is required')

        session = db.session
        try:
            if not game_table_exists(session.connection(), table.name):
                raise NotFoundError(f'Game table not found: {table.name}')

            rows = session.execute(
                table.update()
                .where(column == key)
                .values(score=score, updated_at=func.now())
                .returning(*table.c)
            ).all()

            if not rows:
                label = 'nickname' if by_nickname else 'name'
                raise NotFoundError(f'No player with {label} {key} in {table.name}')

            session.commit()
        except Exception:
            session.rollback()
            raise

        logger.info(f"Updated score of {key!r} in {table.name} to {score}")
        return row_to_dict(rows[0])
