from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .models import is_valid_identifier


def _split_csv_setting(value: Optional[str]) -> Tuple[str, ...]:
    if not value:
        return ()
    return tuple(item.strip() for item in value.split(','))


def default_display_name(name: str) -> str:
    """Derive a label for a game with no configured display name."""
    return name.replace('game_', 'Game ')


@dataclass(frozen=True)
class Game:
    name: str
    display_name: str

    def to_dict(self) -> Dict[str, str]:
        return {
            'id': self.name,
            'name': self.name,
            'displayName': self.display_name,
        }


@dataclass(frozen=True)
class GameRegistry:
    """
    Immutable set of configured games.
    Built once from configuration in the app factory and handed to every
    service that needs it.
    """
    games: Tuple[Game, ...]
    table_prefix: str = 'game'

    def __post_init__(self):
        for game in self.games:
            if not self.is_game_table_name(game.name):
                raise ValueError(
                    f"Game identifier {game.name!r} must be a plain SQL identifier "
                    f"starting with {self.table_prefix!r}"
                )

    @classmethod
    def from_config(
        cls,
        game_names: str,
        display_names: Optional[str] = None,
        table_prefix: str = 'game'
    ) -> 'GameRegistry':
        names = [name for name in _split_csv_setting(game_names) if name]
        labels = _split_csv_setting(display_names)

        games = []
        for index, name in enumerate(names):
            label = labels[index] if index < len(labels) else ''
            games.append(Game(name=name, display_name=label or default_display_name(name)))

        return cls(games=tuple(games), table_prefix=table_prefix)

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(game.name for game in self.games)

    def get(self, name: str) -> Optional[Game]:
        for game in self.games:
            if game.name == name:
                return game
        return None

    def is_game_table_name(self, name: str) -> bool:
        """True when ``name`` follows the game table naming convention."""
        return is_valid_identifier(name) and name.startswith(self.table_prefix)

    def to_list(self):
        return [game.to_dict() for game in self.games]
