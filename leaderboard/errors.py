"""Error taxonomy shared by the leaderboard services and the HTTP layer."""
from typing import Any, Dict, Optional


class LeaderboardError(Exception):
    """Base class for errors that map onto an HTTP status and a stable kind."""

    status_code: int = 500
    kind: str = 'server_error'
    message: str = 'An unexpected error occurred.'

    def __init__(self, message: Optional[str] = None, payload: Optional[Dict[str, Any]] = None):
        self.message = message or self.message
        self.payload = payload or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        data = {'error': self.kind, 'message': self.message}
        data.update(self.payload)
        return data


class ValidationError(LeaderboardError):
    status_code = 400
    kind = 'validation'
    message = 'Invalid request.'


class ConflictError(LeaderboardError):
    status_code = 409
    kind = 'conflict'
    message = 'Conflict detected.'


class NotFoundError(LeaderboardError):
    status_code = 404
    kind = 'not_found'
    message = 'Resource not found.'


class CsvImportError(LeaderboardError):
    """Raised when an uploaded CSV cannot be imported; nothing is written."""

    status_code = 500
    kind = 'import_error'
    message = 'CSV import failed.'


class ServerError(LeaderboardError):
    status_code = 500
    kind = 'server_error'
    message = 'Internal server error.'
