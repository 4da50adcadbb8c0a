import logging
import os
import uuid
from collections import OrderedDict
from typing import List, Optional, Tuple

import pandas as pd
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.datastructures import FileStorage

from .errors import CsvImportError
from .game_registry import GameRegistry
from .models import db, game_table
from .schema import clear_all_game_tables, list_game_tables

logger = logging.getLogger(__name__)


def _clean_cell(row: List[str], index: int) -> Optional[str]:
    if index >= len(row):
        return None
    value = row[index].strip()
    return value or None


class CsvImporter:
    """
    Replaces the contents of every game table with the players listed in a CSV.

    Expected columns, by position: name, nickname, department. The first row
    is a header. The import is all-or-nothing: every game table is emptied
    and refilled inside a single transaction.
    """

    def __init__(self, registry: GameRegistry, upload_folder: str):
        self.registry = registry
        self.upload_folder = upload_folder

    def import_upload(self, upload: FileStorage) -> int:
        """Stage an uploaded file, import it and clean up the staging folder."""
        os.makedirs(self.upload_folder, exist_ok=True)
        filename = uuid.uuid4().hex
        path = os.path.join(self.upload_folder, filename)
        upload.save(path)

        try:
            count = self.import_file(path)
            self.remove_stale_uploads(keep=filename)
            return count
        finally:
            if os.path.exists(path):
                os.remove(path)

    def import_file(self, path: str) -> int:
        """Import a CSV from disk and return the number of players written."""
        rows = self._read_rows(path)
        data_rows = rows[1:]
        self._check_names(data_rows)

        session = db.session
        try:
            connection = session.connection()
            tables = list_game_tables(connection, self.registry.table_prefix)
            clear_all_game_tables(connection, tables)

            for line_number, row in enumerate(data_rows, start=2):
                name, nickname, department = self._row_values(row)
                for table_name in tables:
                    try:
                        self._insert_player(table_name, name, nickname, department)
                    except SQLAlchemyError as e:
                        raise CsvImportError(
                            f"Failed to insert into table {table_name}: {e.__class__.__name__}. "
                            f"Row: {line_number}, name: {name}, nickname: {nickname}, "
                            f"department: {department}",
                            payload={'row': line_number, 'table': table_name}
                        ) from e

            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"CSV import rolled back ({path}): {e}")
            raise CsvImportError(f"Database error during import: {e.__class__.__name__}") from e
        except Exception:
            session.rollback()
            logger.error(f"CSV import rolled back ({path})")
            raise

        logger.info(f"Imported {len(data_rows)} players into {len(tables)} game tables")
        return len(data_rows)

    def remove_stale_uploads(self, keep: Optional[str] = None) -> List[str]:
        """Delete every file left in the upload folder except ``keep``."""
        removed = []
        if not os.path.isdir(self.upload_folder):
            return removed

        for filename in os.listdir(self.upload_folder):
            path = os.path.join(self.upload_folder, filename)
            if filename == keep or not os.path.isfile(path):
                continue
            try:
                os.remove(path)
                removed.append(filename)
            except OSError as e:
                logger.warning(f"Could not remove stale upload {path}: {e}")

        if removed:
            logger.info(f"Removed {len(removed)} stale uploads")
        return removed

    def _read_rows(self, path: str) -> List[List[str]]:
        try:
            frame = pd.read_csv(
                path,
                header=None,
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
                encoding='utf-8-sig'
            )
        except pd.errors.EmptyDataError:
            return []
        except (pd.errors.ParserError, UnicodeDecodeError) as e:
            raise CsvImportError(f"Could not parse CSV file: {e}") from e

        return frame.fillna('').values.tolist()

    @staticmethod
    def _row_values(row: List[str]) -> Tuple[Optional[str], Optional[str], Optional[str]]:
        return _clean_cell(row, 0), _clean_cell(row, 1), _clean_cell(row, 2)

    def _check_names(self, data_rows: List[List[str]]) -> None:
        """Reject blank names and names that appear more than once."""
        seen = OrderedDict()
        for line_number, row in enumerate(data_rows, start=2):
            name = _clean_cell(row, 0)
            if name is None:
                raise CsvImportError(
                    f"Row {line_number} has an empty name. Please fix the CSV file and upload it again.",
                    payload={'row': line_number}
                )
            seen.setdefault(name, []).append(line_number)

        duplicates = [(name, lines) for name, lines in seen.items() if len(lines) > 1]
        if not duplicates:
            return

        details = [
            f"{name} (rows {', '.join(str(line) for line in lines)})"
            for name, lines in duplicates
        ]
        raise CsvImportError(
            "Duplicate names found in CSV file, import aborted:\n"
            + '\n'.join(details)
            + "\nPlease fix the CSV file and upload it again.",
            payload={'duplicates': [{'name': name, 'rows': lines} for name, lines in duplicates]}
        )

    def _insert_player(
        self,
        table_name: str,
        name: str,
        nickname: Optional[str],
        department: Optional[str]
    ) -> None:
        table = game_table(table_name)
        db.session.execute(
            table.insert().values(name=name, score=0, nickname=nickname, department=department)
        )
