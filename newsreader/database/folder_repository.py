"""
Folder repository - groups of feeds.
"""

from .connection import DatabaseConnection
from .converters import row_to_folder
from .models import DBFolder


class FolderRepository:
    """Repository for folder operations."""

    def __init__(self, db: DatabaseConnection):
        self._db = db

    def add(self, name: str) -> int:
        """Add a folder at the end of the list. Returns folder ID."""
        with self._db.conn() as conn:
            row = conn.execute(
                "SELECT COALESCE(MAX(position), -1) + 1 as next FROM folders"
            ).fetchone()
            cursor = conn.execute(
                "INSERT INTO folders (name, position) VALUES (?, ?)",
                (name, row["next"])
            )
            return cursor.lastrowid

    def get(self, folder_id: int) -> DBFolder | None:
        with self._db.conn() as conn:
            row = conn.execute(
                "SELECT * FROM folders WHERE id = ?", (folder_id,)
            ).fetchone()
            return row_to_folder(row) if row else None

    def get_all(self) -> list[DBFolder]:
        with self._db.conn() as conn:
            rows = conn.execute(
                "SELECT * FROM folders ORDER BY position ASC, id ASC"
            ).fetchall()
            return [row_to_folder(row) for row in rows]

    def rename(self, folder_id: int, name: str):
        with self._db.conn() as conn:
            conn.execute(
                "UPDATE folders SET name = ? WHERE id = ?", (name, folder_id)
            )

    def delete(self, folder_id: int) -> bool:
        """Delete a folder. Its feeds stay, with no folder."""
        with self._db.conn() as conn:
            cursor = conn.execute("DELETE FROM folders WHERE id = ?", (folder_id,))
            return cursor.rowcount > 0
