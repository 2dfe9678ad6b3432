from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ai_agents.services.models import PersistedIdea, ResearchPackage
from server.errors import PersistenceError
from storage.sqlite.database import dict_factory, get_connection

logger = logging.getLogger(__name__)


def ensure_ideas_table(db_path: Optional[Union[str, Path]] = None) -> None:
    with get_connection(db_path) as conn:
        cur = conn.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS ideas (
                id TEXT PRIMARY KEY,
                topic TEXT NOT NULL,
                style TEXT,
                research_data TEXT NOT NULL,
                created_via_cron INTEGER DEFAULT 0,
                created_at TEXT DEFAULT (strftime('%Y-%m-%d %H:%M:%f', 'now'))
            )
            """
        )
        cur.execute("CREATE INDEX IF NOT EXISTS idx_ideas_created ON ideas(created_at DESC)")
        conn.commit()


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _row_to_idea(row: Dict[str, Any]) -> PersistedIdea:
    try:
        research_data = json.loads(row.get("research_data") or "{}")
    except json.JSONDecodeError:
        logger.warning("Idea %s has unreadable research data", row.get("id"))
        research_data = {}
    return PersistedIdea(
        id=row["id"],
        topic=row["topic"],
        style=row.get("style"),
        package=ResearchPackage.from_dict(research_data),
        automated=bool(row.get("created_via_cron")),
        created_at=row.get("created_at"),
    )


class IdeaRepository:
    """sqlite-backed store for generated research ideas."""

    def __init__(self, db_path: Optional[Union[str, Path]] = None) -> None:
        self._db_path = db_path
        ensure_ideas_table(db_path)

    def save_idea(
        self,
        idea_id: str,
        topic: str,
        style: Optional[str],
        package: ResearchPackage,
        automated: bool = False,
    ) -> None:
        research_json = json.dumps(package.to_dict(), ensure_ascii=False)
        try:
            with get_connection(self._db_path) as conn:
                cur = conn.cursor()
                cur.execute(
                    """
                    INSERT INTO ideas (id, topic, style, research_data, created_via_cron)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (idea_id, topic, style, research_json, 1 if automated else 0),
                )
                conn.commit()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to save idea {idea_id}: {exc}") from exc

    def get_idea_by_id(self, idea_id: str) -> Optional[PersistedIdea]:
        with get_connection(self._db_path) as conn:
            conn.row_factory = dict_factory
            cur = conn.cursor()
            cur.execute(
                """
                SELECT id, topic, style, research_data, created_via_cron, created_at
                FROM ideas
                WHERE id = ?
                """,
                (idea_id,),
            )
            row = cur.fetchone()
        return _row_to_idea(row) if row else None

    def get_all_ideas(self, search: Optional[str] = None) -> List[PersistedIdea]:
        query = """
            SELECT id, topic, style, research_data, created_via_cron, created_at
            FROM ideas
        """
        params: tuple = ()
        term = (search or "").strip()
        if term:
            query += """
            WHERE lower(topic) LIKE ? ESCAPE '\\'
               OR lower(coalesce(style, '')) LIKE ? ESCAPE '\\'
               OR lower(research_data) LIKE ? ESCAPE '\\'
            """
            like = f"%{_escape_like(term.lower())}%"
            params = (like, like, like)
        query += " ORDER BY created_at DESC, rowid DESC"

        with get_connection(self._db_path) as conn:
            conn.row_factory = dict_factory
            cur = conn.cursor()
            cur.execute(query, params)
            rows = cur.fetchall()
        return [_row_to_idea(row) for row in rows]

    def delete_idea(self, idea_id: str) -> bool:
        with get_connection(self._db_path) as conn:
            cur = conn.cursor()
            cur.execute("DELETE FROM ideas WHERE id = ?", (idea_id,))
            conn.commit()
            return cur.rowcount > 0
