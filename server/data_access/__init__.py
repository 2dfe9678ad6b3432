from .idea_repository import IdeaRepository, ensure_ideas_table

__all__ = [
    "IdeaRepository",
    "ensure_ideas_table",
]
