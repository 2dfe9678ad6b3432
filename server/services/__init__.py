from .daily_idea_service import DailyIdeaService
from .package_assembly import IdeaPersistenceGate, assemble_package
from .research_pipeline import ResearchPipeline

__all__ = [
    "DailyIdeaService",
    "IdeaPersistenceGate",
    "ResearchPipeline",
    "assemble_package",
]
