from .services.models import GenerationRequest, ResearchPackage, SectionKey
from .services.response_parser import parse_section
from .services.stages import STAGES

__all__ = [
    "GenerationRequest",
    "ResearchPackage",
    "SectionKey",
    "STAGES",
    "parse_section",
]
