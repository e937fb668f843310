"""Infrastructure layer exports."""

from .adapters import (
    AdapterOutcome,
    AdapterSet,
    PlaceholderAdapter,
    ReportAdapter,
    ReportSections,
    TextExtractionAdapter,
    TranscriptionAdapter,
    call_adapter,
    configure_adapters,
    get_adapters,
)
from .groq import GroqClient
from .items import ItemStore
from .projects import InMemoryProjectRepository, ProjectRepository

__all__ = [
    "AdapterOutcome",
    "AdapterSet",
    "GroqClient",
    "InMemoryProjectRepository",
    "ItemStore",
    "PlaceholderAdapter",
    "ProjectRepository",
    "ReportAdapter",
    "ReportSections",
    "TextExtractionAdapter",
    "TranscriptionAdapter",
    "call_adapter",
    "configure_adapters",
    "get_adapters",
]
