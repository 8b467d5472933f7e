"""Access to the source and destination Git repositories."""

from autopatch.extraction.destination import DestinationRepository
from autopatch.extraction.git_extractor import GitExtractor

__all__ = [
    "GitExtractor",
    "DestinationRepository",
]
