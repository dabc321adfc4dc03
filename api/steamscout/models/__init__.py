from steamscout.models.catalog import (
    EMPTY_METADATA,
    CandidateItem,
    EnrichedMetadata,
    RecommendationResult,
    ScoredCandidate,
    TasteProfile,
)
from steamscout.models.library import LibraryEntry, LibrarySnapshot, PlayerProfile, ProfileSnapshot, Visibility
from steamscout.models.valuation import ValuationResult

__all__ = [
    "CandidateItem",
    "EMPTY_METADATA",
    "EnrichedMetadata",
    "LibraryEntry",
    "LibrarySnapshot",
    "PlayerProfile",
    "ProfileSnapshot",
    "RecommendationResult",
    "ScoredCandidate",
    "TasteProfile",
    "ValuationResult",
    "Visibility",
]
