"""Services package - scorer registry and setup assembly for LTP Core."""

from ltpcore.services.scorer_registry import (
    GammaLTPScorer,
    LegacyLTPScorer,
    available_scorers,
    get_scorer,
)

from ltpcore.services.setup_service import (
    advance_setup_stage,
    build_detected_setup,
)

__all__ = [
    # Scorer Registry
    "GammaLTPScorer",
    "LegacyLTPScorer",
    "available_scorers",
    "get_scorer",
    # Setup Service
    "advance_setup_stage",
    "build_detected_setup",
]
