"""Script text scanning for gating signals"""

from .script_format import ScriptFormat, ScriptScene, DEFAULT_SCRIPT_FORMAT
from .usage_history import (
    LeadCandidate,
    build_usage_history,
    score_character,
    identify_lead_character,
    mark_lead_character,
)
from .signals import extract_classification_signals, has_conflict_been_established

__all__ = [
    "ScriptFormat",
    "ScriptScene",
    "DEFAULT_SCRIPT_FORMAT",
    "LeadCandidate",
    "build_usage_history",
    "score_character",
    "identify_lead_character",
    "mark_lead_character",
    "extract_classification_signals",
    "has_conflict_been_established",
]
