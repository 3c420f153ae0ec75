from .models import (
    TBD,
    Bracket,
    Contest,
    PairedContest,
    Participant,
    PendingContest,
    Round,
    SoloContest,
)
from .elimination import (
    Advancement,
    ByeSelection,
    advance_round,
    build_bracket,
    champion,
    collect_winners,
    is_bracket_complete,
    is_round_complete,
    merge_due_byes,
    place_entrants,
    select_bye_if_needed,
)
from .display import get_bracket_display
from .errors import (
    BracketError,
    InvalidInput,
    InvalidOutcome,
    KnockoutError,
    OutOfSequence,
    SessionError,
    StructuralImpossibility,
)

__all__ = [
    "TBD",
    "Bracket",
    "Contest",
    "PairedContest",
    "Participant",
    "PendingContest",
    "Round",
    "SoloContest",
    "Advancement",
    "ByeSelection",
    "advance_round",
    "build_bracket",
    "champion",
    "collect_winners",
    "is_bracket_complete",
    "is_round_complete",
    "merge_due_byes",
    "place_entrants",
    "select_bye_if_needed",
    "get_bracket_display",
    "BracketError",
    "InvalidInput",
    "InvalidOutcome",
    "KnockoutError",
    "OutOfSequence",
    "SessionError",
    "StructuralImpossibility",
]
