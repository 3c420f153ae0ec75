"""
Bracket data shaped for renderers (chat messages, web pages, terminals).
"""
from typing import Dict, List, Optional

from .elimination import champion, is_bracket_complete, is_round_complete
from .models import Bracket, Contest, Participant


def get_round_name(round_index: int, total_rounds: int) -> str:
    """Get the name of a round from its distance to the final."""
    remaining = total_rounds - round_index
    if remaining == 1:
        return "Final"
    elif remaining == 2:
        return "Semifinal"
    elif remaining == 3:
        return "Quarterfinal"
    else:
        return f"Round {round_index + 1}"


def _participant_dict(participant: Optional[Participant]) -> Optional[Dict]:
    if participant is None:
        return None
    return {'id': participant.id, 'name': participant.name, 'last_roll': participant.last_roll}


def contest_display(contest: Contest, match_number: int) -> Dict:
    return {
        'kind': contest.kind,
        'match_number': match_number,
        'slot_a': _participant_dict(contest.slot_a),
        'slot_b': _participant_dict(contest.slot_b),
        'winner': _participant_dict(contest.winner),
        'is_complete': contest.is_complete,
        'is_placeholder': contest.kind == 'pending',
    }


def get_bracket_display(bracket: Bracket) -> Dict:
    """
    Get bracket data formatted for display.

    Returns dict with:
    - rounds: list of {index, name, contests, is_complete}
    - total_rounds
    - bye_join_rounds: sorted round indices where a set-aside player rejoins
    - byes: list of {round_index, participant, merged} for bound byes
    - matches_per_round: contests needing a draw, per round
    - champion: participant dict once the final is decided
    """
    rounds: List[Dict] = []
    matches_per_round = {}
    for round_ in bracket.rounds:
        name = get_round_name(round_.index, bracket.total_rounds)
        rounds.append({
            'index': round_.index,
            'name': name,
            'contests': [contest_display(c, i + 1) for i, c in enumerate(round_.contests)],
            'is_complete': is_round_complete(round_),
        })
        matches_per_round[name] = sum(1 for c in round_.contests if c.kind != 'solo')

    byes = [
        {
            'round_index': index,
            'participant': _participant_dict(participant),
            'merged': index in bracket.merged_byes,
        }
        for index, participant in sorted(bracket.bye_assignments.items())
    ]

    return {
        'rounds': rounds,
        'total_rounds': bracket.total_rounds,
        'bye_join_rounds': sorted(bracket.bye_join_rounds),
        'byes': byes,
        'matches_per_round': matches_per_round,
        'champion': _participant_dict(champion(bracket)) if is_bracket_complete(bracket) else None,
    }
