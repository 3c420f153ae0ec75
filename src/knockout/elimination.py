"""
Single elimination bracket construction and round progression.

Participant counts that are not powers of two are handled with byes: an odd
first round gets one solo contest, and whenever a later round receives an odd
number of entrants one of them sits that round out and rejoins one round
later. Which rounds receive such a returning participant is fixed when the
bracket is built; who it is depends on results and is decided as rounds close.
"""
import logging
import random
from typing import Dict, Iterable, List, Optional, Tuple, Union

from .errors import InvalidInput, OutOfSequence, StructuralImpossibility
from .models import (
    Bracket,
    Participant,
    PairedContest,
    PendingContest,
    Round,
    SoloContest,
)

logger = logging.getLogger(__name__)

_system_random = random.SystemRandom()


class ByeSelection:
    def __init__(self, placed_entrants, selected=None, target_round_index=None):
        self.placed_entrants = placed_entrants
        self.selected = selected
        self.target_round_index = target_round_index

    def __repr__(self):
        return (
            f"ByeSelection(placed_entrants={self.placed_entrants}, selected={self.selected}, "
            f"target_round_index={self.target_round_index})"
        )


class Advancement:
    """What happened when a round was filled from the previous round's results."""

    def __init__(self, round_index, entrants, merged_bye=None, selected_bye=None, bye_target_round_index=None):
        self.round_index = round_index
        self.entrants = entrants
        self.merged_bye = merged_bye
        self.selected_bye = selected_bye
        self.bye_target_round_index = bye_target_round_index

    def __repr__(self):
        return (
            f"Advancement(round_index={self.round_index}, entrants={len(self.entrants)}, "
            f"merged_bye={self.merged_bye}, selected_bye={self.selected_bye})"
        )


def _normalize_participants(participants) -> List[Participant]:
    """Accept Participant objects, (id, name) pairs or an {id: name} mapping."""
    if isinstance(participants, dict):
        items = list(participants.items())
    else:
        items = list(participants)

    normalized = []
    seen = set()
    for item in items:
        if isinstance(item, Participant):
            participant = item.fresh()
        else:
            pid, name = item
            participant = Participant(pid, name)
        if participant.is_placeholder:
            raise InvalidInput(f"Participant id {participant.id} is reserved")
        if participant.id in seen:
            raise InvalidInput(f"Duplicate participant id: {participant.id}")
        seen.add(participant.id)
        normalized.append(participant)
    return normalized


def plan_bye_join_rounds(first_round_contests: int) -> Tuple[List[int], set]:
    """
    Work out the contest count of every round after the first, and the round
    indices where a set-aside participant rejoins.

    Each round halves its incoming entrants. When the incoming count is odd,
    the leftover skips the round being sized and joins the one after it, so the
    next round's incoming count is the contests played plus that leftover.
    """
    sizes = []
    bye_join_rounds = set()
    remaining = first_round_contests
    while remaining > 1:
        contests = remaining // 2
        sizes.append(contests)
        appended_index = len(sizes)  # round 0 is the first round
        if remaining % 2 == 1:
            bye_join_rounds.add(appended_index + 1)
        remaining = contests + remaining % 2
    return sizes, bye_join_rounds


def build_bracket(participants: Union[Iterable, Dict], rng: Optional[random.Random] = None) -> Bracket:
    """
    Build a bracket from the registered participants.

    The first round is filled with shuffled pairings (and one already-won solo
    contest when the count is odd); later rounds are placeholders to be filled
    by advance_round.
    """
    players = _normalize_participants(participants)
    if not players:
        raise InvalidInput("Cannot build a bracket without participants")

    rng = rng or _system_random
    rng.shuffle(players)
    logger.debug("build_bracket: shuffled players = %s", [p.name for p in players])

    first_round = []
    for i in range(0, len(players), 2):
        if i + 1 < len(players):
            first_round.append(PairedContest(players[i], players[i + 1]))
            logger.debug("R1: pair = %s vs %s", players[i].name, players[i + 1].name)
        else:
            first_round.append(SoloContest(players[i]))
            logger.debug("R1: solo = %s (advances automatically)", players[i].name)

    sizes, bye_join_rounds = plan_bye_join_rounds(len(first_round))
    rounds = [Round(0, first_round)]
    for index, size in enumerate(sizes, start=1):
        rounds.append(Round(index, [PendingContest() for _ in range(size)]))
        logger.debug("Skeleton: round %d with %d contests", index + 1, size)

    for join_index in bye_join_rounds:
        if not 0 <= join_index < len(rounds):
            raise StructuralImpossibility(
                f"Bye join round {join_index} is outside a bracket of {len(rounds)} rounds"
            )

    bracket = Bracket(rounds, bye_join_rounds)
    logger.debug(
        "build_bracket: total_rounds=%d bye_join_rounds=%s",
        bracket.total_rounds, sorted(bracket.bye_join_rounds),
    )
    return bracket


def is_round_complete(round_: Round) -> bool:
    return all(contest.is_complete for contest in round_.contests)


def collect_winners(round_: Round, strict: bool = True) -> List[Participant]:
    """
    Return the winners of a round in contest order.

    An unfinished round is an error. With strict=False a partial list is
    returned instead, for previews of a round still in play: undecided paired
    contests contribute nothing and a solo contest without a recorded winner
    still sends its only participant through.
    """
    if strict and not is_round_complete(round_):
        raise OutOfSequence(f"Round {round_.index + 1} is not complete yet")

    winners = []
    for contest in round_.contests:
        if contest.winner is not None:
            winners.append(contest.winner)
        elif isinstance(contest, SoloContest) and not contest.slot_a.is_placeholder:
            winners.append(contest.slot_a)
    logger.debug("collect_winners: round %d -> %s", round_.index + 1, [w.name for w in winners])
    return winners


def merge_due_byes(entrants: List[Participant], bracket: Bracket, round_index: int) -> List[Participant]:
    """Add the participant set aside to rejoin at round_index, if any.

    Does not mark the bye as merged; the caller does that with
    Bracket.mark_bye_merged once the round is laid out.
    """
    bye = bracket.bye_assignments.get(round_index)
    if bye is None:
        return list(entrants)
    if round_index in bracket.merged_byes:
        raise OutOfSequence(f"{bye.name} already rejoined at round {round_index + 1}")
    logger.debug("merge_due_byes: %s rejoins at round %d", bye.name, round_index + 1)
    return list(entrants) + [bye]


def select_bye_if_needed(
    entrants: List[Participant],
    bracket: Bracket,
    round_index: int,
    rng: Optional[random.Random] = None,
) -> ByeSelection:
    """
    Set one entrant aside when the count is odd and the next round expects a
    returning participant. The pick is uniformly random so no bracket position
    is favoured.
    """
    target = round_index + 1
    if len(entrants) % 2 == 0 or target not in bracket.bye_join_rounds:
        return ByeSelection(list(entrants))
    if not 0 <= target < bracket.total_rounds:
        raise StructuralImpossibility(
            f"Bye join round {target} is outside a bracket of {bracket.total_rounds} rounds"
        )

    rng = rng or _system_random
    pick = rng.randrange(len(entrants))
    selected = entrants[pick]
    placed = entrants[:pick] + entrants[pick + 1:]
    logger.debug("select_bye_if_needed: %s sits out round %d, rejoins at %d",
                 selected.name, round_index + 1, target + 1)
    return ByeSelection(placed, selected, target)


def place_entrants(round_: Round, entrants: List[Participant]):
    """
    Lay entrants into the round's contests two at a time, replacing whatever
    the round held before. A contest that gets one entrant becomes a solo
    contest; contests past the last entrant go back to placeholders.
    """
    if len(entrants) > 2 * len(round_.contests):
        raise OutOfSequence(
            f"{len(entrants)} entrants do not fit the {len(round_.contests)} contests of round {round_.index + 1}"
        )

    contests = []
    for i in range(len(round_.contests)):
        pair = entrants[2 * i:2 * i + 2]
        if len(pair) == 2:
            contests.append(PairedContest(pair[0].fresh(), pair[1].fresh()))
        elif len(pair) == 1:
            contests.append(SoloContest(pair[0].fresh()))
        else:
            contests.append(PendingContest())
    round_.contests = contests
    logger.debug("place_entrants: round %d -> %s", round_.index + 1, contests)


def advance_round(
    bracket: Bracket,
    completed_round_index: int,
    next_round_index: int,
    rng: Optional[random.Random] = None,
) -> Advancement:
    """
    Fill the next round from a finished one.

    Winners are collected, a participant due to rejoin is merged in, one entrant
    is set aside if the count is odd and a rejoin is planned for the round after,
    and the remaining entrants are placed.
    """
    if next_round_index != completed_round_index + 1:
        raise OutOfSequence(
            f"Cannot advance from round {completed_round_index + 1} to round {next_round_index + 1}"
        )
    if completed_round_index < 0 or next_round_index >= bracket.total_rounds:
        raise OutOfSequence(
            f"Round {next_round_index + 1} does not exist in a bracket of {bracket.total_rounds} rounds"
        )

    winners = collect_winners(bracket.rounds[completed_round_index])
    entrants = merge_due_byes(winners, bracket, next_round_index)
    merged_bye = bracket.bye_assignments.get(next_round_index)

    selection = select_bye_if_needed(entrants, bracket, next_round_index, rng)
    if selection.selected is not None:
        if selection.target_round_index in bracket.bye_assignments:
            raise OutOfSequence(f"Round {selection.target_round_index + 1} already has a bye assigned")
        bracket.bye_assignments[selection.target_round_index] = selection.selected

    place_entrants(bracket.rounds[next_round_index], selection.placed_entrants)
    if merged_bye is not None:
        bracket.mark_bye_merged(next_round_index)

    logger.info(
        "Round %d filled with %d entrants (bye in: %s, bye out: %s)",
        next_round_index + 1, len(selection.placed_entrants),
        merged_bye.name if merged_bye else None,
        selection.selected.name if selection.selected else None,
    )
    return Advancement(
        next_round_index,
        selection.placed_entrants,
        merged_bye=merged_bye,
        selected_bye=selection.selected,
        bye_target_round_index=selection.target_round_index,
    )


def is_bracket_complete(bracket: Bracket) -> bool:
    return bool(bracket.rounds) and is_round_complete(bracket.rounds[-1])


def champion(bracket: Bracket) -> Participant:
    """Winner of the final contest."""
    if not is_bracket_complete(bracket):
        raise OutOfSequence("The final has not been decided yet")
    final = bracket.rounds[-1].contests[0]
    return final.winner if final.winner is not None else final.slot_a
