"""
Shared pytest fixtures for knockout tests.

Running tests:
    pytest tests/                  - full suite
    pytest tests/ -m "not slow"   - skip the large bracket simulations
"""
import pytest
import random
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from knockout.elimination import advance_round
from knockout.models import PairedContest, Participant


def make_participants(count):
    return [Participant(i + 1, f"Player {i + 1}") for i in range(count)]


def same_contents(first, second):
    """Whether two contests are the same kind with the same slots and winner."""
    return (
        type(first) is type(second)
        and first.slot_a == second.slot_a
        and first.slot_b == second.slot_b
        and first.winner == second.winner
    )


def simulate_bracket(bracket, rng):
    """
    Play a bracket to the end, picking every paired contest's winner at random.

    Returns a dict with the champion, the losers in elimination order, the
    number of paired contests played, and per round the entrants placed and
    the contest count.
    """
    played = 0
    losers = []
    placed_per_round = []
    contests_per_round = []
    for index in range(bracket.total_rounds):
        if index > 0:
            advancement = advance_round(bracket, index - 1, index, rng=rng)
            placed_per_round.append(len(advancement.entrants))
        else:
            placed_per_round.append(sum(len(c.participants) for c in bracket.rounds[0].contests))
        round_ = bracket.rounds[index]
        contests_per_round.append(len(round_.contests))
        for contest in round_.contests:
            if isinstance(contest, PairedContest):
                contest.record_winner(rng.choice([contest.slot_a, contest.slot_b]))
                losers.append(contest.loser)
                played += 1
    final = bracket.rounds[-1].contests[0]
    return {
        'champion': final.winner,
        'losers': losers,
        'played': played,
        'placed_per_round': placed_per_round,
        'contests_per_round': contests_per_round,
    }


@pytest.fixture
def rng():
    """Seeded random source so failures can be replayed."""
    return random.Random(20240601)


@pytest.fixture
def participants():
    return make_participants


@pytest.fixture
def simulate():
    return simulate_bracket


class ScriptedRoller:
    """Returns queued draw values in order."""

    def __init__(self, values):
        self.values = list(values)
        self.calls = []

    def __call__(self, participant):
        self.calls.append(participant.id)
        return self.values.pop(0)


@pytest.fixture
def scripted_roller():
    return ScriptedRoller
