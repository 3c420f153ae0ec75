from typing import Dict, List, Optional, Set

from .errors import InvalidOutcome

TBD_ID = -1
TBD_NAME = "TBD"


class Participant:
    def __init__(self, id, name, last_roll=None):
        self.id = id
        self.name = name
        self.last_roll = last_roll  # Value of the most recent draw in the current contest

    @property
    def is_placeholder(self) -> bool:
        return self.id == TBD_ID

    def fresh(self) -> "Participant":
        """Copy of this participant with no draw recorded, for placing into a new contest."""
        return Participant(self.id, self.name)

    def __eq__(self, other):
        if not isinstance(other, Participant):
            return NotImplemented
        return self.id == other.id

    def __hash__(self):
        return hash(self.id)

    def __repr__(self):
        return f"Participant(id={self.id}, name={self.name}, last_roll={self.last_roll})"


TBD = Participant(TBD_ID, TBD_NAME)


class Contest:
    """Base class for the three kinds of contest a round can hold."""

    kind = None

    def __init__(self):
        self.winner: Optional[Participant] = None

    @property
    def slot_a(self) -> Participant:
        return TBD

    @property
    def slot_b(self) -> Optional[Participant]:
        return TBD

    @property
    def is_complete(self) -> bool:
        return self.winner is not None

    @property
    def participants(self) -> List[Participant]:
        """Real participants in this contest."""
        return [p for p in (self.slot_a, self.slot_b) if p is not None and not p.is_placeholder]


class PairedContest(Contest):
    kind = "paired"

    def __init__(self, slot_a: Participant, slot_b: Participant):
        super().__init__()
        self._slot_a = slot_a
        self._slot_b = slot_b

    @property
    def slot_a(self) -> Participant:
        return self._slot_a

    @property
    def slot_b(self) -> Participant:
        return self._slot_b

    @property
    def loser(self) -> Optional[Participant]:
        if self.winner is None:
            return None
        return self._slot_b if self.winner == self._slot_a else self._slot_a

    def record_winner(self, participant: Participant):
        if self.winner is not None:
            raise InvalidOutcome(f"Contest {self!r} is already decided")
        if participant != self._slot_a and participant != self._slot_b:
            raise InvalidOutcome(f"{participant.name} is not playing in {self!r}")
        self.winner = self._slot_a if participant == self._slot_a else self._slot_b

    def __repr__(self):
        return f"PairedContest(slot_a={self._slot_a.name}, slot_b={self._slot_b.name}, winner={self.winner and self.winner.name})"


class SoloContest(Contest):
    """A single entrant who advances without a draw.

    Auto-won on construction unless the entrant is still the TBD sentinel.
    """

    kind = "solo"

    def __init__(self, slot_a: Participant):
        super().__init__()
        self._slot_a = slot_a
        if not slot_a.is_placeholder:
            self.winner = slot_a

    @property
    def slot_a(self) -> Participant:
        return self._slot_a

    @property
    def slot_b(self) -> None:
        return None

    def __repr__(self):
        return f"SoloContest(slot_a={self._slot_a.name}, winner={self.winner and self.winner.name})"


class PendingContest(Contest):
    """Placeholder whose entrants are not known yet. Never complete."""

    kind = "pending"

    @property
    def is_complete(self) -> bool:
        return False

    def __repr__(self):
        return "PendingContest()"


class Round:
    def __init__(self, index: int, contests: Optional[List[Contest]] = None):
        self.index = index
        self.contests = contests if contests else []

    def __len__(self):
        return len(self.contests)

    def __iter__(self):
        return iter(self.contests)

    def __repr__(self):
        return f"Round(index={self.index}, contests={self.contests})"


class Bracket:
    """All rounds of one tournament plus the bye bookkeeping.

    ``bye_join_rounds`` is planned when the bracket is built: the round indices
    where a set-aside participant rejoins. ``bye_assignments`` binds a concrete
    participant to such an index once round results pick one, and
    ``merged_byes`` remembers which bindings were already merged back in.
    """

    def __init__(self, rounds: List[Round], bye_join_rounds: Optional[Set[int]] = None):
        self.rounds = rounds
        self.bye_join_rounds: Set[int] = set(bye_join_rounds) if bye_join_rounds else set()
        self.bye_assignments: Dict[int, Participant] = {}
        self.merged_byes: Set[int] = set()

    @property
    def total_rounds(self) -> int:
        return len(self.rounds)

    def mark_bye_merged(self, round_index: int):
        self.merged_byes.add(round_index)

    def pending_byes(self) -> Dict[int, Participant]:
        """Bound byes that have not rejoined yet."""
        return {
            index: participant
            for index, participant in self.bye_assignments.items()
            if index not in self.merged_byes
        }

    def __repr__(self):
        return (
            f"Bracket(total_rounds={self.total_rounds}, bye_join_rounds={sorted(self.bye_join_rounds)}, "
            f"bye_assignments={self.bye_assignments})"
        )
