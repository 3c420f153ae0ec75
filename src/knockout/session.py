"""
Tournament sessions: registration, the match loop and dice resolution.

A session drives one bracket from sign-up to champion. It is not thread safe;
callers hold ``session.lock`` around every mutating call.
"""
import logging
import random
import threading
from typing import Dict, Optional

from .config import get_default_settings
from .display import get_bracket_display
from .elimination import advance_round, build_bracket, champion as bracket_champion
from .errors import (
    InvalidInput,
    InvalidState,
    PermissionDenied,
    RollRejected,
    SessionExists,
    SessionNotFound,
)
from .models import TBD_ID, PairedContest, Participant, SoloContest
from .notifications import Notifier

logger = logging.getLogger(__name__)

REGISTRATION = 'registration'
PLAYING = 'playing'
FINISHED = 'finished'
CANCELLED = 'cancelled'
LIVE_STATES = (REGISTRATION, PLAYING)


class DiceRoller:
    """Default draw source: one fair die per competitor."""

    def __init__(self, sides=6, rng=None):
        self.sides = sides
        self.rng = rng or random.SystemRandom()

    def __call__(self, participant):
        return self.rng.randint(1, self.sides)


class TournamentSession:
    def __init__(self, session_id, organizer_id, organizer_name, settings=None,
                 notifier=None, rng=None, roller=None):
        self.session_id = session_id
        self.organizer = Participant(organizer_id, organizer_name)
        self.settings = settings if settings else get_default_settings()
        self.notifier = notifier or Notifier()
        self.rng = rng
        self.roller = roller or DiceRoller(self.settings['die_sides'], rng)
        self.lock = threading.RLock()

        self.state = REGISTRATION
        self.participants: Dict[object, str] = {}  # id -> name, in sign-up order
        self.bracket = None
        self.current_round_index: Optional[int] = None
        self.current_contest_index: Optional[int] = None
        self._rolled = set()  # ids that have drawn in the current attempt

    def __repr__(self):
        return f"TournamentSession(session_id={self.session_id}, state={self.state}, participants={len(self.participants)})"

    @property
    def is_live(self) -> bool:
        return self.state in LIVE_STATES

    # Registration

    def join(self, participant_id, name):
        if self.state != REGISTRATION:
            raise InvalidState("Registration is closed.")
        if participant_id == TBD_ID:
            raise InvalidInput(f"Participant id {TBD_ID} is reserved.")
        if participant_id in self.participants:
            raise InvalidState(f"{name} is already registered.")
        if participant_id == self.organizer.id and not self.settings['organizer_can_play']:
            raise PermissionDenied("The organizer cannot take part in this tournament.")
        cap = self.settings['max_participants']
        if cap is not None and len(self.participants) >= cap:
            raise InvalidState(f"The tournament is full ({cap} participants).")
        self.participants[participant_id] = name
        logger.info(f'[{self.session_id}] {name} joined ({len(self.participants)} registered)')

    def leave(self, participant_id):
        if participant_id not in self.participants:
            raise InvalidState("You are not registered.")
        if self.state != REGISTRATION:
            raise InvalidState("You cannot leave after the start.")
        name = self.participants.pop(participant_id)
        logger.info(f'[{self.session_id}] {name} left ({len(self.participants)} registered)')

    def cancel(self, by_id):
        if by_id != self.organizer.id:
            raise PermissionDenied("Only the organizer can cancel the tournament.")
        if not self.is_live:
            raise InvalidState(f"The tournament is already {self.state}.")
        self.state = CANCELLED
        self.current_round_index = None
        self.current_contest_index = None
        logger.info(f'[{self.session_id}] cancelled by organizer')
        self.notifier.tournament_cancelled(self)

    def start(self, by_id):
        if by_id != self.organizer.id:
            raise PermissionDenied("Only the organizer can start the tournament.")
        if self.state != REGISTRATION:
            raise InvalidState(f"The tournament is already {self.state}.")
        minimum = self.settings['min_participants']
        if len(self.participants) < minimum:
            raise InvalidState(f"At least {minimum} participants are needed to start.")

        self.bracket = build_bracket(self.participants, rng=self.rng)
        self.state = PLAYING
        self.current_round_index = 0
        self.current_contest_index = 0
        logger.info(
            f'[{self.session_id}] started with {len(self.participants)} participants, '
            f'{self.bracket.total_rounds} rounds'
        )
        self.notifier.bracket_updated(self)
        self._run_schedule()

    # Playing

    @property
    def current_contest(self):
        if self.state != PLAYING:
            return None
        return self.bracket.rounds[self.current_round_index].contests[self.current_contest_index]

    def record_roll(self, participant_id, value=None):
        """
        Record a draw for one side of the current contest and decide it once
        both sides have drawn. Returns the drawn value.
        """
        contest = self.current_contest
        if not isinstance(contest, PairedContest) or contest.is_complete:
            raise RollRejected("There is no contest to draw for right now.")

        slot = None
        for candidate in (contest.slot_a, contest.slot_b):
            if candidate.id == participant_id:
                slot = candidate
        if slot is None:
            raise RollRejected("You are not playing in the current contest.")
        if participant_id in self._rolled or slot.last_roll is not None:
            raise RollRejected("You have already drawn in this contest.")

        if value is None:
            value = self.roller(slot)
        self._rolled.add(participant_id)
        slot.last_roll = value
        logger.debug(f'[{self.session_id}] {slot.name} drew {value}')

        if contest.slot_a.last_roll is not None and contest.slot_b.last_roll is not None:
            self._resolve(contest)
        return value

    def _resolve(self, contest):
        roll_a = contest.slot_a.last_roll
        roll_b = contest.slot_b.last_roll
        if roll_a == roll_b:
            contest.slot_a.last_roll = None
            contest.slot_b.last_roll = None
            self._rolled.clear()
            logger.info(f'[{self.session_id}] tie at {roll_a}, contest replayed')
            self.notifier.contest_tied(self, contest, roll_a)
            return

        contest.record_winner(contest.slot_a if roll_a > roll_b else contest.slot_b)
        self._rolled.clear()
        self.notifier.contest_decided(self, contest)
        self._run_schedule()

    def _run_schedule(self):
        """
        Move to the next contest that needs a draw, advancing rounds on the way.

        Stops at an open paired contest, or finishes the tournament after the
        last round.
        """
        while True:
            round_ = self.bracket.rounds[self.current_round_index]
            while self.current_contest_index < len(round_.contests):
                contest = round_.contests[self.current_contest_index]
                if isinstance(contest, PairedContest) and not contest.is_complete:
                    self._rolled.clear()
                    self.notifier.contest_ready(self, contest, self.current_contest_index + 1)
                    return
                if isinstance(contest, SoloContest) and contest.is_complete:
                    self.notifier.auto_advanced(self, contest.winner)
                elif not contest.is_complete:
                    # advance_round refuses the unfinished round below
                    logger.warning(
                        f'[{self.session_id}] contest {self.current_contest_index + 1} of round '
                        f'{round_.index + 1} has no entrants yet'
                    )
                self.current_contest_index += 1

            next_index = self.current_round_index + 1
            if next_index >= self.bracket.total_rounds:
                self._finish()
                return

            advancement = advance_round(self.bracket, self.current_round_index, next_index, rng=self.rng)
            self.current_round_index = next_index
            self.current_contest_index = 0
            self.notifier.round_started(self, advancement)
            if advancement.merged_bye is not None:
                self.notifier.bye_joined(self, advancement.merged_bye, next_index)
            self.notifier.bracket_updated(self)

    def _finish(self):
        winner = bracket_champion(self.bracket)
        self.state = FINISHED
        self.current_round_index = None
        self.current_contest_index = None
        logger.info(f'[{self.session_id}] finished, champion {winner.name}')
        self.notifier.bracket_updated(self)
        self.notifier.tournament_finished(self, winner)

    @property
    def champion(self):
        if self.state != FINISHED:
            return None
        return bracket_champion(self.bracket)

    def to_dict(self):
        contest = self.current_contest
        return {
            'session_id': self.session_id,
            'state': self.state,
            'organizer': {'id': self.organizer.id, 'name': self.organizer.name},
            'participants': [{'id': pid, 'name': name} for pid, name in self.participants.items()],
            'current_round_index': self.current_round_index,
            'current_match_number': None if contest is None else self.current_contest_index + 1,
            'bracket': get_bracket_display(self.bracket) if self.bracket else None,
        }


class SessionManager:
    """Tournament sessions keyed by session id (one chat, channel or room each)."""

    def __init__(self, settings=None, notifier_factory=None, rng=None, roller=None):
        self.settings = settings if settings else get_default_settings()
        self.notifier_factory = notifier_factory or Notifier
        self.rng = rng
        self.roller = roller
        self._sessions: Dict[object, TournamentSession] = {}
        self._lock = threading.Lock()

    def create(self, session_id, organizer_id, organizer_name):
        with self._lock:
            existing = self._sessions.get(session_id)
            if existing is not None and existing.is_live:
                raise SessionExists()
            session = TournamentSession(
                session_id, organizer_id, organizer_name,
                settings=self.settings,
                notifier=self.notifier_factory(),
                rng=self.rng,
                roller=self.roller,
            )
            self._sessions[session_id] = session
            logger.info(f'[{session_id}] tournament opened by {organizer_name}')
            return session

    def get(self, session_id) -> TournamentSession:
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFound()
        return session

    def remove(self, session_id):
        with self._lock:
            if self._sessions.pop(session_id, None) is None:
                raise SessionNotFound()

    def active_sessions(self):
        with self._lock:
            return [s for s in self._sessions.values() if s.is_live]

    def __len__(self):
        return len(self._sessions)
