"""
Hooks the tournament session calls when something worth announcing happens.

Subclass Notifier and override what you need; delivery, formatting and retries
belong to the subclass.
"""
import logging

logger = logging.getLogger(__name__)


class Notifier:
    """No-op base; every hook receives the session first."""

    def bracket_updated(self, session):
        pass

    def round_started(self, session, advancement):
        pass

    def bye_joined(self, session, participant, round_index):
        pass

    def auto_advanced(self, session, participant):
        pass

    def contest_ready(self, session, contest, match_number):
        pass

    def contest_tied(self, session, contest, roll):
        pass

    def contest_decided(self, session, contest):
        pass

    def tournament_finished(self, session, champion):
        pass

    def tournament_cancelled(self, session):
        pass


class LoggingNotifier(Notifier):
    def __init__(self, log=None):
        self.log = log or logger

    def bracket_updated(self, session):
        self.log.info(f'[{session.session_id}] bracket updated')

    def round_started(self, session, advancement):
        self.log.info(
            f'[{session.session_id}] round {advancement.round_index + 1} of '
            f'{session.bracket.total_rounds} starts with {len(advancement.entrants)} entrants'
        )
        if advancement.selected_bye is not None:
            self.log.info(
                f'[{session.session_id}] {advancement.selected_bye.name} sits out and rejoins '
                f'in round {advancement.bye_target_round_index + 1}'
            )

    def bye_joined(self, session, participant, round_index):
        self.log.info(f'[{session.session_id}] {participant.name} rejoins in round {round_index + 1}')

    def auto_advanced(self, session, participant):
        self.log.info(f'[{session.session_id}] {participant.name} advances without a draw')

    def contest_ready(self, session, contest, match_number):
        self.log.info(
            f'[{session.session_id}] match {match_number}: {contest.slot_a.name} vs {contest.slot_b.name}'
        )

    def contest_tied(self, session, contest, roll):
        self.log.info(f'[{session.session_id}] tie at {roll}, drawing again')

    def contest_decided(self, session, contest):
        self.log.info(
            f'[{session.session_id}] {contest.winner.name} wins '
            f'({contest.slot_a.name}: {contest.slot_a.last_roll}, {contest.slot_b.name}: {contest.slot_b.last_roll})'
        )

    def tournament_finished(self, session, champion):
        self.log.info(f'[{session.session_id}] champion: {champion.name}')

    def tournament_cancelled(self, session):
        self.log.info(f'[{session.session_id}] tournament cancelled')



class EventLogNotifier(Notifier):
    """Keeps announcements as plain dicts so clients can poll for them."""

    def __init__(self, forward_to=None):
        self.events = []
        self.forward_to = forward_to

    def _add(self, event, **data):
        data['event'] = event
        self.events.append(data)

    def since(self, index):
        return self.events[index:]

    def bracket_updated(self, session):
        self._add('bracket_updated')
        if self.forward_to:
            self.forward_to.bracket_updated(session)

    def round_started(self, session, advancement):
        self._add(
            'round_started',
            round_index=advancement.round_index,
            entrants=[p.name for p in advancement.entrants],
            bye_out=advancement.selected_bye.name if advancement.selected_bye else None,
            bye_rejoins_at=advancement.bye_target_round_index,
        )
        if self.forward_to:
            self.forward_to.round_started(session, advancement)

    def bye_joined(self, session, participant, round_index):
        self._add('bye_joined', participant=participant.name, round_index=round_index)
        if self.forward_to:
            self.forward_to.bye_joined(session, participant, round_index)

    def auto_advanced(self, session, participant):
        self._add('auto_advanced', participant=participant.name)
        if self.forward_to:
            self.forward_to.auto_advanced(session, participant)

    def contest_ready(self, session, contest, match_number):
        self._add('contest_ready', match_number=match_number,
                  players=[contest.slot_a.name, contest.slot_b.name])
        if self.forward_to:
            self.forward_to.contest_ready(session, contest, match_number)

    def contest_tied(self, session, contest, roll):
        self._add('contest_tied', roll=roll)
        if self.forward_to:
            self.forward_to.contest_tied(session, contest, roll)

    def contest_decided(self, session, contest):
        self._add('contest_decided', winner=contest.winner.name,
                  rolls=[[contest.slot_a.name, contest.slot_a.last_roll],
                         [contest.slot_b.name, contest.slot_b.last_roll]])
        if self.forward_to:
            self.forward_to.contest_decided(session, contest)

    def tournament_finished(self, session, champion):
        self._add('tournament_finished', champion=champion.name)
        if self.forward_to:
            self.forward_to.tournament_finished(session, champion)

    def tournament_cancelled(self, session):
        self._add('tournament_cancelled')
        if self.forward_to:
            self.forward_to.tournament_cancelled(session)
