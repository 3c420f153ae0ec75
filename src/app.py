"""
Flask JSON API for running dice knockout tournaments.
"""
import logging
import os

from flask import Flask, jsonify, request

from knockout.config import load_settings
from knockout.errors import InvalidInput, KnockoutError
from knockout.notifications import EventLogNotifier, LoggingNotifier
from knockout.session import SessionManager

app = Flask(__name__)

SETTINGS_FILE = os.environ.get('KNOCKOUT_SETTINGS')
settings = load_settings(SETTINGS_FILE)
app.logger.setLevel(settings['log_level'].upper())


def _notifier_factory():
    return EventLogNotifier(forward_to=LoggingNotifier(app.logger))


sessions = SessionManager(settings=settings, notifier_factory=_notifier_factory)


@app.errorhandler(KnockoutError)
def handle_knockout_error(error):
    if error.status_code >= 500:
        app.logger.error(f'{request.method} {request.path}: {error.message}')
    else:
        app.logger.warning(f'{request.method} {request.path} rejected: {error.message}')
    return jsonify({'success': False, 'error': error.message}), error.status_code


def _json_field(name, required=True):
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        raise InvalidInput("Request body must be a JSON object.")
    value = data.get(name)
    if value is not None and (isinstance(value, bool) or not isinstance(value, (str, int))):
        raise InvalidInput(f"'{name}' must be a string or an integer.")
    if isinstance(value, str):
        value = value.strip()
    if required and value in (None, ''):
        raise InvalidInput(f"'{name}' is required.")
    return value


def _session_payload(session, events_from=0):
    payload = session.to_dict()
    payload['events'] = session.notifier.since(events_from)
    payload['event_count'] = len(session.notifier.events)
    return payload


@app.route('/api/tournaments', methods=['GET'])
def api_list_tournaments():
    """List tournaments still open for registration or being played."""
    return jsonify({
        'success': True,
        'tournaments': [
            {'session_id': s.session_id, 'state': s.state, 'participants': len(s.participants)}
            for s in sessions.active_sessions()
        ],
    })


@app.route('/api/tournaments/<session_id>', methods=['POST'])
def api_create_tournament(session_id):
    """Open registration for a new tournament."""
    organizer_id = _json_field('organizer_id')
    organizer_name = _json_field('organizer_name')
    session = sessions.create(session_id, organizer_id, organizer_name)
    return jsonify({'success': True, 'tournament': _session_payload(session)}), 201


@app.route('/api/tournaments/<session_id>', methods=['GET'])
def api_get_tournament(session_id):
    """Tournament state, bracket and announcements after ?since=N."""
    session = sessions.get(session_id)
    since = request.args.get('since', 0, type=int)
    with session.lock:
        return jsonify({'success': True, 'tournament': _session_payload(session, since)})


@app.route('/api/tournaments/<session_id>', methods=['DELETE'])
def api_delete_tournament(session_id):
    sessions.remove(session_id)
    return jsonify({'success': True})


@app.route('/api/tournaments/<session_id>/join', methods=['POST'])
def api_join_tournament(session_id):
    session = sessions.get(session_id)
    participant_id = _json_field('participant_id')
    name = _json_field('name')
    with session.lock:
        session.join(participant_id, name)
        return jsonify({'success': True, 'participants': len(session.participants)})


@app.route('/api/tournaments/<session_id>/leave', methods=['POST'])
def api_leave_tournament(session_id):
    session = sessions.get(session_id)
    participant_id = _json_field('participant_id')
    with session.lock:
        session.leave(participant_id)
        return jsonify({'success': True, 'participants': len(session.participants)})


@app.route('/api/tournaments/<session_id>/start', methods=['POST'])
def api_start_tournament(session_id):
    """Build the bracket and play up to the first contest that needs a draw."""
    session = sessions.get(session_id)
    by_id = _json_field('participant_id')
    with session.lock:
        session.start(by_id)
        return jsonify({'success': True, 'tournament': _session_payload(session)})


@app.route('/api/tournaments/<session_id>/cancel', methods=['POST'])
def api_cancel_tournament(session_id):
    session = sessions.get(session_id)
    by_id = _json_field('participant_id')
    with session.lock:
        session.cancel(by_id)
        return jsonify({'success': True, 'state': session.state})


@app.route('/api/tournaments/<session_id>/roll', methods=['POST'])
def api_roll(session_id):
    """Draw for the calling participant in the current contest."""
    session = sessions.get(session_id)
    participant_id = _json_field('participant_id')
    with session.lock:
        events_before = len(session.notifier.events)
        value = session.record_roll(participant_id)
        return jsonify({
            'success': True,
            'roll': value,
            'tournament': _session_payload(session, events_before),
        })


if __name__ == '__main__':
    logging.basicConfig(level=settings['log_level'].upper())
    app.run(debug=False, host='0.0.0.0', port=int(os.environ.get('PORT', 5000)))
