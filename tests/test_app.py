"""
Unit tests for the Flask JSON API.
"""
import pytest
import random
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from app import app
from knockout.notifications import EventLogNotifier
from knockout.session import SessionManager


@pytest.fixture
def client(monkeypatch):
    """Create a test client backed by a fresh session manager."""
    import app as app_module
    manager = SessionManager(
        settings=app_module.settings,
        notifier_factory=EventLogNotifier,
        rng=random.Random(42),
    )
    monkeypatch.setattr(app_module, 'sessions', manager)
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client


def _open(client, sid='room', players=0):
    response = client.post(f'/api/tournaments/{sid}', json={'organizer_id': 1, 'organizer_name': 'Org'})
    assert response.status_code == 201
    for i in range(players):
        response = client.post(f'/api/tournaments/{sid}/join', json={'participant_id': 10 + i, 'name': f'P{i}'})
        assert response.status_code == 200


class TestRegistrationRoutes:
    """Tests for creating and filling tournaments."""

    def test_create(self, client):
        response = client.post('/api/tournaments/room', json={'organizer_id': 1, 'organizer_name': 'Org'})
        assert response.status_code == 201
        data = response.get_json()
        assert data['success'] is True
        assert data['tournament']['state'] == 'registration'

    def test_create_requires_organizer(self, client):
        response = client.post('/api/tournaments/room', json={'organizer_name': 'Org'})
        assert response.status_code == 400
        assert response.get_json() == {'success': False, 'error': "'organizer_id' is required."}

    def test_create_twice_conflicts(self, client):
        _open(client)
        response = client.post('/api/tournaments/room', json={'organizer_id': 2, 'organizer_name': 'X'})
        assert response.status_code == 409

    def test_join_and_leave(self, client):
        _open(client, players=2)
        response = client.post('/api/tournaments/room/leave', json={'participant_id': 10})
        assert response.get_json() == {'success': True, 'participants': 1}

    def test_join_unknown_tournament(self, client):
        response = client.post('/api/tournaments/none/join', json={'participant_id': 1, 'name': 'A'})
        assert response.status_code == 404
        assert response.get_json()['success'] is False

    def test_duplicate_join(self, client):
        _open(client, players=1)
        response = client.post('/api/tournaments/room/join', json={'participant_id': 10, 'name': 'P0'})
        assert response.status_code == 409

    def test_body_must_be_object(self, client):
        response = client.post('/api/tournaments/room', json=[1, 2])
        assert response.status_code == 400
        assert response.get_json() == {'success': False, 'error': 'Request body must be a JSON object.'}

    def test_join_rejects_list_id(self, client):
        _open(client)
        response = client.post('/api/tournaments/room/join', json={'participant_id': [5], 'name': 'X'})
        assert response.status_code == 400
        assert response.get_json()['success'] is False

    @pytest.mark.parametrize('bad_id', [True, {'id': 5}, 1.5])
    def test_join_rejects_non_scalar_ids(self, client, bad_id):
        """Only strings and integers are accepted as ids."""
        _open(client)
        response = client.post('/api/tournaments/room/join', json={'participant_id': bad_id, 'name': 'X'})
        assert response.status_code == 400
        tournament = client.get('/api/tournaments/room').get_json()
        assert tournament['tournament']['participants'] == []

    def test_join_reserved_id(self, client):
        _open(client)
        response = client.post('/api/tournaments/room/join', json={'participant_id': -1, 'name': 'Sneaky'})
        assert response.status_code == 400

    def test_list_active(self, client):
        _open(client, 'a', players=1)
        _open(client, 'b')
        data = client.get('/api/tournaments').get_json()
        assert sorted(t['session_id'] for t in data['tournaments']) == ['a', 'b']

    def test_delete(self, client):
        _open(client)
        assert client.delete('/api/tournaments/room').status_code == 200
        assert client.get('/api/tournaments/room').status_code == 404


class TestPlayRoutes:
    """Tests for starting, drawing and cancelling."""

    def test_only_organizer_starts(self, client):
        _open(client, players=3)
        response = client.post('/api/tournaments/room/start', json={'participant_id': 10})
        assert response.status_code == 403

    def test_start_returns_bracket(self, client):
        _open(client, players=5)
        response = client.post('/api/tournaments/room/start', json={'participant_id': 1})
        assert response.status_code == 200
        tournament = response.get_json()['tournament']
        assert tournament['state'] == 'playing'
        assert tournament['bracket']['total_rounds'] == 3
        assert tournament['bracket']['bye_join_rounds'] == [2]
        assert tournament['current_match_number'] == 1
        assert tournament['events'][-1]['event'] == 'contest_ready'

    def test_play_to_the_end(self, client):
        _open(client, players=6)
        client.post('/api/tournaments/room/start', json={'participant_id': 1})

        for _ in range(200):
            tournament = client.get('/api/tournaments/room').get_json()['tournament']
            if tournament['state'] != 'playing':
                break
            round_data = tournament['bracket']['rounds'][tournament['current_round_index']]
            contest = round_data['contests'][tournament['current_match_number'] - 1]
            for slot in ('slot_a', 'slot_b'):
                if contest[slot]['last_roll'] is None:
                    response = client.post('/api/tournaments/room/roll', json={'participant_id': contest[slot]['id']})
                    assert response.status_code == 200
                    assert 1 <= response.get_json()['roll'] <= 6

        assert tournament['state'] == 'finished'
        assert tournament['bracket']['champion'] is not None
        assert tournament['events'][-1]['event'] == 'tournament_finished'

    def test_roll_rejected_for_outsider(self, client):
        _open(client, players=2)
        client.post('/api/tournaments/room/start', json={'participant_id': 1})
        response = client.post('/api/tournaments/room/roll', json={'participant_id': 999})
        assert response.status_code == 400

    def test_events_since(self, client):
        _open(client, players=4)
        client.post('/api/tournaments/room/start', json={'participant_id': 1})
        full = client.get('/api/tournaments/room').get_json()['tournament']
        tail = client.get(f"/api/tournaments/room?since={full['event_count'] - 1}").get_json()['tournament']
        assert tail['events'] == full['events'][-1:]

    def test_cancel(self, client):
        _open(client, players=2)
        response = client.post('/api/tournaments/room/cancel', json={'participant_id': 1})
        assert response.get_json() == {'success': True, 'state': 'cancelled'}
        response = client.post('/api/tournaments/room/start', json={'participant_id': 1})
        assert response.status_code == 409
