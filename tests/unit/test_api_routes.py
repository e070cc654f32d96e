"""
API Routes Unit Tests

Tests for the HTTP routes in trivia_server/routes/api.py.
"""


class TestIndexRoute:

    def test_index_reports_liveness(self, app):
        response = app.test_client().get('/')

        assert response.status_code == 200
        assert response.get_data(as_text=True) == 'Trivia World server is running'


class TestSessionSummaryRoute:

    def test_unknown_session(self, app):
        response = app.test_client().get('/api/sessions/zzzzz')

        assert response.status_code == 404
        assert response.get_json() == {'code': 'ZZZZZ', 'exists': False}

    def test_malformed_code(self, app):
        response = app.test_client().get('/api/sessions/bad-code')

        assert response.status_code == 400
        assert response.get_json()['code'] == 'INVALID_SESSION_CODE'

    def test_existing_session(self, app, registry):
        session = registry.create()
        registry.players.add_player(session, 'c1', 'Alice')

        response = app.test_client().get(f'/api/sessions/{session.code.lower()}')

        assert response.status_code == 200
        assert response.get_json() == {
            'code': session.code,
            'exists': True,
            'playerCount': 1,
            'capacity': 8,
            'active': False
        }

    def test_lookup_does_not_create_locks(self, app, registry):
        app.test_client().get('/api/sessions/ABCDE')

        assert 'ABCDE' not in registry.concurrency_control._session_locks
