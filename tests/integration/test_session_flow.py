"""
End-to-end session flows over the Socket.IO test client.

Timers are replaced by a FakeTimerFactory so every deadline, grace period and
reveal pause is fired explicitly by the test.
"""

from tests.helpers.session_helpers import (
    clear_received,
    connection_id,
    create_session_helper,
    event_names,
    join_session_helper,
    payloads,
)


def start(client, code, count=2, time_limit=10):
    client.emit('start', {'code': code, 'settings': {'count': count, 'timeLimit': time_limit}})


def answer(client, code, text, index):
    client.emit('submit-answer', {'code': code, 'answer': text, 'questionIndex': index})


class TestLobby:

    def test_create_then_join_builds_shared_roster(self, make_client, socketio):
        host = make_client()
        guest = make_client()

        code = create_session_helper(host, 'Alice')
        join_session_helper(guest, code, 'Bob')

        host_view = payloads(host.get_received(), 'update-players')[-1]
        assert [p['name'] for p in host_view['players']] == ['Alice', 'Bob']
        assert host_view['hostId'] == connection_id(socketio, host)
        assert all(p['score'] == 0 and p['answered'] is False for p in host_view['players'])

    def test_join_reply_includes_roster(self, make_client):
        host = make_client()
        guest = make_client()
        code = create_session_helper(host, 'Alice')

        received = join_session_helper(guest, code.lower(), 'Bob')

        assert event_names(received) == ['update-players', 'join-success']
        assert payloads(received, 'join-success') == [{'code': code}]

    def test_get_players(self, make_client):
        host = make_client()
        code = create_session_helper(host, 'Alice')

        host.emit('get-players', {'code': code})

        assert payloads(host.get_received(), 'update-players')[0]['players'][0]['name'] == 'Alice'

    def test_leave_session(self, make_client, socketio, registry):
        host = make_client()
        guest = make_client()
        code = create_session_helper(host, 'Alice')
        join_session_helper(guest, code, 'Bob')
        clear_received(host, guest)

        host.emit('leave-session', {'code': code})

        assert payloads(host.get_received(), 'left-session') == [{'code': code}]
        update = payloads(guest.get_received(), 'update-players')[-1]
        assert update['hostId'] == connection_id(socketio, guest)
        assert [p['name'] for p in update['players']] == ['Bob']
        assert registry.exists(code)

    def test_last_leave_destroys_session(self, make_client, registry):
        host = make_client()
        code = create_session_helper(host, 'Alice')

        host.disconnect()

        assert not registry.exists(code)

    def test_creating_again_leaves_previous_session(self, make_client, registry):
        host = make_client()
        first = create_session_helper(host, 'Alice')

        second = create_session_helper(host, 'Alice')

        assert first != second
        assert not registry.exists(first)
        assert registry.exists(second)


class TestTimedMatch:

    def test_single_player_full_match(self, make_client, socketio, fake_timers):
        host = make_client()
        code = create_session_helper(host, 'Solo')
        me = connection_id(socketio, host)

        start(host, code, count=2, time_limit=10)
        received = host.get_received()
        assert event_names(received) == ['game-started', 'question']
        question = payloads(received, 'question')[0]
        assert question['index'] == 0
        assert question['timeLimit'] == 10
        assert sorted(question['answers']) == ['Right 0', 'Wrong 0a', 'Wrong 0b', 'Wrong 0c']
        assert 'correctAnswer' not in question
        assert [t.interval for t in fake_timers.pending()] == [10]

        answer(host, code, 'Right 0', 0)
        received = host.get_received()
        assert event_names(received) == ['update-players', 'all-answered']
        assert payloads(received, 'update-players')[0]['players'][0]['answered'] is True

        # All-answered grace period ends
        fake_timers.fire_next()
        ended = payloads(host.get_received(), 'question-ended')[0]
        assert ended['correctAnswer'] == 'Right 0'
        assert ended['players'][0]['score'] == 1

        # Reveal pause ends
        fake_timers.fire_next()
        assert payloads(host.get_received(), 'question')[0]['index'] == 1

        # Nobody answers the second question before its deadline
        fake_timers.fire_next()
        ended = payloads(host.get_received(), 'question-ended')[0]
        assert ended['correctAnswer'] == 'Right 1'
        assert ended['players'][0]['score'] == 1

        fake_timers.fire_next()
        game_over = payloads(host.get_received(), 'game-over')[0]
        assert game_over['winners'] == [me]
        assert fake_timers.pending() == []

    def test_resync_during_open_question(self, make_client, fake_timers):
        host = make_client()
        guest = make_client()
        code = create_session_helper(host, 'Alice')
        join_session_helper(guest, code, 'Bob')
        start(host, code)
        broadcast = payloads(guest.get_received(), 'question')[0]
        answer(guest, code, 'Wrong 0a', 0)
        clear_received(host, guest)

        guest.emit('get-state', {'code': code})
        state = payloads(guest.get_received(), 'state')[0]

        assert state['question'] == broadcast
        assert state['phase'] == 'question_open'
        assert state['question']['index'] == 0
        assert state['myAnswer'] == 'Wrong 0a'
        assert 0 <= state['timeLeft'] <= 10

        host.emit('get-state', {'code': code})
        assert 'myAnswer' not in payloads(host.get_received(), 'state')[0]

    def test_stale_and_duplicate_answers_are_silent(self, make_client):
        host = make_client()
        guest = make_client()
        code = create_session_helper(host, 'Alice')
        join_session_helper(guest, code, 'Bob')
        start(host, code)
        clear_received(host, guest)

        answer(guest, code, 'Right 0', 1)
        assert guest.get_received() == []

        answer(guest, code, 'Right 0', 0)
        clear_received(host, guest)
        answer(guest, code, 'Wrong 0a', 0)
        assert guest.get_received() == []
        assert host.get_received() == []

    def test_two_players_tie(self, make_client, socketio, fake_timers):
        host = make_client()
        guest = make_client()
        code = create_session_helper(host, 'Alice')
        join_session_helper(guest, code, 'Bob')
        start(host, code, count=1)

        answer(host, code, 'Right 0', 0)
        answer(guest, code, 'Right 0', 0)
        fake_timers.fire_next()
        fake_timers.fire_next()

        game_over = payloads(guest.get_received(), 'game-over')[0]
        assert sorted(game_over['winners']) == sorted([connection_id(socketio, host), connection_id(socketio, guest)])
        assert [p['score'] for p in game_over['players']] == [1, 1]


class TestUntimedMatch:

    def test_question_waits_for_every_answer(self, make_client, fake_timers):
        host = make_client()
        guest = make_client()
        code = create_session_helper(host, 'Alice')
        join_session_helper(guest, code, 'Bob')

        start(host, code, count=1, time_limit=0)
        question = payloads(host.get_received(), 'question')[0]
        assert question['timeLimit'] is None
        assert question['deadline'] is None
        assert fake_timers.pending() == []

        answer(host, code, 'Right 0', 0)
        assert fake_timers.pending() == []

        host.emit('get-state', {'code': code})
        assert payloads(host.get_received(), 'state')[-1]['timeLeft'] is None

        answer(guest, code, 'Wrong 0b', 0)
        assert 'all-answered' in event_names(guest.get_received())
        assert len(fake_timers.pending()) == 1


class TestDepartures:

    def test_host_disconnect_mid_match(self, make_client, socketio, fake_timers, registry):
        host = make_client()
        guest = make_client()
        code = create_session_helper(host, 'Alice')
        join_session_helper(guest, code, 'Bob')
        start(host, code)
        answer(guest, code, 'Right 0', 0)
        clear_received(guest)

        host.disconnect()

        received = guest.get_received()
        update = payloads(received, 'update-players')[-1]
        assert update['hostId'] == connection_id(socketio, guest)
        assert [p['name'] for p in update['players']] == ['Bob']
        assert 'all-answered' in event_names(received)
        assert registry.get(code).is_evaluating

        fake_timers.fire_next()
        ended = payloads(guest.get_received(), 'question-ended')[0]
        assert [p['score'] for p in ended['players']] == [1]

    def test_host_disconnect_leaves_question_running(self, make_client, socketio, fake_timers, registry):
        host = make_client()
        second = make_client()
        third = make_client()
        code = create_session_helper(host, 'Alice')
        join_session_helper(second, code, 'Bob')
        join_session_helper(third, code, 'Carol')
        start(host, code)
        deadline_timer = fake_timers.pending()[0]
        clear_received(second, third)

        host.disconnect()

        received = third.get_received()
        assert event_names(received) == ['update-players']
        assert payloads(received, 'update-players')[0]['hostId'] == connection_id(socketio, second)
        assert fake_timers.pending() == [deadline_timer]
        session = registry.get(code)
        assert session.active and not session.is_evaluating
        assert session.current_question_index == 0

    def test_promoted_host_can_start(self, make_client, fake_timers):
        host = make_client()
        guest = make_client()
        code = create_session_helper(host, 'Alice')
        join_session_helper(guest, code, 'Bob')
        host.disconnect()
        clear_received(guest)

        start(guest, code, count=1)

        assert event_names(guest.get_received()) == ['game-started', 'question']

    def test_everyone_leaving_cancels_timers(self, make_client, fake_timers, registry):
        host = make_client()
        code = create_session_helper(host, 'Alice')
        start(host, code)
        timer = fake_timers.pending()[0]

        host.disconnect()

        assert timer.cancelled
        assert not registry.exists(code)
        # A late fire of the cancelled timer must not resurrect anything
        timer.fire(force=True)
        assert not registry.exists(code)


class TestFetchFailure:

    def test_failure_then_retry(self, make_client, question_supplier):
        host = make_client()
        code = create_session_helper(host, 'Alice')
        question_supplier.error = 'provider down'

        start(host, code)
        received = host.get_received()

        assert event_names(received) == ['start-error']
        error = payloads(received, 'start-error')[0]
        assert error['code'] == 'FETCH_FAILED'
        assert 'provider down' in error['details']['reason']

        host.emit('get-state', {'code': code})
        assert payloads(host.get_received(), 'state')[0]['phase'] == 'lobby'

        question_supplier.error = None
        start(host, code)
        assert event_names(host.get_received()) == ['game-started', 'question']
        assert question_supplier.calls == [(None, None, 2), (None, None, 2)]
