"""
Session Lifecycle Service Unit Tests
"""

from datetime import datetime, timedelta
from unittest.mock import Mock

import pytest

from trivia_server.services.session_lifecycle_service import (
    CODE_ALPHABET,
    SessionCodeExhaustedError,
    SessionLifecycleService,
)


class TestSessionLifecycleService:

    def setup_method(self):
        self.service = SessionLifecycleService()

    def test_create_session(self):
        session = self.service.create_session()

        assert len(session.code) == 5
        assert all(ch in CODE_ALPHABET for ch in session.code)
        assert self.service.session_exists(session.code)
        assert self.service.get_session(session.code) is session
        assert session.players == []
        assert not session.active

    def test_code_length_is_configurable(self):
        service = SessionLifecycleService(code_length=8)
        assert len(service.create_session().code) == 8

    def test_collision_retries_then_exhausts(self):
        rng = Mock()
        rng.choice.return_value = 'Q'
        service = SessionLifecycleService(rng=rng)
        service.create_session()

        with pytest.raises(SessionCodeExhaustedError):
            service.create_session()

        assert rng.choice.call_count == 5 * (1 + SessionLifecycleService.MAX_CODE_ATTEMPTS)

    def test_delete_session(self):
        session = self.service.create_session()

        assert self.service.delete_session(session.code) is session
        assert self.service.delete_session(session.code) is None
        assert self.service.get_session(session.code) is None
        assert self.service.get_all_codes() == []

    def test_find_inactive_codes(self):
        old = self.service.create_session()
        new = self.service.create_session()
        old.last_activity = datetime.now() - timedelta(minutes=30)

        assert self.service.find_inactive_codes(10) == [old.code]
        assert sorted(self.service.get_all_codes()) == sorted([old.code, new.code])
