"""
Subscription Service Unit Tests
"""

from trivia_server.services.subscription_service import SubscriptionService


class TestSubscriptionService:

    def setup_method(self):
        self.service = SubscriptionService()

    def test_subscribe_preserves_order(self):
        self.service.subscribe('AAAAA', 'c1')
        self.service.subscribe('AAAAA', 'c2')
        self.service.subscribe('AAAAA', 'c1')

        assert self.service.get_subscribers('AAAAA') == ['c1', 'c2']
        assert self.service.get_session_code('c2') == 'AAAAA'
        assert self.service.is_subscribed('AAAAA', 'c1')

    def test_subscribing_elsewhere_moves_the_connection(self):
        self.service.subscribe('AAAAA', 'c1')
        self.service.subscribe('BBBBB', 'c1')

        assert self.service.get_subscribers('AAAAA') == []
        assert self.service.get_subscribers('BBBBB') == ['c1']
        assert self.service.get_session_code('c1') == 'BBBBB'

    def test_unsubscribe(self):
        self.service.subscribe('AAAAA', 'c1')

        assert self.service.unsubscribe('AAAAA', 'c1') is True
        assert self.service.unsubscribe('AAAAA', 'c1') is False
        assert self.service.get_session_code('c1') is None

    def test_drop_session(self):
        self.service.subscribe('AAAAA', 'c1')
        self.service.subscribe('AAAAA', 'c2')
        self.service.subscribe('BBBBB', 'c3')

        self.service.drop_session('AAAAA')

        assert self.service.get_subscribers('AAAAA') == []
        assert self.service.get_session_code('c1') is None
        assert self.service.get_subscribers('BBBBB') == ['c3']

    def test_get_subscribers_returns_copy(self):
        self.service.subscribe('AAAAA', 'c1')
        subscribers = self.service.get_subscribers('AAAAA')
        subscribers.append('intruder')

        assert self.service.get_subscribers('AAAAA') == ['c1']
