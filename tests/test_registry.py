"""
Tests for standin ExpectationRegistry and Requirements
"""

import logging
import threading
import time

import pytest

from standin.errors import VerificationError
from standin.match import starts_with
from standin.mock.registry import ExpectationRegistry
from standin.mock.request import ClientRequest, HttpMethod
from standin.mock.requirements import Requirements


@pytest.fixture
def registry():
    return ExpectationRegistry(poll_interval=0.01)


class TestRegistration:
    """Test expectation registration helpers."""

    @pytest.mark.parametrize('verb,method', [
        ('any', HttpMethod.ANY),
        ('get', HttpMethod.GET),
        ('head', HttpMethod.HEAD),
        ('post', HttpMethod.POST),
        ('put', HttpMethod.PUT),
        ('delete', HttpMethod.DELETE),
        ('patch', HttpMethod.PATCH),
        ('options', HttpMethod.OPTIONS),
        ('trace', HttpMethod.TRACE),
    ])
    def test_verb_helpers(self, registry, verb, method):
        """Test each verb helper registers an expectation for its method."""
        expectation = getattr(registry, verb)('/x')
        assert expectation.method is method
        assert registry.all() == [expectation]

    def test_configure_callback(self, registry):
        """Test the callback receives the new expectation before registration."""
        expectation = registry.get('/x', lambda e: e.called(1))
        assert 'called 1' in expectation.describe()

    def test_all_is_a_copy(self, registry):
        """Test the returned list cannot alter the registry."""
        registry.get('/x')
        registry.all().clear()
        assert len(registry) == 1


class TestFindMatch:
    """Test first-registered-first-matched lookup."""

    def test_first_match_wins(self, registry):
        """Test the earliest matching expectation is selected."""
        first = registry.get('/x')
        registry.get('/x')
        assert registry.find_match(ClientRequest.build('GET', '/x')) is first

    def test_specific_registered_after_general(self, registry):
        """Test registration order beats specificity."""
        general = registry.any('*')
        registry.get('/x', lambda e: e.query('q', '1'))
        assert registry.find_match(ClientRequest.build('GET', '/x', query={'q': '1'})) is general

    def test_no_backtracking_on_conjunction(self, registry):
        """Test a partially matching expectation is skipped."""
        registry.get('/x', lambda e: e.header('X-Id', 'a'))
        fallback = registry.get('/x')
        assert registry.find_match(ClientRequest.build('GET', '/x', headers={'X-Id': 'b'})) is fallback

    def test_no_match(self, registry):
        """Test None when nothing matches."""
        registry.get('/x')
        assert registry.find_match(ClientRequest.build('GET', '/y')) is None

    def test_clear(self, registry):
        """Test clear removes HTTP and WebSocket expectations."""
        registry.get('/x')
        registry.web_socket('/ws')
        registry.clear()
        assert registry.all() == []
        assert registry.web_socket_paths == []
        assert registry.find_match(ClientRequest.build('GET', '/x')) is None


class TestWebSocketRegistration:
    """Test WebSocket expectation registration."""

    def test_last_registration_wins(self, registry):
        """Test re-registering a path replaces the expectations."""
        registry.web_socket('/ws', lambda ws: ws.receives('a'))
        second = registry.web_socket('/ws')
        assert registry.find_ws_match('/ws') is second
        assert registry.web_socket_paths == ['/ws']

    def test_unknown_path(self, registry):
        """Test lookup of an unregistered path."""
        assert registry.find_ws_match('/nope') is None


class TestVerification:
    """Test registry-wide verification."""

    def test_all_satisfied(self, registry):
        """Test verify passes when every count is met."""
        expectation = registry.get('/x', lambda e: e.called(1))
        expectation.mark(ClientRequest.build('GET', '/x'))
        assert registry.verify(0.05)
        registry.assert_verified(0.05)

    def test_fail_fast_logs_unmet(self, registry, caplog):
        """Test verify stops at the first unmet expectation and logs it."""
        registry.get('/first', lambda e: e.called(1))
        registry.get('/second', lambda e: e.called(1))

        with caplog.at_level(logging.ERROR, logger='standin'):
            assert not registry.verify(0.05)

        messages = [r.getMessage() for r in caplog.records]
        assert any("'/first'" in m for m in messages)
        assert not any("'/second'" in m for m in messages)

    def test_assert_verified_raises(self, registry):
        """Test assert_verified raises a VerificationError naming the expectation."""
        registry.get('/x', lambda e: e.called(2))
        with pytest.raises(VerificationError) as exc_info:
            registry.assert_verified(0.05)
        assert "'/x'" in str(exc_info.value)
        assert isinstance(exc_info.value, AssertionError)

    def test_waits_for_late_calls(self, registry):
        """Test verification observes calls that arrive during the wait."""
        expectation = registry.get('/x', lambda e: e.called(1))

        def late_call():
            time.sleep(0.05)
            expectation.mark(ClientRequest.build('GET', '/x'))

        worker = threading.Thread(target=late_call)
        worker.start()
        try:
            assert registry.verify(1.0)
        finally:
            worker.join()

    def test_web_socket_verification(self, registry):
        """Test unconnected WebSocket expectations fail verification."""
        registry.web_socket('/ws')
        assert not registry.verify(0.05)


class TestRequirements:
    """Test global request requirements."""

    def test_no_requirements(self):
        """Test every request passes without requirements."""
        assert Requirements().check(ClientRequest.build('GET', '/x'))

    def test_applicable_requirement(self):
        """Test applicable requirements must pass."""
        requirements = Requirements()
        requirements.that(HttpMethod.ANY, '*', lambda r: r.header('Authorization', starts_with('Bearer ')))

        assert requirements.check(ClientRequest.build('GET', '/x', headers={'Authorization': 'Bearer t'}))
        assert not requirements.check(ClientRequest.build('GET', '/x'))

    def test_name_only_requirement(self):
        """Test a requirement naming only a header checks its presence."""
        requirements = Requirements()
        requirements.that(HttpMethod.ANY, '*', lambda r: r.header('X-Request-Id'))

        assert requirements.check(ClientRequest.build('GET', '/x', headers={'X-Request-Id': ''}))
        assert not requirements.check(ClientRequest.build('GET', '/x'))

    def test_requirement_not_applicable(self):
        """Test requirements for other methods or paths are ignored."""
        requirements = Requirements()
        requirements.that('POST', '/admin', lambda r: r.query('token', 'x'))

        assert requirements.check(ClientRequest.build('GET', '/admin'))
        assert requirements.check(ClientRequest.build('POST', '/public'))
        assert not requirements.check(ClientRequest.build('POST', '/admin'))

    def test_clear(self):
        """Test clearing requirements."""
        requirements = Requirements()
        requirements.that('GET', '*').secure()
        requirements.clear()
        assert len(requirements) == 0
