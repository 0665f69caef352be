"""
Tests for standin unmatched request and WebSocket reports
"""

import pytest

from standin.match import starts_with
from standin.mock.expectation import Expectation
from standin.mock.report import UnmatchedRequestReport, UnmatchedWsReport
from standin.mock.request import ClientRequest
from standin.mock.requirements import Requirements
from standin.mock.websocket import WebSocketExpectation


@pytest.fixture
def unmatched_request():
    return ClientRequest.build(
        'POST',
        '/items',
        headers={'Content-Type': 'application/json', 'Cookie': 'sid=1'},
        query={'q': 'x'},
        body=b'{"a": 1}',
    )


class TestUnmatchedRequestReport:
    """Test the HTTP report."""

    def test_request_section(self, unmatched_request):
        """Test the request details are rendered."""
        text = UnmatchedRequestReport(unmatched_request, []).render()

        assert text.startswith('# Unmatched Request')
        assert 'HTTP POST /items ? q=' in text
        assert ' - content-type: ' in text
        assert ' - sid (<empty>, <empty>): 1' in text
        assert 'Content-Length: 8' in text
        assert '{"a": 1}' in text

    def test_binary_body_rendered_as_bytes(self):
        """Test non-text bodies are shown as byte values."""
        request = ClientRequest.build('POST', '/', headers={'Content-Type': 'image/png'}, body=b'\x01\x02')
        assert '[1, 2]' in UnmatchedRequestReport(request, []).render()

    def test_empty_request(self):
        """Test placeholders for missing fields."""
        text = UnmatchedRequestReport(ClientRequest.build('GET', '/'), []).render()
        assert '<no-headers>' in text
        assert 'Content-Type: <empty>' in text

    def test_expectation_summary(self, unmatched_request):
        """Test each matcher is marked and counted."""
        expectation = Expectation('POST', '/items').query('q', 'y')
        text = UnmatchedRequestReport(unmatched_request, [expectation]).render()

        assert 'Expectation 0 (3 matchers):' in text
        assert "✓ Path is '/items'" in text
        assert 'X Query parameter' in text
        assert '(3 matchers: 2 matched, 1 failed)' in text

    def test_requirements_section(self, unmatched_request):
        """Test applicable requirements are marked, others listed."""
        requirements = Requirements()
        requirements.that('POST', '/items', lambda r: r.header('Authorization', starts_with('Bearer')))
        requirements.that('GET', '/other', lambda r: r.secure())

        text = UnmatchedRequestReport(unmatched_request, [], requirements.all()).render()

        assert '# Requirements' in text
        assert 'Requirement 0' in text
        assert 'X Header' in text
        assert "  - Scheme is 'https' ignoring case" in text

    def test_render_is_cached(self, unmatched_request):
        """Test rendering happens once."""
        report = UnmatchedRequestReport(unmatched_request, [])
        assert report.render() is report.render()


class TestUnmatchedWsReport:
    """Test the WebSocket report."""

    def test_connection_and_messages(self):
        """Test connection and message states are marked."""
        ws = WebSocketExpectation('/ws')
        ws.receives('hello')
        ws.receives('bye')
        ws.connect()
        ws.find_match('hello').mark()

        text = UnmatchedWsReport(ws, 'unexpected').render()

        assert '# Unmatched Web Socket Message' in text
        assert "Received: 'unexpected'" in text
        assert '✓ Client connection made.' in text
        assert "X Received text message 'bye'" in text
        assert '(3 matchers: 2 matched, 1 failed)' in text
