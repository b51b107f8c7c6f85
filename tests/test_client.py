"""Tests for the quiz API client."""
import asyncio

import aiohttp
import pytest
from unittest.mock import AsyncMock, MagicMock

from qcm_api.client import QcmClient
from qcm_api.exceptions import InvalidResponseError, NetworkError


def _make_response(status: int = 200, payload=None, json_error: Exception | None = None) -> MagicMock:
    """Mock of aiohttp ClientResponse."""
    resp = MagicMock()
    resp.status = status
    resp.text = AsyncMock(return_value="error body")
    if json_error is not None:
        resp.json = AsyncMock(side_effect=json_error)
    else:
        resp.json = AsyncMock(return_value=payload)
    return resp


def _make_client(resp=None, request_error: Exception | None = None) -> QcmClient:
    """QcmClient whose HTTP session is a mock returning `resp`."""
    client = QcmClient(base_url="http://quiz.test/", timeout=5)
    session = MagicMock()
    session.closed = False
    session.close = AsyncMock()
    if request_error is not None:
        session.request.side_effect = request_error
    else:
        session.request.return_value.__aenter__.return_value = resp
        session.request.return_value.__aexit__.return_value = False
    client._session = session
    return client


class TestRequests:
    """Tests for the request parameters sent by QcmClient."""

    async def test_get_questions_params(self):
        """Count and random flag are sent as query parameters."""
        client = QcmClient(base_url="http://quiz.test")
        client._request = AsyncMock(return_value={"questions": [], "total": 0})

        await client.get_questions(10, randomize=True)

        client._request.assert_awaited_once_with(
            "GET", "/api/qcm", params={"count": "10", "random": "true"}
        )

    async def test_get_questions_without_random(self):
        """Random order off: the random parameter is left out."""
        client = QcmClient(base_url="http://quiz.test")
        client._request = AsyncMock(return_value={"questions": [], "total": 0})

        await client.get_questions(5)

        client._request.assert_awaited_once_with("GET", "/api/qcm", params={"count": "5"})

    async def test_get_available_count_sends_no_query(self):
        """Available count is read from an unfiltered request."""
        client = QcmClient(base_url="http://quiz.test")
        client._request = AsyncMock(return_value={
            "questions": [{"id": 1, "question": "Q", "options": ["a", "b"], "correct": 0}],
            "total": 42,
        })

        result = await client.get_available_count()

        assert result == 42
        client._request.assert_awaited_once_with("GET", "/api/qcm", params={})

    async def test_check_answer_body(self):
        """Question ID and answer are posted as JSON."""
        client = QcmClient(base_url="http://quiz.test")
        client._request = AsyncMock(return_value={"correct": False, "correctAnswer": 2})

        result = await client.check_answer(3, [0, 1])

        client._request.assert_awaited_once_with(
            "POST", "/api/check", json={"questionId": 3, "answer": [0, 1]}
        )
        assert result.correct is False
        assert result.correct_answer == (2,)


class TestErrorMapping:
    """Tests for how transport failures become QcmAPIError subclasses."""

    async def test_success_returns_json(self):
        """A 200 response returns the decoded body."""
        client = _make_client(_make_response(payload={"correct": True}))

        result = await client._request("POST", "/api/check", json={})

        assert result == {"correct": True}
        client._session.request.assert_called_once_with(
            "POST", "http://quiz.test/api/check", json={}
        )

    async def test_http_error_status(self):
        """An error status raises NetworkError."""
        client = _make_client(_make_response(status=404))

        with pytest.raises(NetworkError, match="404"):
            await client._request("POST", "/api/check", json={})

    async def test_invalid_json(self):
        """A body that is not JSON raises InvalidResponseError."""
        client = _make_client(_make_response(json_error=ValueError("Expecting value")))

        with pytest.raises(InvalidResponseError):
            await client._request("GET", "/api/qcm")

    async def test_connection_error(self):
        """Connection refused raises NetworkError."""
        client = _make_client(request_error=aiohttp.ClientConnectionError("refused"))

        with pytest.raises(NetworkError):
            await client._request("GET", "/api/qcm")

    async def test_timeout(self):
        """A timeout raises NetworkError."""
        client = _make_client(request_error=asyncio.TimeoutError())

        with pytest.raises(NetworkError):
            await client._request("GET", "/api/qcm")

    async def test_close(self):
        """close() closes the underlying aiohttp session."""
        client = _make_client(_make_response())
        session = client._session

        await client.close()

        session.close.assert_awaited_once()
        assert client._session is None
