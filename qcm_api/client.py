"""Async client for the quiz provider and answer checker."""
import asyncio
import logging
from typing import List, Optional, Union

import aiohttp

from config import settings
from .endpoints import CHECK_PATH, DEFAULT_HEADERS, QUESTIONS_PATH
from .exceptions import InvalidResponseError, NetworkError
from .models import CheckResult, QuestionBatch, batch_from_payload, check_result_from_payload

logger = logging.getLogger(__name__)


class QcmClient:
    """Async client for GET /api/qcm and POST /api/check."""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[int] = None):
        """
        Args:
            base_url: Server root, QCM_API_URL by default
            timeout: Request timeout in seconds, QCM_TIMEOUT by default
        """
        self.base_url = (base_url or settings.QCM_API_URL).rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout or settings.QCM_TIMEOUT)
        self._session: Optional[aiohttp.ClientSession] = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(headers=DEFAULT_HEADERS, timeout=self.timeout)
        return self._session

    async def _request(self, method: str, path: str, **kwargs):
        """
        Perform a request and decode the JSON body.

        Raises:
            NetworkError: Connection problem, timeout or HTTP status >= 400
            InvalidResponseError: Body is not JSON
        """
        url = f"{self.base_url}{path}"
        session = self._get_session()

        try:
            async with session.request(method, url, **kwargs) as resp:
                if resp.status >= 400:
                    text = await resp.text()
                    logger.error("%s %s -> %d: %s", method, path, resp.status, text[:200])
                    raise NetworkError(f"{method} {path} returned HTTP {resp.status}")
                try:
                    return await resp.json(content_type=None)
                except ValueError as e:
                    raise InvalidResponseError(f"{method} {path} returned invalid JSON: {e}")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("Request %s %s failed: %s", method, path, e)
            raise NetworkError(f"Request {method} {path} failed: {e}")

    async def get_questions(self, count: Optional[int] = None, randomize: bool = False) -> QuestionBatch:
        """
        Fetch a question batch.

        Args:
            count: How many questions to request, None for all
            randomize: Ask the provider to shuffle before slicing

        Returns:
            QuestionBatch with the valid questions
        """
        params = {}
        if count is not None:
            params["count"] = str(count)
        if randomize:
            params["random"] = "true"

        payload = await self._request("GET", QUESTIONS_PATH, params=params)
        batch = batch_from_payload(payload)
        logger.info("Loaded %d questions (total=%d)", len(batch.questions), batch.total)
        return batch

    async def get_available_count(self) -> int:
        """Ask the provider for its full set and return how many questions it has."""
        batch = await self.get_questions()
        return batch.total

    async def check_answer(self, question_id: int, answer: Union[int, List[int]]) -> CheckResult:
        """Submit an answer for server-side verification."""
        payload = await self._request(
            "POST", CHECK_PATH, json={"questionId": question_id, "answer": answer}
        )
        return check_result_from_payload(payload)

    async def close(self):
        """Close the underlying HTTP session."""
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
