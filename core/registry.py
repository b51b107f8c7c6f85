"""Per-user quiz sessions and their pending delayed advances."""
import asyncio
import logging
from typing import Awaitable, Callable, Dict

from core.session import QuizSession

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Keeps one QuizSession per Telegram user and at most one pending task each."""

    def __init__(self):
        self._sessions: Dict[int, QuizSession] = {}
        self._pending: Dict[int, asyncio.Task] = {}

    def get(self, user_id: int) -> QuizSession:
        if user_id not in self._sessions:
            self._sessions[user_id] = QuizSession()
        return self._sessions[user_id]

    def schedule(
        self,
        user_id: int,
        delay: float,
        callback: Callable[[], Awaitable[None]],
    ) -> asyncio.Task:
        """
        Run `callback` after `delay` seconds, replacing any pending task of the user.

        Args:
            user_id: Telegram user ID
            delay: Seconds to wait
            callback: Coroutine function called without arguments

        Returns:
            The scheduled task
        """
        self.cancel(user_id)
        task = asyncio.create_task(self._run_later(user_id, delay, callback))
        self._pending[user_id] = task
        return task

    async def _run_later(self, user_id: int, delay: float, callback) -> None:
        try:
            await asyncio.sleep(delay)
            await callback()
        except asyncio.CancelledError:
            logger.debug("Pending advance cancelled for user_id=%d", user_id)
            raise
        except Exception:
            logger.exception("Delayed advance failed for user_id=%d", user_id)
        finally:
            if self._pending.get(user_id) is asyncio.current_task():
                del self._pending[user_id]

    def has_pending(self, user_id: int) -> bool:
        task = self._pending.get(user_id)
        return task is not None and not task.done()

    def cancel(self, user_id: int) -> bool:
        """Cancel the user's pending task. Returns True if one was running."""
        task = self._pending.pop(user_id, None)
        if task is None or task.done():
            return False
        task.cancel()
        return True

    def discard(self, user_id: int) -> None:
        """Cancel pending work, reset the user's session and forget it."""
        self.cancel(user_id)
        session = self._sessions.pop(user_id, None)
        if session is not None:
            session.reset()


# Global registry instance
sessions = SessionRegistry()
