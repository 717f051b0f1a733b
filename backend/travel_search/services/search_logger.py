"""
Search Logger
Best-effort analytics trail: one search_logs row per completed search.

Runs after the HTTP response has been sent (FastAPI BackgroundTasks) and
uses its own session, so it never shares a transaction with the search
itself. Failures are logged and dropped; there are no retries.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional
import logging

from sqlalchemy.orm import Session

from travel_search.db.repositories import SearchLogRepository

logger = logging.getLogger(__name__)

MAX_TERM_LENGTH = 255
MAX_IP_LENGTH = 45


@dataclass(frozen=True)
class SearchAttempt:
    search_term: str
    filters: Any
    product_type: str
    results_count: int
    user_ip: str = ""
    user_agent: str = ""
    created_at: datetime = field(default_factory=datetime.utcnow)

    @classmethod
    def build(
        cls,
        search_term: Optional[str],
        filters: Any,
        product_type: str,
        results_count: int,
        user_ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> "SearchAttempt":
        """Normalise request values to what the search_logs columns hold."""
        return cls(
            search_term=(search_term or "").strip()[:MAX_TERM_LENGTH],
            filters=filters if filters is not None else {},
            product_type=product_type,
            results_count=results_count,
            user_ip=(user_ip or "")[:MAX_IP_LENGTH],
            user_agent=user_agent or "",
        )


class SearchLogger:
    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def record(self, attempt: SearchAttempt) -> bool:
        """Persist one attempt. Returns False instead of raising on any failure."""
        session = None
        try:
            session = self._session_factory()
            SearchLogRepository(session).add(attempt)
            session.commit()
            return True
        except Exception as e:
            logger.warning(f"Search logging failed for product_type={attempt.product_type}: {e}")
            if session is not None:
                try:
                    session.rollback()
                except Exception as rollback_error:
                    logger.debug(f"Search log rollback failed: {rollback_error}")
            return False
        finally:
            if session is not None:
                try:
                    session.close()
                except Exception as close_error:
                    logger.debug(f"Search log session close failed: {close_error}")
