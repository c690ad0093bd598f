"""
Credit Service - per-user AI credit accounting.

A credit is reserved with a single conditional UPDATE before the LLM is
called, so two concurrent requests can never spend the same last
credit. charge() wraps the work paid for and refunds the credit when
that work raises.
"""
from contextlib import contextmanager
from typing import Generator, Optional

from collabdocs.core.exceptions import InsufficientCreditsError, UserNotFoundError
from collabdocs.core.logging_config import LoggerMixin
from collabdocs.database.connection import DatabaseConnection, get_database
from collabdocs.database.models import User


class CreditService(LoggerMixin):

    def __init__(self, db: Optional[DatabaseConnection] = None):
        self.db = db or get_database()

    def reserve(self, user_id: int) -> int:
        """
        Take one credit.

        Returns:
            Credits remaining after the reservation

        Raises:
            InsufficientCreditsError: Balance is zero
            UserNotFoundError: Unknown user
        """
        with self.db.get_session() as session:
            updated = (
                session.query(User)
                .filter(User.id == user_id, User.ai_credits > 0)
                .update({User.ai_credits: User.ai_credits - 1}, synchronize_session=False)
            )
            if not updated:
                if session.get(User, user_id) is None:
                    raise UserNotFoundError(user_id)
                self.logger.info(f"User {user_id} is out of AI credits")
                raise InsufficientCreditsError(user_id)

            remaining = session.query(User.ai_credits).filter(User.id == user_id).scalar()

        self.logger.debug(f"Reserved 1 credit for user {user_id} ({remaining} left)")
        return remaining

    def refund(self, user_id: int) -> int:
        """Give back a reserved credit; returns the new balance."""
        with self.db.get_session() as session:
            session.query(User).filter(User.id == user_id).update(
                {User.ai_credits: User.ai_credits + 1}, synchronize_session=False
            )
            remaining = session.query(User.ai_credits).filter(User.id == user_id).scalar()

        self.logger.info(f"Refunded 1 credit to user {user_id} ({remaining} left)")
        return remaining or 0

    @contextmanager
    def charge(self, user_id: int) -> Generator[int, None, None]:
        """
        Reserve a credit for the enclosed block.

        Yields:
            Credits remaining after the reservation

        Any exception raised inside the block refunds the credit and
        propagates.
        """
        remaining = self.reserve(user_id)
        try:
            yield remaining
        except Exception:
            self.refund(user_id)
            raise

    def balance(self, user_id: int) -> int:
        with self.db.get_session() as session:
            credits = session.query(User.ai_credits).filter(User.id == user_id).scalar()
        if credits is None:
            raise UserNotFoundError(user_id)
        return credits


# Module-level instance
_credit_service: Optional[CreditService] = None


def get_credit_service() -> CreditService:
    global _credit_service
    if _credit_service is None:
        _credit_service = CreditService()
    return _credit_service
