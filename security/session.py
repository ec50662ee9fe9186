"""
security/session.py
-------------------
Service-level identity verification.

The Telegram whitelist (`security.auth.authorized_only`) decides who may talk
to the bot; this check confirms the caller is a registered user before any
data is read or written on their behalf.
"""

from repositories.user_repo import UserRepository
from services.errors import SessionInvalidError
from utils.logger import get_logger

logger = get_logger(__name__)


def verify_caller(user_id, user_repo: UserRepository | None = None, conn=None) -> dict:
    """
    Resolve the caller to a registered user.

    Returns:
        The user dict from UserRepository.

    Raises:
        SessionInvalidError: If `user_id` is missing or not registered.
    """
    if not user_id:
        raise SessionInvalidError()
    repo = user_repo or UserRepository()
    user = repo.get_by_telegram_id(user_id, conn=conn)
    if user is None:
        logger.warning(f"Rejected request from unregistered user {user_id}")
        raise SessionInvalidError()
    return user
