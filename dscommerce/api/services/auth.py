"""Ownership checks for user-owned resources.

A principal may act on a resource that belongs to a user when it is that
user, or when it holds ROLE_ADMIN.
"""

from dscommerce.api.shared.auth import Principal
from dscommerce.api.shared.helpers.errors import AuthorizationError
from dscommerce.logging_config import get_logger

logger = get_logger(__name__)


def is_self_or_admin(principal: Principal, target_user_id: int) -> bool:
    """Return True if the principal owns the target or is an admin."""
    return principal.id == target_user_id or principal.is_admin


def validate_self_or_admin(principal: Principal, target_user_id: int) -> None:
    """Raise AuthorizationError unless the principal owns the target or is an admin."""
    if not is_self_or_admin(principal, target_user_id):
        logger.info(
            "owner_check_denied",
            user_id=principal.id,
            target_user_id=target_user_id,
        )
        raise AuthorizationError()
