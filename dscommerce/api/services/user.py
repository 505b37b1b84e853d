"""Current-user profile service."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from dscommerce.api.models import UserDTO
from dscommerce.api.shared.auth import Principal
from dscommerce.api.shared.helpers.errors import AuthenticationError, ErrorCode
from dscommerce.db.repositories import UserRepository
from dscommerce.db.session import get_db


class UserService:
    def __init__(self, users: UserRepository):
        self.users = users

    async def get_me(self, principal: Principal) -> UserDTO:
        """Return the principal's own profile.

        Raises:
            AuthenticationError: The principal's user row no longer exists
        """
        user = await self.users.get(principal.id)
        if user is None:
            raise AuthenticationError(error_code=ErrorCode.AUTH_USER_NOT_FOUND)
        return UserDTO.from_entity(user)


def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(UserRepository(db))
