"""
User Service
User records and channel profiles
"""

from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError

from src.app.models import User
from src.domain.exceptions import (
    PermissionDeniedError,
    ResourceAlreadyExistsError,
    ResourceNotFoundError,
)
from src.domain.interfaces import IUserRepository
from src.domain.schemas import ChannelProfileUpdate, UserCreateRequest
from src.services.base_service import BaseService


class UserService(BaseService):
    """
    User operations service

    Handles:
    - Account creation with username / email uniqueness
    - Channel profile edits
    """

    def __init__(self, user_repo: IUserRepository, config=None):
        super().__init__(config=config)
        self.user_repo = user_repo

    def get_service_name(self) -> str:
        return "user"

    async def create_user(self, payload: Dict[str, Any]) -> User:
        """
        Create a user; the channel name starts out as the username

        Args:
            payload: username, email, password_hash, optional role / avatar

        Returns:
            Created user

        Raises:
            ValidationError: Malformed username or email
            ResourceAlreadyExistsError: Username or email taken
        """
        request = self.parse_payload(UserCreateRequest, payload)

        if await self.user_repo.get_by_username(request.username):
            raise ResourceAlreadyExistsError("User", request.username, field="username")
        if await self.user_repo.get_by_email(request.email):
            raise ResourceAlreadyExistsError("User", request.email, field="email")

        try:
            user = await self.user_repo.create(
                username=request.username,
                email=request.email,
                password_hash=request.password_hash,
                role=request.role,
                avatar=request.avatar,
                channel_name=request.username,
            )
        except IntegrityError as e:
            # Lost a race with a concurrent registration
            field = "email" if await self.user_repo.get_by_email(request.email) else "username"
            raise ResourceAlreadyExistsError(
                "User", getattr(request, field), field=field
            ) from e
        self.log_info(f"Created user {user.id} ({user.username})")
        return user

    async def get_user(self, user_id: str) -> User:
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise ResourceNotFoundError("User", user_id)
        return user

    async def update_channel_profile(
        self, channel_id: str, actor_id: str, payload: Dict[str, Any]
    ) -> User:
        """
        Edit channel name / description / banner

        Raises:
            PermissionDeniedError: Actor is not the channel owner
            ResourceNotFoundError: Unknown channel
        """
        request = self.parse_payload(ChannelProfileUpdate, payload)
        if actor_id != channel_id:
            raise PermissionDeniedError("edit", "Channel", channel_id)

        changes = {
            "channel_name": request.name,
            "channel_description": request.description,
            "channel_banner": request.banner,
        }
        changes = {key: value for key, value in changes.items() if value is not None}

        user = await self.user_repo.update(channel_id, **changes)
        if user is None:
            raise ResourceNotFoundError("User", channel_id)

        self.log_info(f"Updated channel profile {channel_id}: {sorted(changes)}")
        return user
