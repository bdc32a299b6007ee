from typing import Annotated, Optional

from fastapi import Header
from opentelemetry import trace

from src.platform.exception.exceptions import AuthenticationError
from src.service.cinema.domain.entity.user_entity import UserIdentity


async def get_current_user(
    x_user_id: Annotated[Optional[str], Header()] = None,
    x_user_email: Annotated[Optional[str], Header()] = None,
) -> UserIdentity:
    """Headers are set by the auth gateway in front of this service."""
    tracer = trace.get_tracer(__name__)
    with tracer.start_as_current_span('auth.get_current_user'):
        if not x_user_id:
            raise AuthenticationError('Not authenticated')
        return UserIdentity(id=x_user_id, email=x_user_email)
