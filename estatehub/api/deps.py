from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from estatehub.core.database import get_db
from estatehub.core.exceptions import ForbiddenError, NotAuthorizedError, ValidationError
from estatehub.models.user import User, UserRole
from estatehub.utils.auth import decode_token
from typing import Optional
from uuid import UUID

bearer_scheme = HTTPBearer(auto_error=False)

async def get_current_user(
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> Optional[User]:
    if not credentials:
        return None

    payload = decode_token(credentials.credentials)
    if not payload:
        return None

    user_id = payload.get("sub")
    if not user_id:
        return None

    try:
        return db.get(User, UUID(user_id))
    except ValueError:
        return None

async def get_current_active_user(
    current_user: Optional[User] = Depends(get_current_user)
) -> User:
    if not current_user:
        raise NotAuthorizedError("Not authorized, no valid token")
    if not current_user.is_active:
        raise ValidationError("Inactive user")
    return current_user

def require_role(*roles: UserRole):
    async def role_checker(
        current_user: User = Depends(get_current_active_user)
    ):
        if current_user.role not in roles:
            raise ForbiddenError(
                f"User role '{current_user.role.value}' is not authorized to access this route"
            )
        return current_user
    return role_checker

require_lister = require_role(UserRole.OWNER, UserRole.BROKER)
