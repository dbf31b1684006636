from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from buildmart.core.config import ADMIN_ROLE
from buildmart.database import get_db
from buildmart.models.user import User


def get_optional_user(request: Request, db: Session = Depends(get_db)) -> Optional[User]:
    """
    Resolve the user stored in the cookie session, or None for anonymous requests.
    A session pointing at a deleted user counts as anonymous.
    """
    user_id = request.session.get("user_id")
    if not user_id:
        return None
    return db.query(User).filter(User.id == user_id).first()


def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    """
    Dependency for mutating routes: rejects the request before the handler runs
    when there is no authenticated session.
    """
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": "Authentication required"},
        )
    return user


def is_admin(user: User) -> bool:
    return user.role == ADMIN_ROLE


def ensure_owner_or_admin(record_user_id: Optional[str], current_user: User, entity: str, action: str) -> None:
    """
    Allow the mutation only for the record's owner or an admin.

    Raises:
        HTTPException: 403 when the current user is neither
    """
    if record_user_id == current_user.id or is_admin(current_user):
        return
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail={"message": f"Forbidden: You can only {action} your own {entity}"},
    )
