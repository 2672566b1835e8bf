# thinkarena/routes/deps.py
from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from ..db import get_db
from ..models import User


def current_user(x_user_id: int | None = Header(None), db: Session = Depends(get_db)) -> User:
    """Authentication happens upstream; the proxy forwards the user id."""
    if x_user_id is None:
        raise HTTPException(401, "Not logged in")
    user = db.query(User).filter(User.id == x_user_id).first()
    if not user:
        raise HTTPException(401, "Not logged in")
    return user


def admin_user(user: User = Depends(current_user)) -> User:
    if not user.is_admin:
        raise HTTPException(403, "Admin access required")
    return user
