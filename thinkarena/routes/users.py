# thinkarena/routes/users.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import models, schemas
from ..db import get_db
from .deps import current_user

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=schemas.UserOut)
def me(user: models.User = Depends(current_user)):
    return user


@router.post("/display-name", response_model=schemas.UserOut)
def update_display_name(
    body: schemas.DisplayNameIn,
    db: Session = Depends(get_db),
    user: models.User = Depends(current_user),
):
    user.display_name = body.display_name
    db.commit()
    db.refresh(user)
    return user


@router.post("/onboarding", response_model=schemas.UserOut)
def complete_onboarding(db: Session = Depends(get_db), user: models.User = Depends(current_user)):
    user.has_completed_onboarding = True
    db.commit()
    db.refresh(user)
    return user
