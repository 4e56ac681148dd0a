"""User administration API (sales, CMO, CMH, SPV, admin)."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import get_db
from ..deps import require_admin
from ..services.workflow import UserRole

router = APIRouter(prefix="/users", tags=["Users"])

ADMIN_ONLY = [Depends(require_admin)]


def _dump(payload) -> dict:
    data = payload.model_dump(exclude_unset=True)
    if data.get("role") is not None:
        data["role"] = UserRole(data["role"]).value
    return data


@router.get("/", response_model=List[schemas.UserOut])
def list_users(
    role: Optional[UserRole] = Query(None),
    active: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
):
    stmt = select(models.User)
    if role:
        stmt = stmt.where(models.User.role == role.value)
    if active is not None:
        stmt = stmt.where(models.User.is_active.is_(active))
    return db.scalars(stmt.order_by(models.User.nama_lengkap)).all()


@router.post("/", response_model=schemas.UserOut, status_code=status.HTTP_201_CREATED, dependencies=ADMIN_ONLY)
def create_user(payload: schemas.UserCreate, db: Session = Depends(get_db)):
    user = models.User(**_dump(payload))
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=400, detail="Username sudah digunakan") from exc
    db.refresh(user)
    return user


@router.get("/{user_id}", response_model=schemas.UserOut)
def get_user(user_id: int, db: Session = Depends(get_db)):
    user = db.get(models.User, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User tidak ditemukan")
    return user


@router.put("/{user_id}", response_model=schemas.UserOut, dependencies=ADMIN_ONLY)
def update_user(user_id: int, payload: schemas.UserUpdate, db: Session = Depends(get_db)):
    user = db.get(models.User, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User tidak ditemukan")
    for field, value in _dump(payload).items():
        setattr(user, field, value)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=ADMIN_ONLY)
def delete_user(user_id: int, db: Session = Depends(get_db)):
    user = db.get(models.User, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User tidak ditemukan")
    db.delete(user)
    db.commit()
