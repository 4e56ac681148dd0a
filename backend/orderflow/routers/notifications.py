"""In-app notification inbox."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import get_db

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("/", response_model=List[schemas.NotificationOut])
def list_notifications(
    user_id: str = Query(...),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
):
    stmt = (
        select(models.Notification)
        .where(models.Notification.user_id == user_id)
        .order_by(models.Notification.created_at.desc(), models.Notification.id.desc())
        .limit(limit)
    )
    return db.scalars(stmt).all()


@router.get("/unread-count", response_model=schemas.UnreadCount)
def unread_count(user_id: str = Query(...), db: Session = Depends(get_db)):
    total = db.scalar(
        select(func.count())
        .select_from(models.Notification)
        .where(models.Notification.user_id == user_id, models.Notification.is_read.is_(False))
    ) or 0
    return schemas.UnreadCount(user_id=user_id, unread=total)


@router.post("/{notification_id}/read", response_model=schemas.NotificationOut)
def mark_read(notification_id: int, db: Session = Depends(get_db)):
    notification = db.get(models.Notification, notification_id)
    if not notification:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notifikasi tidak ditemukan")
    notification.is_read = True
    db.add(notification)
    db.commit()
    db.refresh(notification)
    return notification


@router.post("/read-all", response_model=schemas.UnreadCount)
def mark_all_read(user_id: str = Query(...), db: Session = Depends(get_db)):
    db.execute(
        update(models.Notification)
        .where(models.Notification.user_id == user_id, models.Notification.is_read.is_(False))
        .values(is_read=True)
    )
    db.commit()
    return schemas.UnreadCount(user_id=user_id, unread=0)
