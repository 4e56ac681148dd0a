"""Field activity log (dealer visits, events, exhibitions)."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import get_db
from ..deps import get_actor, get_notifier
from ..services.notifier import Notifier, activity_event, safe_notify
from ..services.workflow import Actor, UserRole

router = APIRouter(prefix="/activities", tags=["Aktivitas"])

DELETE_ROLES = {UserRole.CMH, UserRole.ADMIN}


@router.get("/", response_model=List[schemas.AktivitasOut])
def list_activities(
    user_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    stmt = select(models.Aktivitas)
    if user_id:
        stmt = stmt.where(models.Aktivitas.user_id == user_id)
    return db.scalars(stmt.order_by(models.Aktivitas.tanggal.desc(), models.Aktivitas.id.desc())).all()


@router.post("/", response_model=schemas.AktivitasOut, status_code=status.HTTP_201_CREATED)
def create_activity(
    payload: schemas.AktivitasCreate,
    actor: Actor = Depends(get_actor),
    notifier: Notifier = Depends(get_notifier),
    db: Session = Depends(get_db),
):
    aktivitas = models.Aktivitas(
        **payload.model_dump(),
        user_id=actor.id,
        user_name=actor.name,
        role=actor.role.value,
    )
    db.add(aktivitas)
    db.commit()
    db.refresh(aktivitas)
    safe_notify(notifier, activity_event(aktivitas, actor))
    return aktivitas


@router.delete("/{aktivitas_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_activity(aktivitas_id: int, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    if actor.role not in DELETE_ROLES:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Hanya CMH atau admin yang dapat menghapus aktivitas")
    aktivitas = db.get(models.Aktivitas, aktivitas_id)
    if not aktivitas:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Aktivitas tidak ditemukan")
    db.delete(aktivitas)
    db.commit()
