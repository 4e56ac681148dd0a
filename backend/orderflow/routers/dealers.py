"""Dealer API."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import get_db
from ..deps import require_admin

router = APIRouter(prefix="/dealers", tags=["Dealers"])

ADMIN_ONLY = [Depends(require_admin)]


@router.get("/", response_model=List[schemas.DealerOut])
def list_dealers(
    merk: Optional[str] = Query(None),
    active: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
):
    stmt = select(models.Dealer)
    if merk:
        stmt = stmt.where(models.Dealer.merk == merk)
    if active is not None:
        stmt = stmt.where(models.Dealer.is_active.is_(active))
    return db.scalars(stmt.order_by(models.Dealer.merk, models.Dealer.nama_dealer)).all()


@router.get("/merks", response_model=List[str])
def list_merks(db: Session = Depends(get_db)):
    return db.scalars(select(models.Dealer.merk).distinct().order_by(models.Dealer.merk)).all()


@router.post("/", response_model=schemas.DealerOut, status_code=status.HTTP_201_CREATED, dependencies=ADMIN_ONLY)
def create_dealer(payload: schemas.DealerCreate, db: Session = Depends(get_db)):
    dealer = models.Dealer(**payload.model_dump())
    db.add(dealer)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=400, detail="Kode dealer sudah ada") from exc
    db.refresh(dealer)
    return dealer


@router.get("/{dealer_id}", response_model=schemas.DealerOut)
def get_dealer(dealer_id: int, db: Session = Depends(get_db)):
    dealer = db.get(models.Dealer, dealer_id)
    if not dealer:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Dealer tidak ditemukan")
    return dealer


@router.put("/{dealer_id}", response_model=schemas.DealerOut, dependencies=ADMIN_ONLY)
def update_dealer(dealer_id: int, payload: schemas.DealerUpdate, db: Session = Depends(get_db)):
    dealer = db.get(models.Dealer, dealer_id)
    if not dealer:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Dealer tidak ditemukan")
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(dealer, field, value)
    db.add(dealer)
    db.commit()
    db.refresh(dealer)
    return dealer


@router.delete("/{dealer_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=ADMIN_ONLY)
def delete_dealer(dealer_id: int, db: Session = Depends(get_db)):
    dealer = db.get(models.Dealer, dealer_id)
    if not dealer:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Dealer tidak ditemukan")
    db.delete(dealer)
    db.commit()
