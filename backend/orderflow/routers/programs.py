"""Financing program API."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import get_db
from ..deps import require_admin

router = APIRouter(prefix="/programs", tags=["Programs"])

ADMIN_ONLY = [Depends(require_admin)]


def _tenors(items: List[schemas.TenorBunga]) -> List[models.ProgramTenor]:
    return [models.ProgramTenor(**item.model_dump()) for item in sorted(items, key=lambda tb: tb.tenor)]


@router.get("/", response_model=List[schemas.ProgramOut])
def list_programs(
    merk: Optional[str] = Query(None),
    jenis_pembiayaan: Optional[str] = Query(None),
    active: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
):
    stmt = select(models.Program)
    if merk:
        stmt = stmt.where(models.Program.merk == merk)
    if jenis_pembiayaan:
        stmt = stmt.where(models.Program.jenis_pembiayaan == jenis_pembiayaan)
    if active is not None:
        stmt = stmt.where(models.Program.is_active.is_(active))
    return db.scalars(stmt.order_by(models.Program.nama_program)).all()


@router.post("/", response_model=schemas.ProgramOut, status_code=status.HTTP_201_CREATED, dependencies=ADMIN_ONLY)
def create_program(payload: schemas.ProgramCreate, db: Session = Depends(get_db)):
    data = payload.model_dump(exclude={"tenor_bunga"})
    program = models.Program(**data, tenor_bunga=_tenors(payload.tenor_bunga))
    db.add(program)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=400, detail="Nama program sudah ada") from exc
    db.refresh(program)
    return program


@router.get("/{program_id}", response_model=schemas.ProgramOut)
def get_program(program_id: int, db: Session = Depends(get_db)):
    program = db.get(models.Program, program_id)
    if not program:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Program tidak ditemukan")
    return program


@router.put("/{program_id}", response_model=schemas.ProgramOut, dependencies=ADMIN_ONLY)
def update_program(program_id: int, payload: schemas.ProgramUpdate, db: Session = Depends(get_db)):
    program = db.get(models.Program, program_id)
    if not program:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Program tidak ditemukan")

    updates = payload.model_dump(exclude_unset=True, exclude={"tenor_bunga"})
    for field, value in updates.items():
        setattr(program, field, value)
    if payload.tenor_bunga is not None:
        program.tenor_bunga = _tenors(payload.tenor_bunga)

    db.add(program)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=400, detail="Nama program sudah ada") from exc
    db.refresh(program)
    return program


@router.delete("/{program_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=ADMIN_ONLY)
def delete_program(program_id: int, db: Session = Depends(get_db)):
    program = db.get(models.Program, program_id)
    if not program:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Program tidak ditemukan")
    db.delete(program)
    db.commit()
