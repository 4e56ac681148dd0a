"""Credit simulation API."""

from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import get_db
from ..deps import get_actor, http_error
from ..exceptions import OrderFlowError
from ..services.simulations import resolve_program, run_simulation, save_simulation
from ..services.workflow import Actor

router = APIRouter(prefix="/simulations", tags=["Simulations"])


@router.post("/calculate", response_model=schemas.SimulationResult)
def calculate(payload: schemas.SimulationIn, db: Session = Depends(get_db)):
    try:
        program = resolve_program(db, payload.program_id, payload.nama_program)
        minimum, rows = run_simulation(program, payload.otr, payload.mode, payload.tdp, payload.angsuran)
    except OrderFlowError as exc:
        raise http_error(exc) from exc
    return schemas.SimulationResult(
        nama_program=program.nama_program,
        otr=payload.otr,
        mode=payload.mode,
        minimum_tdp=minimum,
        results=[row.as_dict() for row in rows],
    )


@router.post("/", response_model=schemas.SimulasiOut, status_code=status.HTTP_201_CREATED)
def save(payload: schemas.SimulationIn, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    try:
        return save_simulation(db, payload.model_dump(), actor)
    except OrderFlowError as exc:
        raise http_error(exc) from exc


@router.get("/", response_model=List[schemas.SimulasiOut])
def list_simulations(
    user_id: str = Query(...),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
):
    stmt = (
        select(models.SimulasiKredit)
        .where(models.SimulasiKredit.user_id == user_id)
        .order_by(models.SimulasiKredit.created_at.desc(), models.SimulasiKredit.id.desc())
        .limit(limit)
    )
    return db.scalars(stmt).all()
