"""Credit simulation runs against a stored program."""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from .. import models
from ..exceptions import InvalidInput
from .calculator import SimulationMode, SimulationRow, minimum_down_payment, simulate
from .workflow import Actor

logger = logging.getLogger(__name__)


def resolve_program(db: Session, program_id: Optional[int] = None, nama_program: Optional[str] = None) -> models.Program:
    program = None
    if program_id is not None:
        program = db.get(models.Program, program_id)
    elif nama_program:
        program = db.scalar(select(models.Program).where(models.Program.nama_program == nama_program))
    else:
        raise InvalidInput("Program wajib dipilih")
    if program is None:
        raise InvalidInput("Program tidak ditemukan")
    return program


def run_simulation(program: models.Program, otr: int, mode, tdp=None, angsuran=None) -> Tuple[int, List[SimulationRow]]:
    """Return (minimum TDP, rows). Raises BelowMinimumDownPayment in TDP mode."""
    mode = SimulationMode(mode)
    amount = tdp if mode is SimulationMode.TDP else angsuran
    if amount is None:
        raise InvalidInput("TDP wajib diisi" if mode is SimulationMode.TDP else "Angsuran wajib diisi")
    rows = simulate(otr, mode, amount, program.tenor_bunga, program.tdp_persen)
    return minimum_down_payment(otr, program.tdp_persen), rows


def save_simulation(db: Session, data: dict, actor: Actor) -> models.SimulasiKredit:
    program = resolve_program(db, data.get("program_id"), data.get("nama_program"))
    _, rows = run_simulation(program, data["otr"], data["mode"], data.get("tdp"), data.get("angsuran"))
    if not rows:
        raise InvalidInput("Program tidak memiliki tenor aktif")

    record = models.SimulasiKredit(
        user_id=str(actor.id),
        user_name=actor.name,
        merk=data.get("merk") or program.merk,
        dealer=data.get("dealer"),
        jenis_pembiayaan=program.jenis_pembiayaan,
        nama_program=program.nama_program,
        otr=data["otr"],
        mode=SimulationMode(data["mode"]).value,
        tdp=data.get("tdp"),
        angsuran=data.get("angsuran"),
        cmo_id=data.get("cmo_id"),
        cmo_name=data.get("cmo_name"),
        hasil_simulasi=[row.as_dict() for row in rows],
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    logger.info("Simulation %s saved for %s (%d tenor rows)", record.id, actor.name, len(rows))
    return record
