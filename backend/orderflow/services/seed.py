"""Seed reference dealers grouped by brand."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from .. import models
from ..constants import DEALER_BY_MERK


@dataclass
class ImportStats:
    created: int = 0
    skipped: int = 0

    def __iadd__(self, other: "ImportStats") -> "ImportStats":
        self.created += other.created
        self.skipped += other.skipped
        return self


def load_existing_dealers(session: Session) -> set[tuple[str, str]]:
    rows = session.execute(select(models.Dealer.merk, models.Dealer.nama_dealer))
    return {(row[0], row[1]) for row in rows}


def dealer_code(merk: str, index: int) -> str:
    prefix = "".join(ch for ch in merk.upper() if ch.isalnum())[:3]
    return f"{prefix}-{index:03d}"


def seed_merk(session: Session, merk: str, names: Iterable[str], existing: set[tuple[str, str]]) -> ImportStats:
    stats = ImportStats()
    for index, nama_dealer in enumerate(names, start=1):
        if (merk, nama_dealer) in existing:
            stats.skipped += 1
            continue
        session.add(models.Dealer(kode_dealer=dealer_code(merk, index), merk=merk, nama_dealer=nama_dealer))
        existing.add((merk, nama_dealer))
        stats.created += 1
    return stats


def seed_dealers(session: Session, dealers_by_merk: Optional[Dict[str, List[str]]] = None) -> ImportStats:
    stats = ImportStats()
    existing = load_existing_dealers(session)
    for merk, names in (dealers_by_merk or DEALER_BY_MERK).items():
        stats += seed_merk(session, merk, names, existing)
    session.commit()
    return stats
