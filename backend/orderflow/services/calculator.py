"""Installment and down-payment (TDP) calculator.

All amounts are whole rupiah. Interest is quoted as an annual flat
percentage and converted to a monthly rate for the annuity formula.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Iterable, List

from ..exceptions import BelowMinimumDownPayment, InvalidInput


class SimulationMode(str, Enum):
    TDP = "tdp"
    ANGSURAN = "angsuran"


@dataclass(frozen=True)
class TenorOption:
    tenor: int
    rate: float
    is_active: bool | None = True


@dataclass(frozen=True)
class SimulationRow:
    tenor: int
    down_payment: int
    installment: int
    rate: float
    total_payment: int

    def as_dict(self) -> dict:
        return asdict(self)


def round_currency(value: float) -> int:
    """Round half up to a whole currency unit."""
    return int(math.floor(value + 0.5))


def _check_terms(otr: float, tenor_months: int, annual_rate_percent: float) -> None:
    if otr is None or otr <= 0:
        raise InvalidInput("OTR harus lebih besar dari 0")
    if isinstance(tenor_months, bool) or not isinstance(tenor_months, int) or tenor_months <= 0:
        raise InvalidInput("Tenor harus bilangan bulat lebih besar dari 0")
    if annual_rate_percent is None or annual_rate_percent < 0:
        raise InvalidInput("Bunga tidak boleh negatif")


def _annuity_factor(tenor_months: int, annual_rate_percent: float) -> float:
    """Installment per unit of principal."""
    monthly_rate = annual_rate_percent / 100 / 12
    if monthly_rate == 0:
        return 1 / tenor_months
    growth = math.pow(1 + monthly_rate, tenor_months)
    return monthly_rate * growth / (growth - 1)


def compute_installment(otr: float, down_payment: float, tenor_months: int, annual_rate_percent: float) -> int:
    _check_terms(otr, tenor_months, annual_rate_percent)
    if down_payment is None or down_payment < 0:
        raise InvalidInput("TDP tidak boleh negatif")
    if down_payment > otr:
        raise InvalidInput("TDP tidak boleh melebihi OTR")

    principal = otr - down_payment
    if principal == 0:
        return 0
    return round_currency(principal * _annuity_factor(tenor_months, annual_rate_percent))


def compute_down_payment_for_target_installment(
    otr: float, target_installment: float, tenor_months: int, annual_rate_percent: float
) -> int:
    _check_terms(otr, tenor_months, annual_rate_percent)
    if target_installment is None or target_installment < 0:
        raise InvalidInput("Angsuran tidak boleh negatif")

    principal = target_installment / _annuity_factor(tenor_months, annual_rate_percent)
    down_payment = otr - principal
    if down_payment < 0:
        raise InvalidInput("Angsuran terlalu besar untuk OTR dan tenor ini")
    return round_currency(down_payment)


def minimum_down_payment(otr: float, down_payment_percent: float) -> int:
    if otr is None or otr <= 0:
        raise InvalidInput("OTR harus lebih besar dari 0")
    return round_currency(down_payment_percent / 100 * otr)


def simulate_all_tenors(
    otr: float, mode: SimulationMode | str, amount: float, tenor_options: Iterable
) -> List[SimulationRow]:
    """One row per active tenor option, ascending by tenor.

    ``tenor_options`` may hold ``TenorOption`` values or anything exposing
    ``tenor``/``rate`` (or ``bunga``) and an optional ``is_active``.
    """
    mode = _parse_mode(mode)
    rows: List[SimulationRow] = []
    for option in tenor_options:
        if getattr(option, "is_active", True) is False:
            continue
        tenor = option.tenor
        rate = _option_rate(option)
        if mode is SimulationMode.TDP:
            installment = compute_installment(otr, amount, tenor, rate)
            down_payment = round_currency(amount)
        else:
            down_payment = compute_down_payment_for_target_installment(otr, amount, tenor, rate)
            installment = round_currency(amount)
        rows.append(
            SimulationRow(
                tenor=tenor,
                down_payment=down_payment,
                installment=installment,
                rate=rate,
                total_payment=down_payment + installment * tenor,
            )
        )
    rows.sort(key=lambda row: row.tenor)
    return rows


def simulate(
    otr: float,
    mode: SimulationMode | str,
    amount: float,
    tenor_options: Iterable,
    down_payment_percent: float = 0,
) -> List[SimulationRow]:
    """Run the simulation after enforcing the program's minimum TDP."""
    mode = _parse_mode(mode)
    if otr is None or otr <= 0:
        raise InvalidInput("OTR harus lebih besar dari 0")
    if mode is SimulationMode.TDP:
        minimum = minimum_down_payment(otr, down_payment_percent)
        if amount is None or amount < minimum:
            raise BelowMinimumDownPayment(minimum, amount)
    return simulate_all_tenors(otr, mode, amount, tenor_options)


def _parse_mode(mode) -> SimulationMode:
    try:
        return SimulationMode(mode)
    except ValueError as exc:
        raise InvalidInput(f"Mode simulasi tidak dikenal: {mode!r}") from exc


def _option_rate(option) -> float:
    rate = getattr(option, "rate", None)
    if rate is None:
        rate = getattr(option, "bunga")
    return float(rate)
