# paintledger/finance/payouts.py
"""Per-job financial view of a subcontractor payout.

Everything here is a read-side projection over a snapshot fetched by the
caller. Nothing is cached: payments and time entries change between reads,
so the view is rebuilt from scratch on every call.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from .errors import ValidationError
from .money import non_negative, round_money, safe_pct


class PaymentStatus(str, enum.Enum):
    PAID = 'paid'
    PARTIAL = 'partial'
    PENDING = 'pending'


@dataclass(frozen=True)
class SubcontractorPayout:
    job_id: int
    subcontractor_id: int
    final_payout: float
    id: int | None = None

    def __post_init__(self):
        object.__setattr__(self, 'final_payout', non_negative(self.final_payout, 'final_payout'))


@dataclass(frozen=True)
class SubcontractorPayment:
    amount: float
    status: str = PaymentStatus.PENDING.value
    payout_id: int | None = None
    paid_date: date | None = None

    def __post_init__(self):
        object.__setattr__(self, 'amount', non_negative(self.amount, 'amount'))
        object.__setattr__(self, 'status', (self.status or '').strip().lower())

    @property
    def is_paid(self) -> bool:
        return self.status == PaymentStatus.PAID.value


@dataclass(frozen=True)
class TimeEntry:
    """A time entry joined to its employee.

    ``subcontractor_id`` is the subcontractor the *employee* belongs to; it is
    what the labor-cost join filters on.
    """
    employee_id: int
    job_id: int
    subcontractor_id: int
    hours_worked: float
    hourly_rate: float
    is_owner: bool = False
    id: int | None = None
    work_date: date | None = None

    def __post_init__(self):
        object.__setattr__(self, 'hours_worked', non_negative(self.hours_worked, 'hours_worked'))
        object.__setattr__(self, 'hourly_rate', non_negative(self.hourly_rate, 'hourly_rate'))

    @property
    def labor_cost(self) -> float:
        return self.hours_worked * self.hourly_rate


@dataclass(frozen=True)
class JobMaterialCost:
    job_id: int
    subcontractor_id: int
    total_cost: float
    notes: str | None = None

    def __post_init__(self):
        object.__setattr__(self, 'total_cost', non_negative(self.total_cost, 'total_cost'))


def filter_time_entries(entries: Iterable[TimeEntry], job_id, subcontractor_id) -> list[TimeEntry]:
    """Time entries that count toward this subcontractor's cost on this job.

    An entry is kept only when it was logged on ``job_id`` *and* by an
    employee of ``subcontractor_id``. Other subcontractors' crews on the same
    job never contribute labor cost.
    """
    return [
        e for e in entries
        if e.job_id == job_id and e.subcontractor_id == subcontractor_id
    ]


def compute_labor_cost(entries: Iterable[TimeEntry]) -> float:
    return sum((e.labor_cost for e in entries), 0.0)


def compute_owner_hours(entries: Iterable[TimeEntry]) -> float | None:
    """Hours worked by owner-employees, ``None`` when the owner logged none."""
    hours = [e.hours_worked for e in entries if e.is_owner]
    if not hours:
        return None
    return sum(hours, 0.0)


def compute_paid_amount(payments: Iterable[SubcontractorPayment]) -> float:
    """Sum of payments whose status is ``paid``; pending ones don't count."""
    return sum((p.amount for p in payments if p.is_paid), 0.0)


def classify_payment_status(payments: Iterable[SubcontractorPayment], final_payout) -> PaymentStatus:
    """``paid`` / ``partial`` / ``pending`` for a payout.

    A payout of 0 is ``paid`` outright: nothing is owed, so there is nothing
    left to wait for. Otherwise the payout is ``paid`` once the paid amount
    reaches it, ``partial`` while something but not all has been paid and
    ``pending`` while nothing has.
    """
    total = non_negative(final_payout, 'final_payout')
    if total == 0:
        return PaymentStatus.PAID
    paid = compute_paid_amount(payments)
    if paid >= total:
        return PaymentStatus.PAID
    if paid > 0:
        return PaymentStatus.PARTIAL
    return PaymentStatus.PENDING


@dataclass(frozen=True)
class SubJobFinancial:
    job_id: int
    subcontractor_id: int
    earnings: float
    labor_cost: float
    material_cost: float
    profit: float
    profit_margin: float
    payment_status: PaymentStatus
    paid_amount: float
    owner_hours: float | None = None
    effective_rate: float | None = None
    payout_id: int | None = None

    def to_dict(self) -> dict:
        return {
            'job_id': self.job_id,
            'subcontractor_id': self.subcontractor_id,
            'payout_id': self.payout_id,
            'earnings': round_money(self.earnings),
            'labor_cost': round_money(self.labor_cost),
            'material_cost': round_money(self.material_cost),
            'profit': round_money(self.profit),
            'profit_margin': round_money(self.profit_margin),
            'payment_status': self.payment_status.value,
            'paid_amount': round_money(self.paid_amount),
            'owner_hours': round_money(self.owner_hours),
            'effective_rate': round_money(self.effective_rate),
        }


def _check_payments(payout: SubcontractorPayout, payments: list[SubcontractorPayment]) -> None:
    if payout.id is None:
        return
    for p in payments:
        if p.payout_id is not None and p.payout_id != payout.id:
            raise ValidationError(
                'payments', f'payment for payout {p.payout_id} passed with payout {payout.id}'
            )


def _material_cost_for(payout: SubcontractorPayout, material: JobMaterialCost | None) -> float:
    if material is None:
        return 0.0
    if material.job_id != payout.job_id or material.subcontractor_id != payout.subcontractor_id:
        raise ValidationError(
            'material_cost',
            f'row for job {material.job_id}/subcontractor {material.subcontractor_id} '
            f'passed with payout for job {payout.job_id}/subcontractor {payout.subcontractor_id}',
        )
    return material.total_cost


def compute_sub_job_financial(payout: SubcontractorPayout,
                              payments: Iterable[SubcontractorPayment] = (),
                              time_entries: Iterable[TimeEntry] = (),
                              material_cost: JobMaterialCost | None = None) -> SubJobFinancial:
    """Earnings, costs, profit and payment status of one payout.

    ``time_entries`` may be the whole job's entries: they are filtered down to
    the payout's subcontractor before labor cost is summed. A missing
    material-cost row or an empty entry list is simply zero cost.
    Profit may be negative and is never clamped.
    """
    payments = list(payments)
    _check_payments(payout, payments)
    entries = filter_time_entries(time_entries, payout.job_id, payout.subcontractor_id)

    labor_cost = compute_labor_cost(entries)
    material = _material_cost_for(payout, material_cost)
    profit = payout.final_payout - labor_cost - material
    owner_hours = compute_owner_hours(entries)
    effective_rate = None
    if owner_hours is not None and owner_hours > 0:
        effective_rate = profit / owner_hours

    return SubJobFinancial(
        job_id           = payout.job_id,
        subcontractor_id = payout.subcontractor_id,
        payout_id        = payout.id,
        earnings         = payout.final_payout,
        labor_cost       = labor_cost,
        material_cost    = material,
        profit           = profit,
        profit_margin    = safe_pct(profit, payout.final_payout),
        payment_status   = classify_payment_status(payments, payout.final_payout),
        paid_amount      = compute_paid_amount(payments),
        owner_hours      = owner_hours,
        effective_rate   = effective_rate,
    )
