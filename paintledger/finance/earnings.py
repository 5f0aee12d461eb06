# paintledger/finance/earnings.py
"""Subcontractor-level totals folded from per-job views."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .money import round_money
from .payouts import PaymentStatus, SubJobFinancial


@dataclass(frozen=True)
class SubEarningsSummary:
    total_earnings: float
    total_pending: float
    total_paid: float
    job_count: int
    avg_profit_per_job: float
    owner_hours_total: float | None = None
    effective_rate_overall: float | None = None

    def to_dict(self) -> dict:
        return {
            'total_earnings': round_money(self.total_earnings),
            'total_pending': round_money(self.total_pending),
            'total_paid': round_money(self.total_paid),
            'job_count': self.job_count,
            'avg_profit_per_job': round_money(self.avg_profit_per_job),
            'owner_hours_total': round_money(self.owner_hours_total),
            'effective_rate_overall': round_money(self.effective_rate_overall),
        }


def compute_earnings_summary(jobs: Iterable[SubJobFinancial]) -> SubEarningsSummary:
    """Fold one subcontractor's per-job views into summary totals.

    ``total_earnings`` counts a payout's full value only once it is fully
    paid; everything else sits in ``total_pending``. ``total_paid`` is the
    money actually disbursed, partial payments included.
    """
    jobs = list(jobs)
    total_earnings = total_pending = total_paid = total_profit = 0.0
    owner_hours_total = owner_profit = 0.0
    has_owner_hours = False

    for job in jobs:
        if job.payment_status == PaymentStatus.PAID:
            total_earnings += job.earnings
        else:
            total_pending += job.earnings
        total_paid += job.paid_amount
        total_profit += job.profit
        if job.owner_hours is not None:
            has_owner_hours = True
            owner_hours_total += job.owner_hours
            owner_profit += job.profit

    effective_rate_overall = None
    if has_owner_hours and owner_hours_total > 0:
        effective_rate_overall = owner_profit / owner_hours_total

    return SubEarningsSummary(
        total_earnings=total_earnings,
        total_pending=total_pending,
        total_paid=total_paid,
        job_count=len(jobs),
        avg_profit_per_job=total_profit / len(jobs) if jobs else 0.0,
        owner_hours_total=owner_hours_total if has_owner_hours else None,
        effective_rate_overall=effective_rate_overall,
    )


@dataclass(frozen=True)
class SubcontractorBalance:
    total_earnings: float
    total_paid: float
    pending_amount: float
    jobs_completed: int

    def to_dict(self) -> dict:
        return {
            'total_earnings': round_money(self.total_earnings),
            'total_paid': round_money(self.total_paid),
            'pending_amount': round_money(self.pending_amount),
            'jobs_completed': self.jobs_completed,
        }


def compute_balance(summary: SubEarningsSummary) -> SubcontractorBalance:
    """What the organization owes a subcontractor, for the admin overview.

    Here ``total_earnings`` is every payout's full value whatever its status,
    and ``pending_amount`` is what of it has not been paid yet. An overpaid
    subcontractor shows a negative pending amount.
    """
    owed = summary.total_earnings + summary.total_pending
    return SubcontractorBalance(
        total_earnings=owed,
        total_paid=summary.total_paid,
        pending_amount=owed - summary.total_paid,
        jobs_completed=summary.job_count,
    )
