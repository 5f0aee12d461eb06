import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from paintledger.finance import (
    PaymentStatus,
    SubcontractorPayment,
    SubcontractorPayout,
    SubJobFinancial,
    ValidationError,
    compute_balance,
    compute_earnings_summary,
    compute_sub_job_financial,
    to_id,
)


def view(job_id, payout, payments=(), entries=()):
    return compute_sub_job_financial(
        SubcontractorPayout(job_id=job_id, subcontractor_id=1, final_payout=payout),
        list(payments), list(entries))


def test_paid_partial_pending():
    jobs = [
        view(1, 500, [SubcontractorPayment(amount=500, status='paid')]),
        view(2, 300, [SubcontractorPayment(amount=100, status='paid')]),
        view(3, 200),
    ]
    assert [j.payment_status for j in jobs] == [
        PaymentStatus.PAID, PaymentStatus.PARTIAL, PaymentStatus.PENDING,
    ]
    s = compute_earnings_summary(jobs)
    assert s.total_earnings == 500
    assert s.total_pending == 500
    assert s.total_paid == 600
    assert s.job_count == 3
    assert s.avg_profit_per_job == 1000 / 3
    assert s.to_dict()['avg_profit_per_job'] == 333.33


def test_empty_collection():
    s = compute_earnings_summary([])
    assert s.job_count == 0
    assert s.avg_profit_per_job == 0
    assert s.total_earnings == s.total_pending == s.total_paid == 0
    assert s.owner_hours_total is None
    assert s.effective_rate_overall is None


def test_average_includes_losses():
    def fin(profit):
        return SubJobFinancial(job_id=1, subcontractor_id=1, earnings=100, labor_cost=0,
                               material_cost=0, profit=profit, profit_margin=0,
                               payment_status=PaymentStatus.PENDING, paid_amount=0)

    s = compute_earnings_summary([fin(300), fin(-100)])
    assert s.avg_profit_per_job == 100


def test_owner_rate_uses_only_jobs_with_owner_hours():
    def fin(profit, owner_hours):
        return SubJobFinancial(job_id=1, subcontractor_id=1, earnings=1000, labor_cost=0,
                               material_cost=0, profit=profit, profit_margin=0,
                               payment_status=PaymentStatus.PAID, paid_amount=1000,
                               owner_hours=owner_hours)

    s = compute_earnings_summary([fin(400, 10), fin(200, 10), fin(999, None)])
    assert s.owner_hours_total == 20
    assert s.effective_rate_overall == 30


def test_summary_is_deterministic():
    jobs = [view(1, 500), view(2, 250, [SubcontractorPayment(amount=250, status='paid')])]
    assert compute_earnings_summary(jobs) == compute_earnings_summary(jobs)


def test_balance_counts_every_payout_as_owed():
    jobs = [
        view(1, 500, [SubcontractorPayment(amount=500, status='paid')]),
        view(2, 300, [SubcontractorPayment(amount=100, status='paid'),
                      SubcontractorPayment(amount=200, status='pending')]),
        view(3, 200),
    ]
    b = compute_balance(compute_earnings_summary(jobs))
    assert b.total_earnings == 1000
    assert b.total_paid == 600
    assert b.pending_amount == 400
    assert b.jobs_completed == 3


def test_balance_of_nothing():
    assert compute_balance(compute_earnings_summary([])).to_dict() == {
        'total_earnings': 0.0, 'total_paid': 0.0, 'pending_amount': 0.0, 'jobs_completed': 0,
    }


def test_ids():
    assert to_id(7, 'job_id') == 7
    assert to_id(' 12 ', 'job_id') == 12
    for bad in ('abc', '1.5', '-3', 0, True, '', '²'):
        with pytest.raises(ValidationError) as exc:
            to_id(bad, 'job_id')
        assert exc.value.field == 'job_id'
