# paintledger/subcontractors/utils.py

"""
Snapshot loading for the subcontractor financial views.

Every view is rebuilt from rows fetched in the current transaction; nothing
computed here is stored, because payments and time entries keep changing.
"""

import logging
from datetime import date

from paintledger import db
from paintledger.finance import (
    ValidationError,
    classify_payment_status,
    compute_balance,
    compute_earnings_summary,
    compute_sub_job_financial,
    filter_time_entries,
)
from paintledger.finance.money import non_negative, to_id
from paintledger.models import (
    Job,
    JobMaterialCost,
    Subcontractor,
    SubcontractorEmployee,
    SubcontractorPayment,
    SubcontractorPayout,
    TimeEntry,
)

log = logging.getLogger(__name__)

PAYMENT_STATUSES = ('paid', 'pending')


def time_entries_for(job_id: int, subcontractor_id: int) -> list:
    """
    Time entries on ``job_id`` logged by employees of ``subcontractor_id``.
    The join on the employee's subcontractor is done here in SQL and again
    by the calculation core, so another crew's hours can never leak in.
    """
    rows = (TimeEntry.query
            .join(SubcontractorEmployee, TimeEntry.employee_id == SubcontractorEmployee.id)
            .filter(TimeEntry.job_id == job_id,
                    SubcontractorEmployee.subcontractor_id == subcontractor_id)
            .order_by(TimeEntry.work_date.desc(), TimeEntry.id.desc())
            .all())
    return filter_time_entries([r.to_snapshot() for r in rows], job_id, subcontractor_id)


def material_cost_for(job_id: int, subcontractor_id: int):
    row = JobMaterialCost.query.filter_by(job_id=job_id, subcontractor_id=subcontractor_id).first()
    return row.to_snapshot() if row else None


def payments_for(payout_id: int) -> list:
    rows = SubcontractorPayment.query.filter_by(payout_id=payout_id).all()
    return [r.to_snapshot() for r in rows]


def sub_job_financial_for(payout: SubcontractorPayout, entries=None):
    if entries is None:
        entries = time_entries_for(payout.job_id, payout.subcontractor_id)
    return compute_sub_job_financial(
        payout.to_snapshot(),
        payments_for(payout.id),
        entries,
        material_cost_for(payout.job_id, payout.subcontractor_id),
    )


def _job_info(payout: SubcontractorPayout) -> dict:
    job = payout.job
    return {
        'job_number': job.job_number if job else None,
        'client_name': job.client_name if job else None,
        'address': job.address if job else None,
    }


def subcontractor_financials(subcontractor_id: int, organization_id: int | None = None):
    """Summary plus one financial view per payout of the subcontractor."""
    q = SubcontractorPayout.query.filter_by(subcontractor_id=subcontractor_id)
    if organization_id is not None:
        q = q.filter_by(organization_id=organization_id)
    payouts = q.order_by(SubcontractorPayout.id).all()

    views = []
    rows = []
    for payout in payouts:
        view = sub_job_financial_for(payout)
        views.append(view)
        row = view.to_dict()
        row.update(_job_info(payout))
        rows.append(row)
    summary = compute_earnings_summary(views)
    return summary, rows


def job_financial_detail(subcontractor_id: int, job_id: int):
    """Per-job view with the time entries and material cost behind it, or None."""
    payout = SubcontractorPayout.query.filter_by(
        job_id=job_id, subcontractor_id=subcontractor_id).first()
    if payout is None:
        return None
    entries = time_entries_for(job_id, subcontractor_id)
    view = sub_job_financial_for(payout, entries)
    material = material_cost_for(job_id, subcontractor_id)
    job = view.to_dict()
    job.update(_job_info(payout))
    return {
        'job': job,
        'time_entries': [{
            'id': e.id,
            'employee_id': e.employee_id,
            'work_date': e.work_date.isoformat() if e.work_date else None,
            'hours_worked': e.hours_worked,
            'hourly_rate': e.hourly_rate,
            'is_owner': e.is_owner,
            'labor_cost': round(e.labor_cost, 2),
        } for e in entries],
        'material_cost': (
            {'total_cost': material.total_cost, 'notes': material.notes} if material else None
        ),
    }


def _job_for_subcontractor(subcontractor_id: int, raw_job_id) -> Job:
    """The job, provided it exists in the subcontractor's organization."""
    if raw_job_id in (None, ''):
        raise ValidationError('job_id', 'is required')
    job = db.session.get(Job, to_id(raw_job_id, 'job_id'))
    if job is None:
        raise ValidationError('job_id', f'unknown job {raw_job_id}')
    sub = db.session.get(Subcontractor, subcontractor_id)
    if sub is None or sub.organization_id != job.organization_id:
        raise ValidationError('subcontractor_id', f'unknown subcontractor {subcontractor_id}')
    return job


def upsert_material_cost(subcontractor_id: int, job_id: int, data: dict) -> JobMaterialCost:
    """One row per (job, subcontractor): update it if present, else create it."""
    total_cost = non_negative(data.get('total_cost', data.get('totalCost')), 'total_cost')
    job = _job_for_subcontractor(subcontractor_id, job_id)
    row = JobMaterialCost.query.filter_by(job_id=job.id, subcontractor_id=subcontractor_id).first()
    if row is None:
        row = JobMaterialCost(job_id=job.id, subcontractor_id=subcontractor_id)
        db.session.add(row)
    row.total_cost = total_cost
    if 'notes' in data:
        row.notes = data['notes']
    db.session.commit()
    log.info("material cost job=%s sub=%s total=%.2f", job.id, subcontractor_id, total_cost)
    return row


def _parse_date(raw, field):
    if raw in (None, ''):
        return None
    try:
        return date.fromisoformat(str(raw))
    except ValueError:
        raise ValidationError(field, f'must be an ISO date, got {raw!r}') from None


def _payment_status_arg(data: dict, default=None) -> str:
    status = (data.get('status') or default or '').strip().lower()
    if status not in PAYMENT_STATUSES:
        raise ValidationError('status', f'must be one of {", ".join(PAYMENT_STATUSES)}')
    return status


def _lock_payout(payout_id: int):
    # SELECT ... FOR UPDATE where the database supports it; held until commit
    return (db.session.query(SubcontractorPayout)
            .filter_by(id=payout_id)
            .with_for_update()
            .first())


def _settle(payout: SubcontractorPayout):
    """Payment status of the payout from the payments as they now stand."""
    db.session.flush()
    return classify_payment_status(payments_for(payout.id), payout.final_payout)


def record_payment(payout_id: int, data: dict):
    """
    Append a payment to a payout and return (payment, status).

    The payout row is locked for the rest of the transaction, so two
    concurrent "mark as paid" requests serialize and the second one sees the
    first one's payment when the status is recomputed.
    """
    payout = _lock_payout(payout_id)
    if payout is None:
        return None, None

    status = _payment_status_arg(data, default='paid')
    amount = non_negative(data.get('amount'), 'amount')
    paid_date = _parse_date(data.get('paid_date', data.get('paidDate')), 'paid_date')
    if status == 'paid' and paid_date is None:
        paid_date = date.today()

    payment = SubcontractorPayment(payout_id=payout.id, status=status, amount=amount,
                                   paid_date=paid_date, notes=data.get('notes'))
    db.session.add(payment)
    payment_status = _settle(payout)
    db.session.commit()
    log.info("payment %s on payout %s amount=%.2f -> %s",
             payment.id, payout.id, amount, payment_status.value)
    return payment, payment_status


def update_payment_status(subcontractor_id: int, payment_id: int, data: dict):
    """
    Mark an existing payment paid or pending and return (payment, status).

    ``paid_date`` is required when marking paid and cleared when marking
    pending. Returns (None, None) when the payment does not exist or belongs
    to another subcontractor's payout.
    """
    payment = db.session.get(SubcontractorPayment, payment_id)
    if payment is None:
        return None, None
    payout = _lock_payout(payment.payout_id)
    if payout is None or payout.subcontractor_id != subcontractor_id:
        return None, None

    status = _payment_status_arg(data)
    if status == 'paid':
        paid_date = _parse_date(data.get('paid_date', data.get('paidDate')), 'paid_date')
        if paid_date is None:
            raise ValidationError('paid_date', 'is required when status is paid')
    else:
        paid_date = None

    payment.status = status
    payment.paid_date = paid_date
    if 'notes' in data:
        payment.notes = data['notes']
    payment_status = _settle(payout)
    db.session.commit()
    log.info("payment %s on payout %s marked %s -> %s",
             payment.id, payout.id, status, payment_status.value)
    return payment, payment_status


def create_payout(subcontractor_id: int, data: dict) -> SubcontractorPayout:
    """
    Assign a subcontractor to a job. The payout defaults to the job's
    subcontractor price when no explicit amount is given.
    """
    job = _job_for_subcontractor(subcontractor_id, data.get('job_id'))

    raw = data.get('final_payout', data.get('finalPayout'))
    final_payout = non_negative(raw, 'final_payout', default=job.subcontractor_price or 0.0)
    payout = SubcontractorPayout(
        organization_id  = job.organization_id,
        job_id           = job.id,
        subcontractor_id = subcontractor_id,
        final_payout     = round(final_payout, 2),
    )
    db.session.add(payout)
    db.session.commit()
    log.info("payout %s job=%s sub=%s amount=%.2f",
             payout.id, job.id, subcontractor_id, payout.final_payout)
    return payout


def organization_balances(organization_id: int) -> list:
    """Balance of every subcontractor of an organization, ordered by name."""
    subs = (Subcontractor.query
            .filter_by(organization_id=organization_id)
            .order_by(Subcontractor.name, Subcontractor.id)
            .all())
    rows = []
    for sub in subs:
        summary, _ = subcontractor_financials(sub.id, organization_id)
        row = {'id': sub.id, 'name': sub.name}
        row.update(compute_balance(summary).to_dict())
        rows.append(row)
    return rows
