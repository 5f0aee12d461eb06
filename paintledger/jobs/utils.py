# paintledger/jobs/utils.py

"""Job record glue shared by the jobs API and the webhook endpoint."""

import logging
import re

from paintledger import db
from paintledger.finance import ValidationError, compute_price_breakdown, compute_team_commissions
from paintledger.finance.money import non_negative, to_id
from paintledger.models import Estimate, Job, TeamMember
from paintledger.settings_store import load_cost_config

log = logging.getLogger(__name__)

FIRST_JOB_NUMBER = 1001
_JOB_NUMBER_RE = re.compile(r'JOB-(\d+)')
_NON_NUMERIC_RE = re.compile(r'[^0-9.\-]')


def parse_job_value(raw) -> float:
    """
    Job value from free text such as "$12,500.00".
    Everything but digits, dot and minus is stripped; unparsable text is 0.
    """
    if raw is None:
        return 0.0
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return float(raw)
    cleaned = _NON_NUMERIC_RE.sub('', str(raw))
    try:
        return float(cleaned)
    except ValueError:
        return 0.0


def next_job_number(organization_id: int) -> str:
    highest = FIRST_JOB_NUMBER - 1
    numbers = (db.session.query(Job.job_number)
               .filter(Job.organization_id == organization_id, Job.job_number.isnot(None))
               .all())
    for (number,) in numbers:
        m = _JOB_NUMBER_RE.fullmatch(number or '')
        if m:
            highest = max(highest, int(m.group(1)))
    return f'JOB-{highest + 1}'


def _team_member(member_id, organization_id, field):
    if member_id in (None, ''):
        return None
    member = db.session.get(TeamMember, to_id(member_id, field))
    if member is None or member.organization_id != organization_id:
        raise ValidationError(field, f'unknown team member {member_id}')
    return member


def recalculate_job(job: Job, config=None, overrides=None) -> Job:
    """
    Recompute the job's figures and commissions from its value.

    ``overrides`` carries explicit commission percentages. Pass
    ``stored_commission_overrides(job)`` to keep the rates already agreed on
    the job; without overrides the team member / organization defaults apply.
    """
    cfg = config or load_cost_config(job.organization_id)
    overrides = overrides or {}
    job.apply_financials(compute_price_breakdown(job.total_price or 0.0, cfg))

    sales_rep = job.sales_rep
    pm = job.project_manager
    commissions = compute_team_commissions(
        job.total_price or 0.0,
        has_sales_rep       = sales_rep is not None,
        sales_override_pct  = overrides.get('sales_commission_pct'),
        sales_default_pct   = sales_rep.default_commission_pct if sales_rep else None,
        has_project_manager = pm is not None,
        pm_override_pct     = overrides.get('pm_commission_pct'),
        pm_default_pct      = pm.default_commission_pct if pm else None,
        fallback_pct        = cfg.default_commission_pct,
    )
    job.apply_commissions(commissions)
    return job


def create_job(organization_id: int, data: dict, source: str = 'api') -> Job:
    """Create a job from its value; every creation path goes through here."""
    estimate = None
    if data.get('estimate_id') not in (None, ''):
        estimate = db.session.get(Estimate, to_id(data['estimate_id'], 'estimate_id'))
        if estimate is None or estimate.organization_id != organization_id:
            raise ValidationError('estimate_id', f"unknown estimate {data['estimate_id']}")

    raw_value = data.get('job_value', data.get('jobValue'))
    if raw_value is None and estimate is not None:
        job_value = non_negative(estimate.total_price or 0.0, 'job_value')
    else:
        job_value = non_negative(raw_value, 'job_value', default=0)

    job = Job(
        organization_id = organization_id,
        job_number      = data.get('job_number') or next_job_number(organization_id),
        client_name     = data.get('client_name') or (estimate.client_name if estimate else ''),
        address         = data.get('address') or (estimate.address if estimate else None),
        city            = data.get('city'),
        state           = data.get('state'),
        status          = data.get('status') or 'lead',
        notes           = data.get('notes'),
        estimate_id     = estimate.id if estimate else None,
        total_price     = job_value,
    )
    job.sales_rep = _team_member(data.get('sales_rep_id'), organization_id, 'sales_rep_id')
    job.project_manager = _team_member(data.get('project_manager_id'), organization_id,
                                       'project_manager_id')
    recalculate_job(job, overrides={
        'sales_commission_pct': data.get('sales_commission_pct', data.get('salesCommissionPct')),
        'pm_commission_pct': data.get('pm_commission_pct', data.get('pmCommissionPct')),
    })
    db.session.add(job)
    db.session.commit()
    log.info("created job %s (%s) via %s value=%.2f flag=%s",
             job.job_number, job.id, source, job.total_price, job.profit_flag)
    return job


def stored_commission_overrides(job: Job) -> dict:
    """Commission percentages currently on the job, reused as overrides."""
    return {
        'sales_commission_pct': job.sales_commission_pct if job.sales_rep_id else None,
        'pm_commission_pct': job.pm_commission_pct if job.project_manager_id else None,
    }


def update_job_value(job: Job, data: dict) -> Job:
    if 'job_value' in data or 'jobValue' in data:
        job.total_price = non_negative(data.get('job_value', data.get('jobValue')), 'job_value')
    overrides = stored_commission_overrides(job)
    for key in ('sales_commission_pct', 'pm_commission_pct'):
        if data.get(key) is not None:
            overrides[key] = data[key]
    recalculate_job(job, overrides=overrides)
    db.session.commit()
    log.info("updated job %s value=%.2f flag=%s", job.id, job.total_price, job.profit_flag)
    return job
