"""``flask finance`` maintenance commands."""

import json
import logging

import click
from flask.cli import with_appcontext

from paintledger import db
from paintledger.estimates.utils import recalculate_estimate
from paintledger.jobs.utils import recalculate_job, stored_commission_overrides
from paintledger.models import Estimate, Job, Subcontractor
from paintledger.settings_store import load_cost_config
from paintledger.subcontractors.utils import subcontractor_financials

log = logging.getLogger(__name__)


def recalculate_organization(organization_id: int) -> dict:
    """
    Re-derive the stored figures of every estimate and job of an organization
    from its current cost settings. Agreed commission rates are kept.
    """
    cfg = load_cost_config(organization_id)
    estimates = Estimate.query.filter_by(organization_id=organization_id).all()
    for est in estimates:
        recalculate_estimate(est, cfg)
    jobs = Job.query.filter_by(organization_id=organization_id).all()
    for job in jobs:
        recalculate_job(job, cfg, overrides=stored_commission_overrides(job))
    db.session.commit()
    log.info("recalculated org %s: %d estimates, %d jobs",
             organization_id, len(estimates), len(jobs))
    return {'estimates': len(estimates), 'jobs': len(jobs)}


@click.group("finance")
def finance_cli() -> None:
    """Financial recalculation and reporting commands."""


@finance_cli.command("recalc")
@click.option("--org", "organization_id", type=int, required=True, help="Organization id")
@with_appcontext
def recalc_command(organization_id: int) -> None:
    counts = recalculate_organization(organization_id)
    click.echo(f"recalculated {counts['estimates']} estimates and {counts['jobs']} jobs")


@finance_cli.command("earnings")
@click.argument("subcontractor_id", type=int)
@with_appcontext
def earnings_command(subcontractor_id: int) -> None:
    sub = db.session.get(Subcontractor, subcontractor_id)
    if sub is None:
        raise click.ClickException(f"unknown subcontractor {subcontractor_id}")
    summary, jobs = subcontractor_financials(sub.id, sub.organization_id)
    click.echo(json.dumps({'summary': summary.to_dict(), 'jobs': jobs}, indent=2))
