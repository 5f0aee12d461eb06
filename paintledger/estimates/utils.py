# paintledger/estimates/utils.py

"""Estimate record glue: payload -> line items -> recalculated figures."""

import logging

from paintledger import db
from paintledger.finance import LineItem, ValidationError, compute_job_financials, compute_line_total
from paintledger.models import Estimate, EstimateLineItem
from paintledger.settings_store import load_cost_config

log = logging.getLogger(__name__)


def build_line_items(rows) -> list:
    """
    Turn the request's ``line_items`` list into unsaved EstimateLineItem rows.
    Each row is validated through the calculation core first, so a negative
    quantity or price is rejected with the offending index in ``field``.
    """
    if rows is None:
        return []
    if not isinstance(rows, list):
        raise ValidationError('line_items', 'must be a list')
    items = []
    for index, row in enumerate(rows):
        if not isinstance(row, dict):
            raise ValidationError(f'line_items[{index}]', 'must be an object')
        li = LineItem.from_dict(row, index)
        line_total = compute_line_total(li, index)
        items.append(EstimateLineItem(
            description = li.description,
            location    = row.get('location'),
            quantity    = float(li.quantity),
            unit_price  = float(li.unit_price),
            line_total  = line_total,
        ))
    return items


def recalculate_estimate(est: Estimate, config=None) -> Estimate:
    """Recompute and store the estimate's derived figures from its line items."""
    cfg = config or load_cost_config(est.organization_id)
    result = compute_job_financials(est.line_items(), est.discount_amount or 0.0, cfg)
    est.apply_financials(result)
    return est


def create_estimate(organization_id: int, data: dict) -> Estimate:
    items = build_line_items(data.get('line_items') or data.get('lineItems'))
    est = Estimate(
        organization_id = organization_id,
        estimate_number = data.get('estimate_number'),
        client_name     = data.get('client_name') or '',
        address         = data.get('address'),
        status          = data.get('status') or 'draft',
        discount_amount = data.get('discount_amount', data.get('discountAmount')) or 0.0,
    )
    est.items = items
    recalculate_estimate(est)
    db.session.add(est)
    db.session.commit()
    log.info("created estimate %s for org %s total=%.2f flag=%s",
             est.id, organization_id, est.total_price, est.profit_flag)
    return est


def update_estimate(est: Estimate, data: dict) -> Estimate:
    """Apply an edit; figures are recomputed whenever items or discount change."""
    for field in ('client_name', 'address', 'status', 'estimate_number'):
        if field in data:
            setattr(est, field, data[field])

    rows = data.get('line_items', data.get('lineItems'))
    if rows is not None:
        est.items = build_line_items(rows)
    if 'discount_amount' in data or 'discountAmount' in data:
        est.discount_amount = data.get('discount_amount', data.get('discountAmount')) or 0.0

    recalculate_estimate(est)
    db.session.commit()
    log.info("updated estimate %s total=%.2f flag=%s", est.id, est.total_price, est.profit_flag)
    return est
