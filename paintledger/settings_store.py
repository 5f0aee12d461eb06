"""Per-organization cost configuration backed by ``BusinessSettings``."""

from __future__ import annotations

import logging

from flask import current_app

from paintledger import db
from paintledger.finance import CostConfig, resolve_cost_config, to_id
from paintledger.models import BusinessSettings

log = logging.getLogger(__name__)

SETTINGS_FIELDS = (
    'sub_materials_pct',
    'sub_labor_pct',
    'sub_payout_pct',
    'min_gross_profit_per_job',
    'target_gross_margin_pct',
    'default_deposit_pct',
    'default_commission_pct',
)


def organization_id_from(data=None, args=None) -> int:
    """Organization named by the request body or query string, else the default."""
    for source in (data or {}, args or {}):
        value = source.get('organization_id')
        if value not in (None, ''):
            return to_id(value, 'organization_id')
    return current_app.config['DEFAULT_ORGANIZATION_ID']


def load_cost_config(organization_id: int) -> CostConfig:
    """Cost configuration snapshot for an organization.

    An organization without a settings row gets the documented defaults.
    """
    row = BusinessSettings.query.filter_by(organization_id=organization_id).first()
    if row is None:
        log.debug("no business settings for org %s, using defaults", organization_id)
    return resolve_cost_config(row)


def save_cost_settings(organization_id: int, data: dict) -> BusinessSettings:
    """Create or update an organization's settings row.

    The merged result is validated before anything is written, so a bad
    percentage never reaches the table.
    """
    row = BusinessSettings.query.filter_by(organization_id=organization_id).first()
    if row is None:
        row = BusinessSettings(organization_id=organization_id)
        db.session.add(row)
    merged = {name: getattr(row, name) for name in SETTINGS_FIELDS}
    merged.update({k: v for k, v in data.items() if k in SETTINGS_FIELDS})
    resolve_cost_config(merged)
    for name in SETTINGS_FIELDS:
        setattr(row, name, merged[name])
    db.session.commit()
    log.info("saved business settings for org %s", organization_id)
    return row
