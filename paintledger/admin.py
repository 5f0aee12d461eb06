# paintledger/admin.py
"""Admin blueprint: cost settings, bulk recalculation and subcontractor balances."""

from flask import Blueprint, jsonify, request, abort, current_app

from paintledger.cli import recalculate_organization
from paintledger.settings_store import (
    load_cost_config,
    organization_id_from,
    save_cost_settings,
)
from paintledger.subcontractors.utils import organization_balances

bp = Blueprint('admin', __name__)


def _check_secret():
    secret = current_app.config.get('ADMIN_SECRET')
    if secret and request.headers.get('X-Admin-Secret') != secret:
        abort(403)


@bp.before_request
def before():
    _check_secret()


@bp.route('/settings', methods=['GET'])
def get_settings():
    org_id = organization_id_from(args=request.args)
    return jsonify(organization_id=org_id, settings=load_cost_config(org_id).to_dict())


@bp.route('/settings', methods=['PUT', 'POST'])
def put_settings():
    data = request.get_json() or {}
    org_id = organization_id_from(data, request.args)
    save_cost_settings(org_id, data)
    return jsonify(organization_id=org_id, settings=load_cost_config(org_id).to_dict())


@bp.route('/recalculate', methods=['POST'])
def recalculate():
    """Re-derive every estimate and job after the cost settings changed."""
    data = request.get_json(silent=True) or {}
    org_id = organization_id_from(data, request.args)
    return jsonify(organization_id=org_id, **recalculate_organization(org_id))


@bp.route('/subcontractors/financials', methods=['GET'])
def subcontractor_balances():
    """Earnings, payments and pending balance of every subcontractor."""
    org_id = organization_id_from(args=request.args)
    return jsonify(organization_id=org_id, subcontractors=organization_balances(org_id))
