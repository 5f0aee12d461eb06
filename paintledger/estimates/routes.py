# paintledger/estimates/routes.py

from flask import Blueprint, request, jsonify
from paintledger import db
from paintledger.models import Estimate
from paintledger.settings_store import organization_id_from
from paintledger.estimates.utils import create_estimate, update_estimate

bp = Blueprint('estimates', __name__)


@bp.route('/', methods=['GET'])
def list_estimates():
    org_id = organization_id_from(args=request.args)
    ests = (Estimate.query
            .filter_by(organization_id=org_id)
            .order_by(Estimate.id.desc())
            .all())
    return jsonify(estimates=[e.to_dict() for e in ests])


@bp.route('/', methods=['POST'])
def create_estimate_endpoint():
    """
    Create an estimate from { line_items: [...], discount_amount, client_name, ... }.
    Returns the stored estimate including every derived figure.
    """
    data = request.get_json() or {}
    est = create_estimate(organization_id_from(data, request.args), data)
    return jsonify(estimate=est.to_dict()), 201


@bp.route('/<int:estimate_id>', methods=['GET'])
def view_estimate(estimate_id):
    est = db.get_or_404(Estimate, estimate_id)
    return jsonify(estimate=est.to_dict())


@bp.route('/<int:estimate_id>', methods=['POST', 'PUT'])
def edit_estimate(estimate_id):
    est = db.get_or_404(Estimate, estimate_id)
    data = request.get_json() or {}
    update_estimate(est, data)
    return jsonify(estimate=est.to_dict())


@bp.route('/<int:estimate_id>/delete', methods=['POST'])
def delete_estimate(estimate_id):
    est = db.get_or_404(Estimate, estimate_id)
    db.session.delete(est)
    db.session.commit()
    return jsonify(success=True)
