# paintledger/subcontractors/routes.py

from flask import Blueprint, request, jsonify, abort
from paintledger import db
from paintledger.models import Subcontractor
from paintledger.subcontractors.utils import (
    create_payout,
    job_financial_detail,
    record_payment,
    subcontractor_financials,
    update_payment_status,
    upsert_material_cost,
)

bp = Blueprint('subcontractors', __name__)


@bp.route('/<int:sub_id>/financials')
def financials(sub_id):
    """
    Earnings summary and per-job list for one subcontractor.
    Returns { summary: {...}, jobs: [ {...}, … ] }.
    """
    sub = db.get_or_404(Subcontractor, sub_id)
    summary, jobs = subcontractor_financials(sub.id, sub.organization_id)
    return jsonify(summary=summary.to_dict(), jobs=jobs)


@bp.route('/<int:sub_id>/financials/<int:job_id>')
def job_financials(sub_id, job_id):
    detail = job_financial_detail(sub_id, job_id)
    if detail is None:
        abort(404)
    return jsonify(detail)


@bp.route('/<int:sub_id>/payouts', methods=['POST'])
def add_payout(sub_id):
    data = request.get_json() or {}
    payout = create_payout(sub_id, data)
    return jsonify(payout_id=payout.id, final_payout=payout.final_payout), 201


@bp.route('/<int:sub_id>/material-costs/<int:job_id>', methods=['PUT', 'POST'])
def set_material_cost(sub_id, job_id):
    db.get_or_404(Subcontractor, sub_id)
    data = request.get_json() or {}
    row = upsert_material_cost(sub_id, job_id, data)
    return jsonify(job_id=row.job_id, subcontractor_id=row.subcontractor_id,
                   total_cost=row.total_cost, notes=row.notes)


@bp.route('/payouts/<int:payout_id>/payments', methods=['POST'])
def add_payment(payout_id):
    data = request.get_json() or {}
    payment, status = record_payment(payout_id, data)
    if payment is None:
        abort(404)
    return jsonify(payment=payment.to_dict(), payment_status=status.value), 201


@bp.route('/<int:sub_id>/payments/<int:payment_id>', methods=['PATCH'])
def mark_payment(sub_id, payment_id):
    """
    Mark a payment paid or pending.
    Body: { status: "paid" | "pending", paid_date, notes }.
    """
    data = request.get_json() or {}
    payment, status = update_payment_status(sub_id, payment_id, data)
    if payment is None:
        abort(404)
    return jsonify(success=True, payment=payment.to_dict(), payment_status=status.value)
