# paintledger/webhooks.py
"""Webhook endpoint that creates a job when an opportunity is won."""

import logging
from flask import Blueprint, abort, current_app, jsonify, request

from paintledger.finance import ValidationError, to_id
from paintledger.jobs.utils import create_job, parse_job_value

bp = Blueprint('webhooks', __name__)

log = logging.getLogger(__name__)

# payload keys that may carry the job value, in order of preference
JOB_VALUE_KEYS = (
    'job_value',
    '[Estimate] Total Price',
    '[Estimate] Sub-total',
    'Services Sold - Enter the value below:',
)


def _check_secret():
    secret = current_app.config.get('WEBHOOK_SECRET')
    if secret and request.headers.get('X-Webhook-Secret') != secret:
        abort(403)


@bp.before_request
def before():
    _check_secret()


def _unwrap(body) -> dict:
    # some senders wrap the payload as [ {body: {...}} ]
    if isinstance(body, list):
        body = body[0] if body else {}
        inner = body.get('body') if isinstance(body, dict) else None
        if inner and isinstance(inner, dict):
            body = inner
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise ValidationError('body', 'must be a JSON object')
    return body


def _job_value(payload) -> float:
    for key in JOB_VALUE_KEYS:
        if payload.get(key):
            return parse_job_value(payload[key])
    return 0.0


def _notes(payload) -> str:
    parts = [
        f"Tel: {payload['phone']}" if payload.get('phone') else '',
        f"Email: {payload['email']}" if payload.get('email') else '',
        f"Source: {payload['contact_source']}" if payload.get('contact_source') else '',
    ]
    return '\n'.join(p for p in parts if p)


@bp.route('/jobs', methods=['POST'])
def job_won():
    payload = _unwrap(request.get_json(silent=True))
    org_id = payload.get('organization_id')
    if org_id in (None, ''):
        log.error("job webhook without organization_id")
        return jsonify(error='Missing organization_id in payload'), 400

    job = create_job(to_id(org_id, 'organization_id'), {
        'job_value': _job_value(payload),
        'client_name': payload.get('full_name') or payload.get('first_name') or 'Webhook client',
        'address': payload.get('address1') or payload.get('full_address') or '',
        'city': payload.get('city') or '',
        'state': payload.get('state') or payload.get('country') or '',
        'status': 'got_the_job',
        'notes': _notes(payload),
    }, source='webhook')
    return jsonify(
        success=True,
        job_id=job.id,
        job_number=job.job_number,
        message=f'Job {job.job_number} created successfully',
    ), 201
