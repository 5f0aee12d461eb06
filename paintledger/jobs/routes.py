# paintledger/jobs/routes.py

from flask import Blueprint, request, jsonify
from paintledger import db
from paintledger.models import Job
from paintledger.settings_store import organization_id_from
from paintledger.jobs.utils import create_job, update_job_value

bp = Blueprint('jobs', __name__)


@bp.route('/', methods=['GET'])
def list_jobs():
    org_id = organization_id_from(args=request.args)
    jobs = Job.query.filter_by(organization_id=org_id).order_by(Job.id.desc()).all()
    return jsonify(jobs=[j.to_dict() for j in jobs])


@bp.route('/', methods=['POST'])
def create_job_endpoint():
    """
    Create a job from { job_value, sales_rep_id, project_manager_id,
    sales_commission_pct, pm_commission_pct, ... } or from { estimate_id }.
    """
    data = request.get_json() or {}
    job = create_job(organization_id_from(data, request.args), data)
    return jsonify(job=job.to_dict()), 201


@bp.route('/<int:job_id>', methods=['GET'])
def view_job(job_id):
    job = db.get_or_404(Job, job_id)
    return jsonify(job=job.to_dict())


@bp.route('/<int:job_id>', methods=['POST', 'PUT'])
def edit_job(job_id):
    job = db.get_or_404(Job, job_id)
    data = request.get_json() or {}
    for field in ('client_name', 'address', 'city', 'state', 'status', 'notes'):
        if field in data:
            setattr(job, field, data[field])
    update_job_value(job, data)
    return jsonify(job=job.to_dict())
