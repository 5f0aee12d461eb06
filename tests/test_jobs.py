import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from paintledger import create_app, db
from paintledger.models import Job, TeamMember
from paintledger.jobs.utils import next_job_number, parse_job_value


def setup_app():
    os.environ['DATABASE_URL'] = 'sqlite:///:memory:'
    app = create_app('development')
    app.config.update(ADMIN_SECRET=None, WEBHOOK_SECRET=None)
    with app.app_context():
        db.drop_all()
        db.create_all()
    return app


def add_team(app):
    with app.app_context():
        rep = TeamMember(organization_id=1, name='Rep', role='sales', default_commission_pct=7)
        pm = TeamMember(organization_id=1, name='PM', role='pm')
        db.session.add_all([rep, pm])
        db.session.commit()
        return rep.id, pm.id


def test_create_job_with_commissions():
    app = setup_app()
    rep_id, pm_id = add_team(app)
    client = app.test_client()
    resp = client.post('/jobs/', json={
        'client_name': 'Jones', 'job_value': 10000,
        'sales_rep_id': rep_id, 'project_manager_id': pm_id,
    })
    assert resp.status_code == 201
    job = resp.get_json()['job']
    assert job['job_value'] == 10000
    assert job['gross_profit'] == 4000
    assert job['deposit_required'] == 3000
    assert job['balance_due'] == 7000
    assert job['subcontractor_price'] == 6000
    assert job['profit_flag'] == 'OK'
    # rep default 7 %, PM has no default -> 5 % fallback
    assert job['sales_commission_pct'] == 7
    assert job['sales_commission_amount'] == 700
    assert job['pm_commission_pct'] == 5
    assert job['pm_commission_amount'] == 500
    assert job['job_number'] == 'JOB-1001'


def test_override_beats_member_default_and_is_stored():
    app = setup_app()
    rep_id, _ = add_team(app)
    client = app.test_client()
    job = client.post('/jobs/', json={
        'job_value': 10000, 'sales_rep_id': rep_id, 'sales_commission_pct': 10,
    }).get_json()['job']
    assert job['sales_commission_pct'] == 10
    assert job['sales_commission_amount'] == 1000
    assert job['pm_commission_amount'] == 0

    # a later value change keeps the agreed rate
    job = client.put(f"/jobs/{job['id']}", json={'job_value': 20000}).get_json()['job']
    assert job['sales_commission_pct'] == 10
    assert job['sales_commission_amount'] == 2000
    assert job['gross_profit'] == 8000


def test_no_team_no_commission():
    app = setup_app()
    job = app.test_client().post('/jobs/', json={'job_value': 5000}).get_json()['job']
    assert job['sales_commission_amount'] == 0
    assert job['pm_commission_amount'] == 0


def test_job_from_estimate_uses_its_total():
    app = setup_app()
    client = app.test_client()
    est = client.post('/estimates/', json={
        'client_name': 'Lee', 'line_items': [{'unit_price': 2500, 'quantity': 4}],
        'discount_amount': 500,
    }).get_json()['estimate']
    job = client.post('/jobs/', json={'estimate_id': est['id']}).get_json()['job']
    assert job['job_value'] == 9500
    assert job['client_name'] == 'Lee'
    assert job['gross_profit'] == est['gross_profit']
    assert job['profit_flag'] == est['profit_flag']


def test_over_discounted_estimate_cannot_become_a_job():
    app = setup_app()
    rep_id, _ = add_team(app)
    client = app.test_client()
    est = client.post('/estimates/', json={
        'line_items': [{'unit_price': 500}], 'discount_amount': 600,
    }).get_json()['estimate']
    assert est['total_price'] == -100
    resp = client.post('/jobs/', json={'estimate_id': est['id'], 'sales_rep_id': rep_id})
    assert resp.status_code == 400
    assert resp.get_json()['field'] == 'job_value'
    with app.app_context():
        assert Job.query.count() == 0


def test_unknown_team_member_is_rejected():
    app = setup_app()
    resp = app.test_client().post('/jobs/', json={'job_value': 1000, 'sales_rep_id': 42})
    assert resp.status_code == 400
    assert resp.get_json()['field'] == 'sales_rep_id'


def test_negative_job_value_is_rejected():
    app = setup_app()
    resp = app.test_client().post('/jobs/', json={'job_value': -1})
    assert resp.status_code == 400
    assert resp.get_json()['field'] == 'job_value'


def test_job_numbers_increment_per_organization():
    app = setup_app()
    with app.app_context():
        db.session.add_all([
            Job(organization_id=1, job_number='JOB-1041'),
            Job(organization_id=1, job_number='legacy'),
            Job(organization_id=2, job_number='JOB-5000'),
        ])
        db.session.commit()
        assert next_job_number(1) == 'JOB-1042'
        assert next_job_number(3) == 'JOB-1001'


def test_parse_job_value():
    assert parse_job_value('$12,500.00') == 12500
    assert parse_job_value(800) == 800
    assert parse_job_value('call me') == 0
    assert parse_job_value(None) == 0


def test_webhook_creates_job_through_the_same_calculator():
    app = setup_app()
    client = app.test_client()
    payload = [{'body': {
        'organization_id': 1,
        'full_name': 'Pat Doe',
        'address1': '1 Main St',
        'city': 'Denver',
        'phone': '555-0100',
        '[Estimate] Total Price': '$10,000.00',
    }}]
    resp = client.post('/webhooks/jobs', json=payload)
    assert resp.status_code == 201
    body = resp.get_json()
    assert body['job_number'] == 'JOB-1001'

    api_job = client.post('/jobs/', json={'job_value': 10000}).get_json()['job']
    hook_job = client.get(f"/jobs/{body['job_id']}").get_json()['job']
    assert hook_job['status'] == 'got_the_job'
    assert 'Tel: 555-0100' in hook_job['notes']
    for key in ('gross_profit', 'gross_margin_pct', 'sub_total_cost', 'deposit_required',
                'subcontractor_price', 'profit_flag'):
        assert hook_job[key] == api_job[key]
    assert api_job['job_number'] == 'JOB-1002'


def test_webhook_requires_organization():
    app = setup_app()
    resp = app.test_client().post('/webhooks/jobs', json={'full_name': 'X'})
    assert resp.status_code == 400


def test_webhook_rejects_malformed_payloads():
    app = setup_app()
    client = app.test_client()
    resp = client.post('/webhooks/jobs', json={'organization_id': 'acme', 'job_value': 100})
    assert resp.status_code == 400
    assert resp.get_json()['field'] == 'organization_id'
    resp = client.post('/webhooks/jobs', json=['not an object'])
    assert resp.status_code == 400
    assert resp.get_json()['field'] == 'body'
    with app.app_context():
        assert Job.query.count() == 0


def test_non_numeric_ids_are_validation_errors():
    app = setup_app()
    client = app.test_client()
    resp = client.post('/jobs/', json={'job_value': 100, 'estimate_id': 'abc'})
    assert resp.status_code == 400
    assert resp.get_json()['field'] == 'estimate_id'
    resp = client.post('/jobs/', json={'job_value': 100, 'sales_rep_id': 'x1'})
    assert resp.get_json()['field'] == 'sales_rep_id'
    resp = client.get('/jobs/?organization_id=acme')
    assert resp.status_code == 400
    assert resp.get_json()['field'] == 'organization_id'


def test_webhook_secret(monkeypatch):
    app = setup_app()
    app.config['WEBHOOK_SECRET'] = 's3cr3t'
    client = app.test_client()
    payload = {'organization_id': 1, 'job_value': 100}
    assert client.post('/webhooks/jobs', json=payload).status_code == 403
    resp = client.post('/webhooks/jobs', json=payload, headers={'X-Webhook-Secret': 's3cr3t'})
    assert resp.status_code == 201
