import json
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from paintledger import create_app, db
from paintledger.models import BusinessSettings, Subcontractor, SubcontractorPayout, Job


def setup_app():
    os.environ['DATABASE_URL'] = 'sqlite:///:memory:'
    app = create_app('development')
    app.config.update(ADMIN_SECRET=None, WEBHOOK_SECRET=None)
    with app.app_context():
        db.drop_all()
        db.create_all()
    return app


def test_settings_default_then_saved():
    app = setup_app()
    client = app.test_client()
    settings = client.get('/admin/settings').get_json()['settings']
    assert settings['sub_labor_pct'] == 45
    assert settings['min_gross_profit_per_job'] == 900

    resp = client.put('/admin/settings', json={'sub_labor_pct': 35, 'min_gross_profit_per_job': 0})
    assert resp.status_code == 200
    settings = resp.get_json()['settings']
    assert settings['sub_labor_pct'] == 35
    assert settings['min_gross_profit_per_job'] == 0
    assert settings['sub_materials_pct'] == 15


def test_invalid_setting_is_not_saved():
    app = setup_app()
    client = app.test_client()
    resp = client.put('/admin/settings', json={'target_gross_margin_pct': 140})
    assert resp.status_code == 400
    assert resp.get_json()['field'] == 'target_gross_margin_pct'
    with app.app_context():
        assert BusinessSettings.query.count() == 0


def test_admin_secret():
    app = setup_app()
    app.config['ADMIN_SECRET'] = 's3cr3t'
    client = app.test_client()
    assert client.get('/admin/settings').status_code == 403
    assert client.get('/admin/settings', headers={'X-Admin-Secret': 's3cr3t'}).status_code == 200


def test_recalculate_after_settings_change():
    app = setup_app()
    client = app.test_client()
    est = client.post('/estimates/', json={'line_items': [{'unit_price': 10000}]}).get_json()['estimate']
    job = client.post('/jobs/', json={'job_value': 10000}).get_json()['job']
    assert est['gross_profit'] == 4000

    client.put('/admin/settings', json={'sub_materials_pct': 10, 'sub_labor_pct': 30})
    resp = client.post('/admin/recalculate', json={})
    assert resp.get_json() == {'organization_id': 1, 'estimates': 1, 'jobs': 1}

    est = client.get(f"/estimates/{est['id']}").get_json()['estimate']
    job = client.get(f"/jobs/{job['id']}").get_json()['job']
    assert est['gross_profit'] == 6000
    assert job['gross_profit'] == 6000
    assert job['gross_margin_pct'] == 60.0


def test_cli_recalc_and_earnings():
    app = setup_app()
    with app.app_context():
        job = Job(organization_id=1, job_number='JOB-1001', total_price=1000.0)
        sub = Subcontractor(organization_id=1, name='Crew')
        db.session.add_all([job, sub])
        db.session.flush()
        db.session.add(SubcontractorPayout(organization_id=1, job_id=job.id,
                                           subcontractor_id=sub.id, final_payout=600))
        db.session.commit()
        sub_id = sub.id

    runner = app.test_cli_runner()
    result = runner.invoke(args=['finance', 'recalc', '--org', '1'])
    assert result.exit_code == 0
    assert 'recalculated 0 estimates and 1 jobs' in result.output

    result = runner.invoke(args=['finance', 'earnings', str(sub_id)])
    assert result.exit_code == 0
    out = json.loads(result.output)
    assert out['summary']['total_pending'] == 600
    assert out['jobs'][0]['profit'] == 600

    result = runner.invoke(args=['finance', 'earnings', '999'])
    assert result.exit_code != 0
