import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from paintledger.finance import DEFAULT_COST_CONFIG, CostConfig, ValidationError, resolve_cost_config


def test_documented_defaults():
    cfg = resolve_cost_config(None)
    assert cfg.sub_materials_pct == 15
    assert cfg.sub_labor_pct == 45
    assert cfg.sub_payout_pct == 60
    assert cfg.min_gross_profit_per_job == 900
    assert cfg.target_gross_margin_pct == 40
    assert cfg.default_deposit_pct == 30
    assert cfg.default_commission_pct == 5


def test_partial_mapping_merges_over_defaults():
    cfg = resolve_cost_config({'subLaborPct': 35, 'min_gross_profit_per_job': None})
    assert cfg.sub_labor_pct == 35
    assert cfg.sub_materials_pct == 15
    assert cfg.min_gross_profit_per_job == 900


def test_explicit_zero_is_kept():
    cfg = resolve_cost_config({'sub_materials_pct': 0, 'min_gross_profit_per_job': 0})
    assert cfg.sub_materials_pct == 0
    assert cfg.min_gross_profit_per_job == 0


def test_object_with_attributes():
    class Row:
        sub_materials_pct = 12
        sub_labor_pct = None
        unrelated = 'x'

    cfg = resolve_cost_config(Row())
    assert cfg.sub_materials_pct == 12
    assert cfg.sub_labor_pct == 45


def test_empty_settings_is_default_instance():
    assert resolve_cost_config({}) is DEFAULT_COST_CONFIG


@pytest.mark.parametrize('field,value', [
    ('sub_labor_pct', 120),
    ('sub_materials_pct', -1),
    ('target_gross_margin_pct', 100.5),
    ('default_commission_pct', 'lots'),
])
def test_bad_percentages_are_rejected(field, value):
    with pytest.raises(ValidationError) as exc:
        resolve_cost_config({field: value})
    assert exc.value.field == field


def test_negative_profit_floor_is_rejected():
    with pytest.raises(ValidationError) as exc:
        CostConfig(min_gross_profit_per_job=-10)
    assert exc.value.field == 'min_gross_profit_per_job'


def test_numeric_strings_are_coerced():
    cfg = resolve_cost_config({'sub_labor_pct': '40'})
    assert cfg.sub_labor_pct == 40.0
    assert cfg.sub_total_pct == 55.0
