# paintledger/finance/cost_config.py
"""Per-organization cost configuration and its defaults.

``sub_materials_pct`` and ``sub_labor_pct`` are configured *proportions* of
the job's total price, not measured costs: together they define what the
subcontractor side of a job is assumed to cost.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields, replace

from .money import non_negative, percentage

# Fallback constant for commissions when neither an override nor a team
# member default is available.
DEFAULT_COMMISSION_PCT = 5.0


@dataclass(frozen=True)
class CostConfig:
    sub_materials_pct: float = 15.0
    sub_labor_pct: float = 45.0
    sub_payout_pct: float = 60.0
    min_gross_profit_per_job: float = 900.0
    target_gross_margin_pct: float = 40.0
    default_deposit_pct: float = 30.0
    default_commission_pct: float = DEFAULT_COMMISSION_PCT

    def __post_init__(self):
        # frozen: validated values are written back through object.__setattr__
        for f in fields(self):
            raw = getattr(self, f.name)
            if f.name == 'min_gross_profit_per_job':
                value = non_negative(raw, f.name)
            else:
                value = percentage(raw, f.name)
            object.__setattr__(self, f.name, value)

    @property
    def sub_total_pct(self) -> float:
        return self.sub_materials_pct + self.sub_labor_pct

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


DEFAULT_COST_CONFIG = CostConfig()

# camelCase keys used by the settings API / legacy payloads
_ALIASES = {
    'subMaterialsPct': 'sub_materials_pct',
    'subLaborPct': 'sub_labor_pct',
    'subPayoutPct': 'sub_payout_pct',
    'minGrossProfitPerJob': 'min_gross_profit_per_job',
    'targetGrossMarginPct': 'target_gross_margin_pct',
    'defaultDepositPct': 'default_deposit_pct',
    'defaultCommissionPct': 'default_commission_pct',
}
_FIELD_NAMES = frozenset(f.name for f in fields(CostConfig))


def resolve_cost_config(settings=None, defaults: CostConfig = DEFAULT_COST_CONFIG) -> CostConfig:
    """Build a ``CostConfig`` from whatever the settings store returned.

    ``settings`` may be ``None`` (no row for the organization), a
    ``CostConfig``, a mapping with snake_case or camelCase keys, or any object
    exposing the snake_case attributes (e.g. a ``BusinessSettings`` row).
    Fields that are missing or ``None`` take the default; an explicit ``0`` is
    a real setting and is kept.
    """
    if settings is None:
        return defaults
    if isinstance(settings, CostConfig):
        return settings

    overrides = {}
    if isinstance(settings, Mapping):
        for key, value in settings.items():
            name = _ALIASES.get(key, key)
            if name in _FIELD_NAMES and value is not None:
                overrides[name] = value
    else:
        for name in _FIELD_NAMES:
            value = getattr(settings, name, None)
            if value is not None:
                overrides[name] = value

    if not overrides:
        return defaults
    return replace(defaults, **overrides)
