# paintledger/finance/commission.py
"""Sales-rep and project-manager commissions.

Percentage resolution order is a contract:

1. an explicit override given for this job,
2. the assigned team member's default percentage,
3. the fallback constant (the organization's ``default_commission_pct``,
   itself 5 % unless configured).

The first value that is not ``None`` wins; an explicit ``0`` is a valid
override and stops the search.
"""

from __future__ import annotations

from dataclasses import dataclass

from .cost_config import DEFAULT_COMMISSION_PCT
from .money import percentage, round_money, to_number


def resolve_commission_pct(override_pct=None, default_pct=None,
                           fallback_pct: float = DEFAULT_COMMISSION_PCT) -> float:
    if override_pct is not None:
        return percentage(override_pct, 'override_pct')
    if default_pct is not None:
        return percentage(default_pct, 'default_pct')
    return percentage(fallback_pct, 'fallback_pct')


def compute_commission(job_value, override_pct=None, default_pct=None,
                       fallback_pct: float = DEFAULT_COMMISSION_PCT) -> float:
    """Commission amount owed on ``job_value``."""
    value = to_number(job_value, 'job_value')
    pct = resolve_commission_pct(override_pct, default_pct, fallback_pct)
    return value * pct / 100


@dataclass(frozen=True)
class TeamCommissions:
    sales_commission_pct: float
    sales_commission_amount: float
    pm_commission_pct: float
    pm_commission_amount: float

    def to_dict(self) -> dict:
        return {
            'sales_commission_pct': self.sales_commission_pct,
            'sales_commission_amount': round_money(self.sales_commission_amount),
            'pm_commission_pct': self.pm_commission_pct,
            'pm_commission_amount': round_money(self.pm_commission_amount),
        }


def compute_team_commissions(job_value, *, has_sales_rep: bool = False,
                             sales_override_pct=None, sales_default_pct=None,
                             has_project_manager: bool = False,
                             pm_override_pct=None, pm_default_pct=None,
                             fallback_pct: float = DEFAULT_COMMISSION_PCT) -> TeamCommissions:
    """Both job commissions at once.

    A role nobody is assigned to earns nothing: its percentage and amount
    are 0 regardless of any override passed in.
    """
    value = to_number(job_value, 'job_value')
    sales_pct = sales_amount = 0.0
    pm_pct = pm_amount = 0.0
    if has_sales_rep:
        sales_pct = resolve_commission_pct(sales_override_pct, sales_default_pct, fallback_pct)
        sales_amount = value * sales_pct / 100
    if has_project_manager:
        pm_pct = resolve_commission_pct(pm_override_pct, pm_default_pct, fallback_pct)
        pm_amount = value * pm_pct / 100
    return TeamCommissions(
        sales_commission_pct=sales_pct,
        sales_commission_amount=sales_amount,
        pm_commission_pct=pm_pct,
        pm_commission_amount=pm_amount,
    )
