"""Financial reconciliation core.

Pure functions over already-fetched snapshots: no Flask, no database, no I/O.
"""

from .commission import (
    TeamCommissions,
    compute_commission,
    compute_team_commissions,
    resolve_commission_pct,
)
from .cost_config import DEFAULT_COMMISSION_PCT, DEFAULT_COST_CONFIG, CostConfig, resolve_cost_config
from .earnings import SubcontractorBalance, SubEarningsSummary, compute_balance, compute_earnings_summary
from .errors import ValidationError
from .job_financials import (
    JobFinancialResult,
    LineItem,
    ProfitFlag,
    compute_job_financials,
    compute_line_total,
    compute_price_breakdown,
    compute_subtotal,
)
from .money import round_money, to_id
from .payouts import (
    JobMaterialCost,
    PaymentStatus,
    SubcontractorPayment,
    SubcontractorPayout,
    SubJobFinancial,
    TimeEntry,
    classify_payment_status,
    compute_labor_cost,
    compute_paid_amount,
    compute_sub_job_financial,
    filter_time_entries,
)

__all__ = [
    'CostConfig', 'DEFAULT_COST_CONFIG', 'DEFAULT_COMMISSION_PCT', 'resolve_cost_config',
    'ValidationError', 'round_money', 'to_id',
    'LineItem', 'ProfitFlag', 'JobFinancialResult', 'compute_line_total', 'compute_subtotal',
    'compute_price_breakdown', 'compute_job_financials',
    'TeamCommissions', 'resolve_commission_pct', 'compute_commission', 'compute_team_commissions',
    'SubcontractorPayout', 'SubcontractorPayment', 'TimeEntry', 'JobMaterialCost',
    'PaymentStatus', 'SubJobFinancial', 'filter_time_entries', 'compute_labor_cost',
    'compute_paid_amount', 'classify_payment_status', 'compute_sub_job_financial',
    'SubEarningsSummary', 'compute_earnings_summary', 'SubcontractorBalance', 'compute_balance',
]
