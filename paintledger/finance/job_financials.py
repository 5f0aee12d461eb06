# paintledger/finance/job_financials.py
"""Price, cost breakdown and profitability of an estimate or job.

This is the single implementation used by every path that creates or edits
an estimate or a job (estimate create/update, job create, webhook job
create). Call sites persist the returned figures; they never re-derive them.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from .cost_config import CostConfig, resolve_cost_config
from .errors import ValidationError
from .money import non_negative, round_money, safe_pct, to_number


class ProfitFlag(str, enum.Enum):
    OK = 'OK'
    RAISE_PRICE = 'RAISE_PRICE'
    FIX_SCOPE = 'FIX_SCOPE'


@dataclass(frozen=True)
class LineItem:
    unit_price: float
    quantity: float = 1.0
    line_total: float | None = None
    description: str = ''

    @classmethod
    def from_dict(cls, data: Mapping, index: int | None = None) -> 'LineItem':
        """Accepts both ``unit_price`` and the camelCase ``unitPrice`` keys."""
        prefix = f'line_items[{index}].' if index is not None else ''

        def pick(*keys):
            for k in keys:
                if data.get(k) is not None:
                    return data[k]
            return None

        unit_price = pick('unit_price', 'unitPrice')
        if unit_price is None:
            raise ValidationError(prefix + 'unit_price', 'is required')
        quantity = pick('quantity', 'qty')
        return cls(
            unit_price  = unit_price,
            quantity    = 1.0 if quantity is None else quantity,
            line_total  = pick('line_total', 'lineTotal'),
            description = data.get('description') or '',
        )


def compute_line_total(item: LineItem, index: int | None = None) -> float:
    """``quantity * unit_price`` unless the item carries a precomputed total.

    Negative inputs are rejected, never clamped.
    """
    prefix = f'line_items[{index}].' if index is not None else ''
    quantity = non_negative(item.quantity, prefix + 'quantity', default=1)
    unit_price = non_negative(item.unit_price, prefix + 'unit_price')
    if item.line_total is not None:
        return non_negative(item.line_total, prefix + 'line_total')
    return quantity * unit_price


def _as_line_item(item, index: int) -> LineItem:
    if isinstance(item, LineItem):
        return item
    if isinstance(item, Mapping):
        return LineItem.from_dict(item, index)
    raise ValidationError(f'line_items[{index}]', f'unsupported line item {item!r}')


def compute_subtotal(line_items: Iterable) -> float:
    return sum(
        (compute_line_total(_as_line_item(item, i), i) for i, item in enumerate(line_items)),
        0.0,
    )


@dataclass(frozen=True)
class JobFinancialResult:
    subtotal: float
    discount_amount: float
    total_price: float
    sub_materials_cost: float
    sub_labor_cost: float
    sub_total_cost: float
    gross_profit: float
    gross_margin_pct: float
    deposit_required: float
    balance_due: float
    subcontractor_price: float
    meets_min_gp: bool
    meets_target_gm: bool
    profit_flag: ProfitFlag

    MONEY_FIELDS = (
        'subtotal', 'discount_amount', 'total_price', 'sub_materials_cost',
        'sub_labor_cost', 'sub_total_cost', 'gross_profit', 'gross_margin_pct',
        'deposit_required', 'balance_due', 'subcontractor_price',
    )

    def to_dict(self) -> dict:
        """Rounded figures, ready to persist or return."""
        out = {name: round_money(getattr(self, name)) for name in self.MONEY_FIELDS}
        out['meets_min_gp'] = self.meets_min_gp
        out['meets_target_gm'] = self.meets_target_gm
        out['profit_flag'] = self.profit_flag.value
        return out


def classify_profit(gross_profit: float, meets_min_gp: bool, meets_target_gm: bool) -> ProfitFlag:
    """The profit floor dominates the margin target.

    A job that does not make money at all is always RAISE_PRICE, even if the
    organization configured a minimum gross profit of zero.
    """
    if not meets_min_gp or gross_profit <= 0:
        return ProfitFlag.RAISE_PRICE
    if not meets_target_gm:
        return ProfitFlag.FIX_SCOPE
    return ProfitFlag.OK


def compute_price_breakdown(total_price: float, config: CostConfig | None = None,
                            subtotal: float | None = None,
                            discount_amount: float = 0.0) -> JobFinancialResult:
    """Cost breakdown for an already known total price.

    ``total_price`` may be negative (a discount larger than the subtotal);
    it is not clamped, but the margin of a non-positive price is 0.
    """
    cfg = resolve_cost_config(config)
    total_price = to_number(total_price, 'total_price')
    sub_materials_cost = total_price * cfg.sub_materials_pct / 100
    sub_labor_cost = total_price * cfg.sub_labor_pct / 100
    sub_total_cost = total_price * cfg.sub_total_pct / 100
    gross_profit = total_price - sub_total_cost
    gross_margin_pct = safe_pct(gross_profit, total_price)
    deposit_required = total_price * cfg.default_deposit_pct / 100

    # thresholds are judged on the figures as stored, to the cent
    rounded_gp = round_money(gross_profit)
    meets_min_gp = rounded_gp >= cfg.min_gross_profit_per_job
    meets_target_gm = round_money(gross_margin_pct) >= cfg.target_gross_margin_pct

    return JobFinancialResult(
        subtotal            = total_price if subtotal is None else subtotal,
        discount_amount     = discount_amount,
        total_price         = total_price,
        sub_materials_cost  = sub_materials_cost,
        sub_labor_cost      = sub_labor_cost,
        sub_total_cost      = sub_total_cost,
        gross_profit        = gross_profit,
        gross_margin_pct    = gross_margin_pct,
        deposit_required    = deposit_required,
        balance_due         = total_price - deposit_required,
        subcontractor_price = total_price * cfg.sub_payout_pct / 100,
        meets_min_gp        = meets_min_gp,
        meets_target_gm     = meets_target_gm,
        profit_flag         = classify_profit(rounded_gp, meets_min_gp, meets_target_gm),
    )


def compute_job_financials(line_items: Iterable, discount_amount=0.0,
                           config: CostConfig | None = None) -> JobFinancialResult:
    """Financials of an estimate or job from its line items and discount.

    ``line_items`` may hold ``LineItem`` instances or plain mappings.
    Raises ``ValidationError`` for negative quantities, prices, totals or
    discounts; nothing is coerced to zero.
    """
    items = list(line_items)
    discount = non_negative(discount_amount, 'discount_amount', default=0)
    subtotal = compute_subtotal(items)
    return compute_price_breakdown(subtotal - discount, config,
                                   subtotal=subtotal, discount_amount=discount)
