from paintledger import db
from paintledger.finance import (
    JobMaterialCost as MaterialCostSnapshot,
    LineItem,
    SubcontractorPayment as PaymentSnapshot,
    SubcontractorPayout as PayoutSnapshot,
    TimeEntry as TimeEntrySnapshot,
)


class BusinessSettings(db.Model):
    """Cost configuration of one organization; ``None`` columns use defaults."""
    __tablename__ = 'business_settings'
    id                       = db.Column(db.Integer, primary_key=True)
    organization_id          = db.Column(db.Integer, unique=True, nullable=False)
    sub_materials_pct        = db.Column(db.Float)
    sub_labor_pct            = db.Column(db.Float)
    sub_payout_pct           = db.Column(db.Float)
    min_gross_profit_per_job = db.Column(db.Float)
    target_gross_margin_pct  = db.Column(db.Float)
    default_deposit_pct      = db.Column(db.Float)
    default_commission_pct   = db.Column(db.Float)


class TeamMember(db.Model):
    __tablename__ = 'team_member'
    id                     = db.Column(db.Integer, primary_key=True)
    organization_id        = db.Column(db.Integer, nullable=False, index=True)
    name                   = db.Column(db.String(200), nullable=False)
    role                   = db.Column(db.String(32), nullable=False, default='sales')
    default_commission_pct = db.Column(db.Float)


class FinancialsMixin:
    """Derived figures shared by estimates and jobs.

    These columns are written only through ``apply_financials``; they are
    recomputed whenever price inputs change, never edited by hand.
    """
    subtotal            = db.Column(db.Float, default=0.0)
    discount_amount     = db.Column(db.Float, default=0.0)
    total_price         = db.Column(db.Float, default=0.0)
    sub_materials_cost  = db.Column(db.Float, default=0.0)
    sub_labor_cost      = db.Column(db.Float, default=0.0)
    sub_total_cost      = db.Column(db.Float, default=0.0)
    gross_profit        = db.Column(db.Float, default=0.0)
    gross_margin_pct    = db.Column(db.Float, default=0.0)
    deposit_required    = db.Column(db.Float, default=0.0)
    balance_due         = db.Column(db.Float, default=0.0)
    subcontractor_price = db.Column(db.Float, default=0.0)
    meets_min_gp        = db.Column(db.Boolean, default=False)
    meets_target_gm     = db.Column(db.Boolean, default=False)
    profit_flag         = db.Column(db.String(16), default='RAISE_PRICE')

    def apply_financials(self, result):
        for key, value in result.to_dict().items():
            setattr(self, key, value)

    def financials_dict(self):
        return {
            'subtotal': self.subtotal,
            'discount_amount': self.discount_amount,
            'total_price': self.total_price,
            'sub_materials_cost': self.sub_materials_cost,
            'sub_labor_cost': self.sub_labor_cost,
            'sub_total_cost': self.sub_total_cost,
            'gross_profit': self.gross_profit,
            'gross_margin_pct': self.gross_margin_pct,
            'deposit_required': self.deposit_required,
            'balance_due': self.balance_due,
            'subcontractor_price': self.subcontractor_price,
            'meets_min_gp': self.meets_min_gp,
            'meets_target_gm': self.meets_target_gm,
            'profit_flag': self.profit_flag,
        }


class Estimate(FinancialsMixin, db.Model):
    __tablename__ = 'estimate'
    id              = db.Column(db.Integer, primary_key=True)
    organization_id = db.Column(db.Integer, nullable=False, index=True)
    estimate_number = db.Column(db.String(32))
    client_name     = db.Column(db.String(200), nullable=False, default='')
    address         = db.Column(db.String(200))
    status          = db.Column(db.String(32), nullable=False, default='draft')

    items = db.relationship(
        'EstimateLineItem',
        backref='estimate',
        lazy=True,
        cascade='all, delete-orphan',
        order_by='EstimateLineItem.id',
    )

    def line_items(self):
        return [i.to_line_item() for i in self.items]

    def to_dict(self):
        out = {
            'id': self.id,
            'organization_id': self.organization_id,
            'estimate_number': self.estimate_number,
            'client_name': self.client_name,
            'address': self.address,
            'status': self.status,
            'line_items': [i.to_dict() for i in self.items],
        }
        out.update(self.financials_dict())
        return out


class EstimateLineItem(db.Model):
    __tablename__ = 'estimate_line_item'
    id          = db.Column(db.Integer, primary_key=True)
    estimate_id = db.Column(db.Integer, db.ForeignKey('estimate.id'), nullable=False)
    description = db.Column(db.Text, default='')
    location    = db.Column(db.String(100))
    quantity    = db.Column(db.Float, default=1.0)
    unit_price  = db.Column(db.Float, default=0.0)
    line_total  = db.Column(db.Float)

    def to_line_item(self):
        return LineItem(
            unit_price  = self.unit_price,
            quantity    = self.quantity,
            line_total  = self.line_total,
            description = self.description or '',
        )

    def to_dict(self):
        return {
            'id': self.id,
            'description': self.description,
            'location': self.location,
            'quantity': self.quantity,
            'unit_price': self.unit_price,
            'line_total': self.line_total,
        }


class Job(FinancialsMixin, db.Model):
    __tablename__ = 'job'
    id                      = db.Column(db.Integer, primary_key=True)
    organization_id         = db.Column(db.Integer, nullable=False, index=True)
    job_number              = db.Column(db.String(32))
    client_name             = db.Column(db.String(200), nullable=False, default='')
    address                 = db.Column(db.String(200))
    city                    = db.Column(db.String(100))
    state                   = db.Column(db.String(100))
    status                  = db.Column(db.String(32), nullable=False, default='lead')
    notes                   = db.Column(db.Text)
    estimate_id             = db.Column(db.Integer, db.ForeignKey('estimate.id'))
    sales_rep_id            = db.Column(db.Integer, db.ForeignKey('team_member.id'))
    project_manager_id      = db.Column(db.Integer, db.ForeignKey('team_member.id'))
    sales_commission_pct    = db.Column(db.Float, default=0.0)
    sales_commission_amount = db.Column(db.Float, default=0.0)
    pm_commission_pct       = db.Column(db.Float, default=0.0)
    pm_commission_amount    = db.Column(db.Float, default=0.0)

    sales_rep       = db.relationship('TeamMember', foreign_keys=[sales_rep_id])
    project_manager = db.relationship('TeamMember', foreign_keys=[project_manager_id])

    @property
    def job_value(self):
        return self.total_price

    def apply_commissions(self, commissions):
        for key, value in commissions.to_dict().items():
            setattr(self, key, value)

    def to_dict(self):
        out = {
            'id': self.id,
            'organization_id': self.organization_id,
            'job_number': self.job_number,
            'client_name': self.client_name,
            'address': self.address,
            'city': self.city,
            'state': self.state,
            'status': self.status,
            'notes': self.notes,
            'job_value': self.job_value,
            'sales_rep_id': self.sales_rep_id,
            'project_manager_id': self.project_manager_id,
            'sales_commission_pct': self.sales_commission_pct,
            'sales_commission_amount': self.sales_commission_amount,
            'pm_commission_pct': self.pm_commission_pct,
            'pm_commission_amount': self.pm_commission_amount,
        }
        out.update(self.financials_dict())
        return out


class Subcontractor(db.Model):
    __tablename__ = 'subcontractor'
    id              = db.Column(db.Integer, primary_key=True)
    organization_id = db.Column(db.Integer, nullable=False, index=True)
    name            = db.Column(db.String(200), nullable=False)

    employees = db.relationship('SubcontractorEmployee', backref='subcontractor', lazy=True)


class SubcontractorEmployee(db.Model):
    __tablename__ = 'subcontractor_employee'
    id               = db.Column(db.Integer, primary_key=True)
    subcontractor_id = db.Column(db.Integer, db.ForeignKey('subcontractor.id'), nullable=False)
    name             = db.Column(db.String(200), nullable=False)
    hourly_rate      = db.Column(db.Float, nullable=False, default=0.0)
    is_owner         = db.Column(db.Boolean, nullable=False, default=False)
    is_active        = db.Column(db.Boolean, nullable=False, default=True)


class TimeEntry(db.Model):
    __tablename__ = 'time_entry'
    id           = db.Column(db.Integer, primary_key=True)
    employee_id  = db.Column(db.Integer, db.ForeignKey('subcontractor_employee.id'), nullable=False)
    job_id       = db.Column(db.Integer, db.ForeignKey('job.id'), nullable=False, index=True)
    work_date    = db.Column(db.Date)
    hours_worked = db.Column(db.Float, nullable=False, default=0.0)
    notes        = db.Column(db.Text)

    employee = db.relationship('SubcontractorEmployee', lazy='joined')

    def to_snapshot(self):
        return TimeEntrySnapshot(
            id               = self.id,
            employee_id      = self.employee_id,
            job_id           = self.job_id,
            subcontractor_id = self.employee.subcontractor_id,
            hours_worked     = self.hours_worked,
            hourly_rate      = self.employee.hourly_rate,
            is_owner         = bool(self.employee.is_owner),
            work_date        = self.work_date,
        )


class SubcontractorPayout(db.Model):
    __tablename__ = 'subcontractor_payout'
    __table_args__ = (db.UniqueConstraint('job_id', 'subcontractor_id'),)
    id               = db.Column(db.Integer, primary_key=True)
    organization_id  = db.Column(db.Integer, nullable=False, index=True)
    job_id           = db.Column(db.Integer, db.ForeignKey('job.id'), nullable=False)
    subcontractor_id = db.Column(db.Integer, db.ForeignKey('subcontractor.id'), nullable=False)
    final_payout     = db.Column(db.Float, nullable=False, default=0.0)

    job      = db.relationship('Job')
    payments = db.relationship(
        'SubcontractorPayment',
        backref='payout',
        lazy=True,
        cascade='all, delete-orphan',
        order_by='SubcontractorPayment.id',
    )

    def to_snapshot(self):
        return PayoutSnapshot(
            id               = self.id,
            job_id           = self.job_id,
            subcontractor_id = self.subcontractor_id,
            final_payout     = self.final_payout,
        )


class SubcontractorPayment(db.Model):
    __tablename__ = 'subcontractor_payment'
    id        = db.Column(db.Integer, primary_key=True)
    payout_id = db.Column(db.Integer, db.ForeignKey('subcontractor_payout.id'), nullable=False)
    status    = db.Column(db.String(16), nullable=False, default='pending')
    amount    = db.Column(db.Float, nullable=False, default=0.0)
    paid_date = db.Column(db.Date)
    notes     = db.Column(db.Text)

    def to_snapshot(self):
        return PaymentSnapshot(
            payout_id = self.payout_id,
            status    = self.status,
            amount    = self.amount,
            paid_date = self.paid_date,
        )

    def to_dict(self):
        return {
            'id': self.id,
            'payout_id': self.payout_id,
            'status': self.status,
            'amount': self.amount,
            'paid_date': self.paid_date.isoformat() if self.paid_date else None,
            'notes': self.notes,
        }


class JobMaterialCost(db.Model):
    __tablename__ = 'job_material_cost'
    __table_args__ = (db.UniqueConstraint('job_id', 'subcontractor_id'),)
    id               = db.Column(db.Integer, primary_key=True)
    job_id           = db.Column(db.Integer, db.ForeignKey('job.id'), nullable=False)
    subcontractor_id = db.Column(db.Integer, db.ForeignKey('subcontractor.id'), nullable=False)
    total_cost       = db.Column(db.Float, nullable=False, default=0.0)
    notes            = db.Column(db.Text)

    def to_snapshot(self):
        return MaterialCostSnapshot(
            job_id           = self.job_id,
            subcontractor_id = self.subcontractor_id,
            total_cost       = self.total_cost,
            notes            = self.notes,
        )
