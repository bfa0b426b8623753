"""
Fiscal Period database model.

A bounded date range used to scope transactions and reports.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Date, DateTime, Boolean, ForeignKey, UniqueConstraint
from finledger.app.db.session import Base


class FiscalPeriod(Base):
    """
    Fiscal Period model.

    Periods of one company never overlap; the setup service enforces it
    because a range constraint is not portable between PostgreSQL and SQLite.
    """
    __tablename__ = "fiscal_periods"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    company_id = Column(Integer, ForeignKey('companies.id'), nullable=False, index=True)

    period_name = Column(String(100), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    is_closed = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint('company_id', 'period_name', name='uq_fiscal_periods_company_name'),
    )

    def __repr__(self):
        return f"<FiscalPeriod(id={self.id}, name='{self.period_name}', {self.start_date}..{self.end_date})>"
