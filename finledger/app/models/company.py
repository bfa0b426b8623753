"""
Company database model.

A company owns its fiscal periods, chart of accounts, transactions, rules and journal.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime
from finledger.app.db.session import Base


class Company(Base):
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    name = Column(String(255), nullable=False, unique=True)
    registration_number = Column(String(50), nullable=True)
    tax_number = Column(String(50), nullable=True)

    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Company(id={self.id}, name='{self.name}')>"
