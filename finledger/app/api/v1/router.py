"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from finledger.app.api.v1.endpoints import companies, classification

router = APIRouter()

# Company setup: companies, fiscal periods, accounts, transactions, journal listing
router.include_router(companies.router)

# Rules, classification, journal sync and views
router.include_router(classification.router)
