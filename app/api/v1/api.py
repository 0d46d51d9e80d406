"""
V1 API router aggregator — wires all endpoint modules together.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import parcels, payments, riders, tracking, users

api_router = APIRouter()

# Accounts and roles
api_router.include_router(users.router)

# Parcels and rider assignment
api_router.include_router(parcels.router)

# Rider applications and review
api_router.include_router(riders.router)

# Payment capture, history and intents
api_router.include_router(payments.router)

# Delivery tracking log
api_router.include_router(tracking.router)
