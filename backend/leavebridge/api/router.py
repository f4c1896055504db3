from fastapi import APIRouter

from leavebridge.api.audit import audit_router
from leavebridge.api.balances import balances_router
from leavebridge.api.integrations import callback_router, integrations_router
from leavebridge.api.policies import policies_router
from leavebridge.api.requests import requests_router
from leavebridge.api.sync import sync_router

api_router = APIRouter()
api_router.include_router(requests_router)
api_router.include_router(policies_router)
api_router.include_router(balances_router)
api_router.include_router(audit_router)
api_router.include_router(integrations_router)
api_router.include_router(callback_router)
api_router.include_router(sync_router)
