from fastapi import APIRouter

from spendwise.core.auth import fastapi_users, auth_backend
from spendwise.api.v1.routes import auth, users, categories, expenses, receipts, analytics

api_router = APIRouter()

# JWT login / logout
api_router.include_router(fastapi_users.get_auth_router(auth_backend), prefix="/auth/jwt", tags=["Authentication"])
api_router.include_router(auth.router, prefix="/auth")
api_router.include_router(users.router)
api_router.include_router(categories.router)
api_router.include_router(expenses.router)
api_router.include_router(receipts.router)
api_router.include_router(analytics.router)
