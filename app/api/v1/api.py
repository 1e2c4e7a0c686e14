from fastapi import APIRouter
from app.api.v1.endpoints import admin, waitlist

api_router = APIRouter()

api_router.include_router(waitlist.router)
api_router.include_router(admin.router)
