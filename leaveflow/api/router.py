from fastapi import APIRouter

from leaveflow.api.auth import auth_router
from leaveflow.api.requests import requests_router
from leaveflow.api.users import users_router

api_router = APIRouter()
api_router.include_router(auth_router)
api_router.include_router(users_router)
api_router.include_router(requests_router)
