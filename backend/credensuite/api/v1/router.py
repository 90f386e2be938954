from fastapi import APIRouter
from credensuite.api.v1.endpoints import members, settings, templates, activity, health

api_router = APIRouter()

api_router.include_router(health.router)
api_router.include_router(members.router)
api_router.include_router(settings.router)
api_router.include_router(templates.router)
api_router.include_router(activity.router)
