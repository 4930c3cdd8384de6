"""API router - includes all endpoint routers."""

from fastapi import APIRouter

from cineverse.api.endpoints import (
    admin_settings,
    admin_users,
    ads,
    auth,
    exams,
    health,
    posts,
    settings,
    subscriptions,
)

api_router = APIRouter()

api_router.include_router(health.router)
api_router.include_router(auth.router)
api_router.include_router(posts.router)
api_router.include_router(settings.router)
api_router.include_router(admin_settings.router)
api_router.include_router(admin_users.router)
api_router.include_router(ads.router)
api_router.include_router(subscriptions.router)
api_router.include_router(exams.router)
