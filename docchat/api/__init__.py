"""HTTP routes."""

from fastapi import APIRouter

from docchat.api import chat, health, metrics_endpoint, webhook

# Browser-facing routes, mounted under settings.API_PREFIX
api_router = APIRouter()
api_router.include_router(chat.router)

# Server-to-server and operational routes, mounted at the root
root_router = APIRouter()
root_router.include_router(webhook.router)
root_router.include_router(health.router)
root_router.include_router(metrics_endpoint.router)
