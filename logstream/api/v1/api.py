from fastapi import APIRouter

from logstream.api.v1.endpoints import activity, health, logs, polling, sources
from logstream.api.v1.websocket import logs_router

api_router = APIRouter()

# Sources and one-shot fetches
api_router.include_router(sources.router, prefix="/sources", tags=["sources"])
api_router.include_router(logs.router, prefix="/logs", tags=["logs"])

# Continuous polling
api_router.include_router(polling.router, prefix="/polling", tags=["polling"])
api_router.include_router(activity.router, prefix="/activity", tags=["activity"])
api_router.include_router(logs_router, prefix="/ws", tags=["websocket"])

# System
api_router.include_router(health.router, prefix="/health", tags=["health"])
