"""
Dependencies resolving the services created in the application lifespan.
"""

from fastapi import Request

from logstream.services.logs import ActivityTracker, LogPollingCoordinator, StreamLogsService


def get_stream_service(request: Request) -> StreamLogsService:
    return request.app.state.stream_service


def get_coordinator(request: Request) -> LogPollingCoordinator:
    return request.app.state.coordinator


def get_activity_tracker(request: Request) -> ActivityTracker:
    return request.app.state.activity_tracker
