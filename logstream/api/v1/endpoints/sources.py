"""
Source catalogue and configuration endpoints
"""

from typing import List
from fastapi import APIRouter, Depends

from logstream.api.deps import get_activity_tracker, get_coordinator, get_stream_service
from logstream.core.exceptions import UnsupportedSourceError
from logstream.core.logging import logger
from logstream.schemas.logs import StreamLogsResponse
from logstream.schemas.source import (
    SourceCatalogueResponse, SourceCatalogueUpdate, SourceDescriptorSchema, SourceSummary,
    SupportedSourcesResponse, ValidationResponse
)
from logstream.services.logs import ActivityTracker, LogPollingCoordinator, StreamLogsService


router = APIRouter()


@router.get("/supported", response_model=SupportedSourcesResponse)
async def list_supported_sources(stream_service: StreamLogsService = Depends(get_stream_service)):
    """Provider types this server can read"""
    return SupportedSourcesResponse(sources=stream_service.supported_sources())


@router.get("/", response_model=List[SourceSummary])
async def list_sources(
    coordinator: LogPollingCoordinator = Depends(get_coordinator),
    activity_tracker: ActivityTracker = Depends(get_activity_tracker)
):
    """List catalogued sources. Credentials are never returned."""
    return [
        SourceSummary(
            id=descriptor.id,
            slug=descriptor.slug,
            name=descriptor.name,
            registered=coordinator.is_registered(descriptor.id),
            active=activity_tracker.has_active_stream(descriptor.id)
        )
        for descriptor in coordinator.get_sources()
    ]


@router.put("/", response_model=SourceCatalogueResponse)
async def replace_sources(
    update: SourceCatalogueUpdate,
    coordinator: LogPollingCoordinator = Depends(get_coordinator)
):
    """Replace the source catalogue; sources no longer listed stop polling"""
    removed = await coordinator.update_sources([source.to_descriptor() for source in update.sources])
    return SourceCatalogueResponse(count=len(update.sources), unregistered=removed)


@router.post("/validate", response_model=ValidationResponse)
async def validate_source(
    source: SourceDescriptorSchema,
    stream_service: StreamLogsService = Depends(get_stream_service)
):
    if not stream_service.is_source_supported(source.slug):
        raise UnsupportedSourceError(source.slug, stream_service.supported_sources())

    descriptor = source.to_descriptor()
    valid = stream_service.validate_source_configuration(descriptor)
    errors = None
    if not valid:
        fetcher = stream_service.fetchers.create_fetcher(source.slug)
        errors = [error.details for error in fetcher.config_errors(descriptor)]
        logger.info(f"Source {source.id} failed validation: {errors}")
    return ValidationResponse(valid=valid, source=source.slug, errors=errors)


@router.post("/test-connection", response_model=StreamLogsResponse)
async def test_source_connection(
    source: SourceDescriptorSchema,
    stream_service: StreamLogsService = Depends(get_stream_service)
):
    """Check a source's configuration without contacting the provider"""
    result = stream_service.test_connection(source.to_descriptor())
    return StreamLogsResponse(**result.to_dict())
