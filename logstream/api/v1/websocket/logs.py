"""
Log buffer WebSocket endpoint.

Sends the current buffer of a polled source on connect, then the whole
buffer again on every throttled change notification from the coordinator.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Dict
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from logstream.core.logging import logger
from logstream.services.logs import LogPollingCoordinator
from logstream.services.logs.poll_coordinator import SOURCE_UNREGISTERED


router = APIRouter()


def buffer_message(coordinator: LogPollingCoordinator, message_type: str, source_id: str) -> Dict[str, Any]:
    records = coordinator.get_logs(source_id)
    return {
        "type": message_type,
        "source_id": source_id,
        "count": len(records),
        "logs": [record.to_dict() for record in records],
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@router.websocket("/logs/{source_id}")
async def source_logs_websocket(websocket: WebSocket, source_id: str):
    coordinator: LogPollingCoordinator = websocket.app.state.coordinator
    await websocket.accept()

    if not coordinator.is_registered(source_id):
        await websocket.send_json({
            "type": "error",
            "message": f"Source {source_id} is not being polled",
            "timestamp": datetime.now(timezone.utc).isoformat()
        })
        await websocket.close(code=1008)
        return

    events: asyncio.Queue = asyncio.Queue()

    def on_change(event: str, changed_id: str):
        if changed_id == source_id:
            events.put_nowait(event)

    async def forward_changes():
        while True:
            event = await events.get()
            if event == SOURCE_UNREGISTERED or not coordinator.is_registered(source_id):
                await websocket.send_json({
                    "type": "unregistered",
                    "source_id": source_id,
                    "timestamp": datetime.now(timezone.utc).isoformat()
                })
                return
            await websocket.send_json(buffer_message(coordinator, event, source_id))

    async def drain_client():
        # Client messages are ignored; receiving surfaces the disconnect
        while True:
            await websocket.receive_text()

    coordinator.add_listener(on_change)
    logger.info(f"WebSocket connected for logs of {source_id}")
    tasks = []
    try:
        await websocket.send_json(buffer_message(coordinator, "snapshot", source_id))
        forwarder = asyncio.create_task(forward_changes())
        tasks = [forwarder, asyncio.create_task(drain_client())]
        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            task.result()
        if forwarder in done:
            await websocket.close(code=1000)
    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnected for logs of {source_id}")
    except Exception as e:
        logger.error(f"WebSocket error for logs of {source_id}: {e}", exc_info=True)
    finally:
        coordinator.remove_listener(on_change)
        for task in tasks:
            task.cancel()
        logger.info(f"WebSocket handler cleanup complete for {source_id}")
