import json
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from ..core.context import ServiceContext
from ..modules import events
from ..modules.events import ErrorCode
from ..modules.session import WebSocketSession
from .dependencies import get_context

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])


@router.websocket("/modules/ws")
async def module_websocket(
    websocket: WebSocket, context: ServiceContext = Depends(get_context)
):
    """Real-time channel for devices.

    Frames are JSON envelopes `{"event": name, "data": payload}`.
    """
    await websocket.accept()
    session = WebSocketSession(websocket)
    session.start()
    context.module_websocket.attach(session)
    client_id = id(websocket)
    logger.info(f"Device connection {client_id} opened")

    try:
        while True:
            text = await websocket.receive_text()
            try:
                message = json.loads(text)
                event = message["event"]
                if not isinstance(event, str):
                    raise TypeError("event must be a string")
            except (json.JSONDecodeError, KeyError, TypeError) as e:
                logger.warning(f"Invalid frame from device connection {client_id}: {e}")
                session.emit(events.ERROR, events.error_payload(ErrorCode.MODULE_ERROR))
                continue

            logger.debug(f"Received {event} from device connection {client_id}")
            if not await session.dispatch(event, message.get("data")):
                logger.debug(f"No handler for {event} on device connection {client_id}")
    except WebSocketDisconnect:
        logger.info(f"Device connection {client_id} closed")
    except Exception as e:
        logger.error(f"Device connection {client_id} failed: {e}", exc_info=True)
    finally:
        context.module_websocket.handle_disconnect(session)
        await session.stop()
