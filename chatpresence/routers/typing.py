import logging

from fastapi import APIRouter, Depends, HTTPException, Request, WebSocket, WebSocketDisconnect

from chatpresence.database.connection import mongo_db_dependency
from chatpresence.errors import DecodeError, FormatError, UnrecognizedValueError
from chatpresence.repositories.chat_notification_repository import ChatNotificationRepository
from chatpresence.schemas.events import ErrorEvent
from chatpresence.schemas.typing import TypingStatusRead, TypingUpdateResult, decode_typing_status
from chatpresence.services.typing_service import TypingService
from chatpresence.utils.realtime_bus import get_bus, user_channel
from chatpresence.utils.websocket_manager import ConnectionManager


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/typing", tags=["typing"])
manager = ConnectionManager()


def get_typing_service(db = Depends(mongo_db_dependency)) -> TypingService:
    return TypingService(ChatNotificationRepository(db), manager)


@router.post("", response_model=TypingUpdateResult)
async def update_typing(request: Request, service: TypingService = Depends(get_typing_service)):
    raw = await request.body()
    try:
        status = decode_typing_status(raw)
    except FormatError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except UnrecognizedValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    changed = await service.update_typing_status(status)
    return TypingUpdateResult(status=status, changed=changed)


@router.get("/{user_id}/{other_id}", response_model=TypingStatusRead)
async def get_typing(user_id: str, other_id: str, service: TypingService = Depends(get_typing_service)):
    is_typing = await service.get_typing_status(user_id, other_id)
    if is_typing is None:
        raise HTTPException(status_code=404, detail="Chat not found")
    return TypingStatusRead(user_id=user_id, other_participant_id=other_id, is_typing=is_typing)


@router.websocket("/ws/{user_id}")
async def typing_socket(websocket: WebSocket, user_id: str, service: TypingService = Depends(get_typing_service)):
    await manager.connect(user_id, websocket)
    subscription = None
    try:
        bus = await get_bus()
        if bus.enabled:
            subscription = await bus.subscribe(user_channel(user_id), websocket.send_text)
            subscription.start()

        while True:
            data = await websocket.receive_text()
            # the socket owner is always the sender
            try:
                status = decode_typing_status(data, sender_id=user_id)
            except DecodeError as exc:
                await websocket.send_text(ErrorEvent(detail=str(exc)).to_wire())
                continue
            await service.update_typing_status(status)
    except WebSocketDisconnect:
        logger.debug("Typing socket closed for %s", user_id)
    finally:
        manager.disconnect(user_id, websocket)
        if subscription is not None:
            await subscription.cancel()
