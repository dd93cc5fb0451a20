import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from chatpresence.core.config import settings
from chatpresence.database.connection import close_mongo_connection, connect_to_mongo, get_database
from chatpresence.repositories.chat_notification_repository import ChatNotificationRepository
from chatpresence.routers.typing import router as typing_router
from chatpresence.utils.realtime_bus import close_bus


logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):

    await connect_to_mongo()
    await ChatNotificationRepository(get_database()).ensure_indexes()
    try:
        yield
    finally:
        await close_bus()
        await close_mongo_connection()


app = FastAPI(title="Chat typing presence", lifespan=lifespan)


app.include_router(typing_router)


@app.get("/")
async def root():
    return {"message": "chatpresence is running"}
