"""
TaskGraph Backend - FastAPI + Socket.io entry point.
Run: uvicorn main:asgi_app --reload (from backend/).
"""

import sys

import socketio
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from api import register_routes
from db import get_tasks
from shared import config

logger.remove()
logger.add(sys.stderr, level=config.LOG_LEVEL)

# Socket.io
sio = socketio.AsyncServer(async_mode="asgi", cors_allowed_origins="*")
app = FastAPI(title="TaskGraph Backend")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_routes(app, sio)


@app.get("/api/health")
async def health():
    return {"status": "ok"}


# Socket.io events
@sio.event
async def connect(sid, environ, auth=None):
    logger.info("Client connected: {}", sid)
    await sio.emit("tasks-update", {"tasks": await get_tasks()}, to=sid)


@sio.event
def disconnect(sid, reason=None):
    logger.info("Client disconnected: {}", sid)


# ASGI app for uvicorn (Socket.io + FastAPI)
asgi_app = socketio.ASGIApp(sio, app)
