"""Run the FastAPI app for the device agent."""

from __future__ import annotations

import logging
import os

import uvicorn
from fastapi import FastAPI

from src.device_agent.api import router as conversations_router
from src.device_agent.config import ensure_dirs

logging.basicConfig(
    level=os.getenv("DEVICE_AGENT_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Device Agent", version="0.1.0")
app.include_router(conversations_router)

ensure_dirs()


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
