# Role: FastAPI app bootstrap. Loads environment config early, registers routers, and exposes health/docs endpoints.

from fastapi import FastAPI

import qbjs_chat.config
qbjs_chat.config.load_env()

from qbjs_chat.api.chat import router as chat_router
from qbjs_chat.api.deps import chat_flow
from qbjs_chat.api.examples import router as examples_router
from qbjs_chat.api.sessions import router as sessions_router

app = FastAPI(title="QBJS Code Chat API", version="0.1.0")
app.include_router(chat_router)
app.include_router(sessions_router)
app.include_router(examples_router)

@app.get("/")
def root() -> dict:
    # Role: quick discoverability for clients (where are docs/health).
    return {
        "message": "QBJS Code Chat API is running",
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health")
def health() -> dict:
    return {"status": "ok", "examples": len(chat_flow.corpus)}
