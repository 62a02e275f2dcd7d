from fastapi import Depends, FastAPI, Request, Response
from fastapi.responses import HTMLResponse
from pydantic import BaseModel
from collections import OrderedDict
from contextlib import asynccontextmanager
from typing import Dict, List, Optional
import logging
import threading
import uuid

from ai_client import ActivitySource
from config import Settings
from controller import GameMode, InteractionController, Notice
from page import INDEX_HTML

# Configuration is read once here and passed down; nothing below reads the environment.
settings = Settings.from_env()

logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger("spontaneous-web")

SESSION_COOKIE = "session_id"


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    sessions.clear()


app = FastAPI(title="Spontaneous Adventures", lifespan=lifespan)

activity_source = ActivitySource(settings)


class ModeRequest(BaseModel):
    mode: GameMode


class PlayersRequest(BaseModel):
    count: int


class ShareBuffer:
    """Clipboard writer for web sessions: keeps the text so the browser can put it on the real clipboard."""

    def __init__(self):
        self.text: Optional[str] = None

    def __call__(self, text: str) -> None:
        self.text = text


class SessionRegistry:
    """Per-browser controllers, least recently used first; the oldest are closed and dropped past the cap."""

    def __init__(self, max_sessions: int = 1000):
        self.max_sessions = max(1, max_sessions)
        self._sessions: "OrderedDict[str, InteractionController]" = OrderedDict()
        self._buffers: Dict[str, ShareBuffer] = {}
        self._lock = threading.Lock()

    def get(self, session_id: Optional[str]) -> Optional[InteractionController]:
        if not session_id:
            return None
        with self._lock:
            ctl = self._sessions.get(session_id)
            if ctl is not None:
                self._sessions.move_to_end(session_id)
            return ctl

    def get_or_create(self, session_id: str, source) -> InteractionController:
        with self._lock:
            ctl = self._sessions.get(session_id)
            if ctl is not None:
                self._sessions.move_to_end(session_id)
                return ctl
            buf = ShareBuffer()
            ctl = InteractionController(source, clipboard=buf)
            self._sessions[session_id] = ctl
            self._buffers[session_id] = buf
            logger.info("Created session %s", session_id)
            while len(self._sessions) > self.max_sessions:
                old_id, old = self._sessions.popitem(last=False)
                self._buffers.pop(old_id, None)
                old.close()
                logger.info("Evicted idle session %s", old_id)
            return ctl

    def share_buffer(self, session_id: str) -> Optional[ShareBuffer]:
        with self._lock:
            return self._buffers.get(session_id)

    def clear(self) -> None:
        with self._lock:
            for ctl in self._sessions.values():
                ctl.close()
            self._sessions.clear()
            self._buffers.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


sessions = SessionRegistry(settings.max_sessions)


def get_activity_source() -> ActivitySource:
    return activity_source


def get_session_id(request: Request, response: Response) -> str:
    session_id = request.cookies.get(SESSION_COOKIE)
    if not session_id:
        session_id = uuid.uuid4().hex
        response.set_cookie(SESSION_COOKIE, session_id, httponly=True, samesite="lax")
    return session_id


def get_controller(session_id: str = Depends(get_session_id), source=Depends(get_activity_source)) -> InteractionController:
    return sessions.get_or_create(session_id, source)


def _notices(items: List[Notice]) -> List[dict]:
    return [n.model_dump() for n in items]


@app.get("/", response_class=HTMLResponse)
def index():
    return INDEX_HTML


@app.get("/api/state")
def get_state(request: Request, source=Depends(get_activity_source)):
    # Reading state never creates a session; unknown visitors get the defaults.
    ctl = sessions.get(request.cookies.get(SESSION_COOKIE))
    if ctl is None:
        return InteractionController(source).snapshot()
    return ctl.snapshot()


@app.post("/api/mode")
def set_mode(body: ModeRequest, ctl: InteractionController = Depends(get_controller)):
    ctl.set_mode(body.mode)
    return ctl.snapshot()


@app.post("/api/players")
def set_players(body: PlayersRequest, ctl: InteractionController = Depends(get_controller)):
    ctl.set_player_count(body.count)
    return ctl.snapshot()


@app.post("/api/players/increment")
def increment_players(ctl: InteractionController = Depends(get_controller)):
    ctl.increment_player_count()
    return ctl.snapshot()


@app.post("/api/players/decrement")
def decrement_players(ctl: InteractionController = Depends(get_controller)):
    ctl.decrement_player_count()
    return ctl.snapshot()


@app.post("/api/activity")
def new_activity(ctl: InteractionController = Depends(get_controller)):
    ctl.request_new_activity()
    return {"state": ctl.snapshot(), "notices": _notices(ctl.drain_notices())}


@app.post("/api/share")
def share(session_id: str = Depends(get_session_id), ctl: InteractionController = Depends(get_controller)):
    ok = ctl.copy_current_to_clipboard()
    buf = sessions.share_buffer(session_id)
    return {
        "ok": ok,
        "share_text": buf.text if ok and buf else None,
        "state": ctl.snapshot(),
        "notices": _notices(ctl.drain_notices()),
    }


@app.get("/health")
def health():
    return {"ok": True}


@app.get("/debug")
def debug_info():
    """Return runtime diagnostics.

    This endpoint intentionally does not return secret values. It only reports presence.
    """
    return {
        "OPENAI_API_KEY_set": settings.has_credential,
        "model": settings.model,
        "base_url": settings.openai_base_url,
        "temperature": settings.temperature,
        "sessions": len(sessions),
        "max_sessions": sessions.max_sessions,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
