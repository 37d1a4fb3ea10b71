import logging
from typing import Any, Dict

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from game_runner import Game
from game_session import GameSession
from settings import settings
from story.story_loader import load_story
from ui.web_provider import WebProvider

logger = logging.getLogger(__name__)

app = FastAPI(title="Terminal Adventure")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


sessions: Dict[str, GameSession] = {}


class StartRequest(BaseModel):
    session_id: str


class StepRequest(BaseModel):
    session_id: str
    token: str


class EventsRequest(BaseModel):
    session_id: str


def new_session() -> GameSession:
    session = GameSession()
    # The browser animates typed lines itself, so the server never sleeps.
    session.game = Game(
        WebProvider(session),
        load_story(settings.story_path),
        typing_scale=settings.web_typing_scale,
        prompt=settings.prompt,
    )
    return session


def get_session(session_id: str) -> GameSession:
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Unknown session_id: {session_id}")
    return session


@app.post("/start")
async def start(req: StartRequest):
    """
    Begin (or throw away and begin again) the session's game.
    """
    if req.session_id in sessions:
        logger.info("Replacing session %s", req.session_id)
    session = new_session()
    sessions[req.session_id] = session
    return await session.start()


@app.post("/step")
async def step(req: StepRequest) -> Dict[str, Any]:
    session = get_session(req.session_id)
    return await session.step(req.token)


@app.post("/restart")
async def restart(req: StartRequest):
    session = get_session(req.session_id)
    return await session.restart()


@app.post("/events")
def events(req: EventsRequest):
    if req.session_id not in sessions:
        return []
    return sessions[req.session_id].drain()


@app.get("/state/{session_id}")
def state(session_id: str) -> Dict[str, Any]:
    return get_session(session_id).snapshot()
