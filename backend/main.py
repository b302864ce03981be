from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional
import logging

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from demo_library import config
from demo_library.annotations import DemoEvent
from demo_library.demo import DemoCache
from demo_library.exceptions import InvalidDemoFile, InvalidDemoName
from demo_library.scanner import get_demos_in_directory, sort_newest_first
from demo_library.summary import GameSummary
from demo_library.timeline_filters import Filters, filter_highlights

logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.demo_cache = DemoCache()
    logger.info("Demo cache ready")
    yield
    app.state.demo_cache.clear()


app = FastAPI(title="Demo Library API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class EventModel(BaseModel):
    tick: int = Field(ge=0)
    name: str
    value: str = ""


class EventsRequest(BaseModel):
    path: str
    events: List[EventModel]


class TagsRequest(BaseModel):
    path: str
    tags: List[str]


class RenameRequest(BaseModel):
    path: str
    new_name: str


class FiltersModel(BaseModel):
    player_ids: List[int] = []
    chat_search: str = ""
    visible_killfeed: bool = True
    visible_captures: bool = True
    visible_chat: bool = True
    visible_connection_messages: bool = True
    visible_killstreaks: bool = True
    visible_rounds: bool = True
    visible_airshots: bool = True


class FilterRequest(BaseModel):
    game_summary: Dict[str, Any]
    filters: FiltersModel = FiltersModel()


def get_cache(request: Request) -> DemoCache:
    return request.app.state.demo_cache


@app.exception_handler(InvalidDemoFile)
async def invalid_demo_handler(request: Request, exc: InvalidDemoFile):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(InvalidDemoName)
async def invalid_name_handler(request: Request, exc: InvalidDemoName):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(FileNotFoundError)
async def not_found_handler(request: Request, exc: FileNotFoundError):
    return JSONResponse(status_code=404, content={"detail": f"File not found: {exc.filename or exc}"})


@app.exception_handler(FileExistsError)
async def exists_handler(request: Request, exc: FileExistsError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.get("/")
def root():
    return {"message": "Demo Library API is running"}


@app.get("/demos")
def list_demos(directory: Optional[str] = None, cache: DemoCache = Depends(get_cache)):
    directory = directory or config.DEMO_DIRECTORY
    if not directory:
        raise HTTPException(status_code=400, detail="No demo directory given")

    result = get_demos_in_directory(cache, directory, max_workers=config.SCAN_WORKERS)
    return {
        "directory": str(result.directory),
        "demos": [demo.to_dict() for demo in sort_newest_first(result.demos)],
        "skipped": [{"path": str(s.path), "reason": s.reason} for s in result.skipped],
    }


@app.get("/demo")
def get_demo(path: str, cache: DemoCache = Depends(get_cache)):
    return cache.get_demo(path).to_dict()


@app.put("/demo/events")
def set_demo_events(req: EventsRequest, cache: DemoCache = Depends(get_cache)):
    demo = cache.get_demo(req.path)
    demo.write_events(DemoEvent(tick=e.tick, name=e.name, value=e.value) for e in req.events)
    return demo.to_dict()


@app.put("/demo/tags")
def set_demo_tags(req: TagsRequest, cache: DemoCache = Depends(get_cache)):
    demo = cache.get_demo(req.path)
    demo.write_tags(req.tags)
    return demo.to_dict()


@app.post("/demo/rename")
def rename_demo(req: RenameRequest, cache: DemoCache = Depends(get_cache)):
    demo = cache.get_demo(req.path)
    cache.rename_demo(demo, req.new_name)
    return demo.to_dict()


@app.delete("/demo")
def delete_demo(path: str, cache: DemoCache = Depends(get_cache)):
    demo = cache.get_demo(path)
    cache.delete_demo(demo)
    return {"deleted": str(demo.path)}


@app.post("/highlights/filter")
def filter_timeline(req: FilterRequest):
    try:
        summary = GameSummary.from_dict(req.game_summary)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise HTTPException(status_code=422, detail=f"Invalid game summary: {e}")

    filters = Filters(**req.filters.model_dump())
    highlights = filter_highlights(summary.highlights, filters)
    return {
        "total": len(summary.highlights),
        "highlights": [h.to_dict() for h in highlights],
    }
