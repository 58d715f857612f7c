from __future__ import annotations

import logging
import threading
from contextlib import nullcontext
from typing import Any, Dict, Optional

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from fastapi.staticfiles import StaticFiles
from openai import OpenAIError
from pydantic import BaseModel, Field

from ...api import api_state, get_api_function, get_api_functions
from ...api.models import ChatRequest
from ...bootstrap import configure_logging
from ...config import get_settings
from ...core import InvalidUpload, decode_upload
from ...orchestrator import CalendarAssistant, PlannerNotConfiguredError

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Tidy Calendar Local API", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mutating requests run one at a time against the single calendar file.
_write_lock = threading.Lock()
_assistant: Optional[CalendarAssistant] = None

MISSING_MODEL_MESSAGE = "Language model is not configured: set OPENAI_API_KEY on the server."


class ApiCallRequest(BaseModel):
    arguments: Dict[str, Any] = Field(default_factory=dict)


def get_assistant() -> CalendarAssistant:
    global _assistant
    if _assistant is None or _assistant.calendar is not api_state.calendar:
        _assistant = CalendarAssistant(api_state.calendar)
    return _assistant


def set_assistant(assistant: Optional[CalendarAssistant]) -> None:
    global _assistant
    _assistant = assistant


@app.get("/api/functions")
async def list_api_functions() -> JSONResponse:
    functions = [func.describe() for func in get_api_functions()]
    return JSONResponse({"functions": functions})


@app.post("/api/functions/{function_name}")
def invoke_api_function(function_name: str, request: ApiCallRequest) -> JSONResponse:
    try:
        api_function = get_api_function(function_name)
    except KeyError as exc:
        logger.warning("API function not found: %s", function_name)
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    guard = _write_lock if api_function.mutating else nullcontext()
    try:
        with guard:
            result = api_function.func(**request.arguments)
    except (TypeError, ValueError) as exc:
        logger.warning("API function %s rejected its arguments: %s", function_name, exc)
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    logger.debug("API function %s executed successfully", function_name)
    return JSONResponse({"name": function_name, "result": result})


@app.post("/generate")
def generate(prompt: Optional[str] = Form(None), icsFile: Optional[UploadFile] = File(None)) -> PlainTextResponse:  # noqa: N803
    request = (prompt or "").strip()
    assistant = get_assistant()
    if request and not assistant.planner.is_configured:
        return PlainTextResponse(MISSING_MODEL_MESSAGE, status_code=500)

    out = []
    with _write_lock:
        if icsFile is not None:
            payload = icsFile.file.read()
            if payload.strip():
                try:
                    api_state.calendar.replace_document(decode_upload(payload))
                except InvalidUpload as exc:
                    return PlainTextResponse(f"Uploaded file is not a calendar: {exc}", status_code=400)
                out.append("Uploaded ICS loaded.")

        if not request:
            out.append(api_state.calendar.summarize())
            return PlainTextResponse("\n\n".join(out))

        try:
            turn = assistant.handle(request)
        except (PlannerNotConfiguredError, OpenAIError) as exc:
            logger.exception("Generate request failed")
            return PlainTextResponse(f"Server error: {exc}", status_code=500)

    out.extend(turn.render_report_lines())
    return PlainTextResponse("\n".join(out))


@app.post("/chat")
def chat(request: ChatRequest) -> PlainTextResponse:
    message = (request.message or "").strip()
    if not message:
        return PlainTextResponse("Please provide a message.", status_code=400)
    assistant = get_assistant()
    if not assistant.planner.is_configured:
        return PlainTextResponse(MISSING_MODEL_MESSAGE, status_code=500)
    try:
        with _write_lock:
            turn = assistant.handle(message)
    except (PlannerNotConfiguredError, OpenAIError) as exc:
        logger.exception("Chat request failed")
        return PlainTextResponse(f"Server error: {exc}", status_code=500)
    return PlainTextResponse(turn.render_chat_reply())


@app.get("/calendar.ics")
def download_calendar() -> Response:
    return Response(
        content=api_state.calendar.read_raw_document(),
        media_type="text/calendar; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="calendar.ics"'},
    )


@app.get("/events")
def list_events() -> JSONResponse:
    return JSONResponse({"events": api_state.calendar.list_events()})


_static_dir = get_settings().server.static_dir
if _static_dir is not None and _static_dir.is_dir():
    app.mount("/", StaticFiles(directory=_static_dir, html=True), name="static")
else:

    @app.get("/")
    async def index() -> PlainTextResponse:
        return PlainTextResponse("Static UI not found. Set TIDYCAL_STATIC_DIR to a folder containing index.html.")


def run_local_server(host: Optional[str] = None, port: Optional[int] = None) -> None:
    import asyncio

    from hypercorn.asyncio import serve
    from hypercorn.config import Config

    settings = get_settings().server
    config = Config()
    config.bind = [f"{host or settings.host}:{port or settings.port}"]
    logger.info("Serving HTTP API on %s", config.bind[0])
    asyncio.run(serve(app, config))
