import json

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from core.exceptions import ScoreSheetException, ParseError, StorageError

from db import Base, engine, SessionLocal
from core.config import settings
from core.logging import logger

from models.user import User  # noqa: F401
from models.game import Game, GameCategory  # noqa: F401
from models.game_session import GameSession  # noqa: F401
from models.player import Player  # noqa: F401
from models.score_entry import ScoreEntry  # noqa: F401
from models.user_player import UserPlayer  # noqa: F401
from services.catalog_service import seed_catalog

# ROUTES
from api.routers.games import router as games_router
from api.routers.admin import router as admin_router
from api.routers.sessions import router as sessions_router
from api.routers.players import router as players_router


app = FastAPI(title="Score Sheets API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def error_response(exc: ScoreSheetException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "type": exc.error_type}
    )


@app.exception_handler(ScoreSheetException)
async def scoresheet_exception_handler(request: Request, exc: ScoreSheetException):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.detail}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected ({exc.error_type}): {exc.detail}")
    return error_response(exc)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if any(error.get("type") == "json_invalid" for error in errors):
        logger.warning(f"{request.method} {request.url.path}: unparseable body")
        return error_response(ParseError())

    messages = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    logger.warning(f"{request.method} {request.url.path}: rejected payload {json.dumps(messages)}")
    return JSONResponse(
        status_code=422,
        content={"detail": messages, "type": "validation_error"}
    )


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception(f"{request.method} {request.url.path}: storage failure", exc_info=exc)
    return error_response(StorageError())


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Server error", "type": "server_error"}
    )


@app.on_event("startup")
async def startup_event():
    logger.info("Starting up application...")

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")

    db = SessionLocal()
    try:
        seed_catalog(db)
    finally:
        db.close()


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down application...")


@app.get("/health", tags=["Health"])
async def health():
    return {"status": "ok"}


app.include_router(games_router)
app.include_router(admin_router)
app.include_router(sessions_router)
app.include_router(players_router)
