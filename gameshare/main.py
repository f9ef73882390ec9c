# gameshare/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import CORS_ORIGINS, setup_logging
from .db import Base, engine
from .routers import auth, comment, game, like, tag
from .schemas import response_request

setup_logging()
logger = logging.getLogger(__name__)

# ==========================================================
#  FastAPI Application
# ==========================================================
app = FastAPI(
    title="GameShare API",
    version="1.0.0",
    description=(
        "Game sharing platform: browse, like, comment and play small browser "
        "games, with tag-based recommendations."
    ),
)

# ==========================================================
#  CORS Middleware
# ==========================================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# ==========================================================
#  Database init
# ==========================================================
Base.metadata.create_all(bind=engine)

# ==========================================================
#  Routers
# ==========================================================
app.include_router(auth.router)
app.include_router(game.router)
app.include_router(like.router)
app.include_router(comment.router)
app.include_router(tag.router)

# ==========================================================
#  Errors
# ==========================================================
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=response_request("faild", str(exc.detail or "Request failed"), error=type(exc).__name__),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content=response_request(
            "faild",
            "Validation error",
            data=jsonable_encoder(exc.errors()),
            error=type(exc).__name__,
        ),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled exception on %s %s: %s", request.method, request.url.path, exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content=response_request("faild", "Internal server error", error=type(exc).__name__),
    )

# ==========================================================
#  Health check
# ==========================================================
@app.get("/health")
def health():
    return {"status": "ok", "service": "GameShare API"}
