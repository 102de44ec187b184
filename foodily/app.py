from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

from .analytics.aggregator import compute_analytics
from .analytics.store import get_events
from .auth.dependencies import require_admin, require_user
from .auth.models import LoginRequest, SignupRequest
from .auth.users import authenticate, register
from .chat.routes import router as chat_router
from .community.routes import router as community_router
from .config import DEFAULT_APP_CONFIG
from .exceptions import FoodilyError
from .insights.routes import router as insights_router
from .journal.routes import router as journal_router
from .llm.cache import get_cache_stats
from .profile.bootstrap import initialize_user_data
from .profile.routes import router as profile_router
from .profile.service import touch_last_login
from .search.routes import router as search_router
from .storage.images import DEFAULT_MEDIA_CONFIG

logging.basicConfig(level=DEFAULT_APP_CONFIG.log_level, format=DEFAULT_APP_CONFIG.log_format)
logger = logging.getLogger(__name__)

app = FastAPI(title=DEFAULT_APP_CONFIG.title, version=DEFAULT_APP_CONFIG.version)
app.add_middleware(SessionMiddleware, secret_key=DEFAULT_APP_CONFIG.session_secret)


@app.exception_handler(FoodilyError)
def foodily_error_handler(request: Request, exc: FoodilyError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc)
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


# ── Auth endpoints ───────────────────────────────────────────────────────


def _start_session(request: Request, user: dict) -> dict:
    request.session.clear()
    request.session["user"] = user
    bootstrap = initialize_user_data(user["uid"], user.get("email", ""), user.get("display_name"))
    if bootstrap["already_exists"]:
        touch_last_login(user["uid"])
    return bootstrap


@app.post("/auth/signup", status_code=status.HTTP_201_CREATED)
def signup(body: SignupRequest, request: Request) -> dict:
    user = register(body.username, body.password, body.email, body.display_name)
    _start_session(request, user)
    return {"status": "ok", "user": user}


@app.post("/auth/login")
def login(body: LoginRequest, request: Request) -> dict:
    user = authenticate(body.username, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    bootstrap = _start_session(request, user)
    return {"status": "ok", "user": user, "new_account": not bootstrap["already_exists"]}


@app.post("/auth/logout")
def logout(request: Request) -> dict:
    request.session.clear()
    return {"status": "logged_out"}


@app.get("/auth/me")
def auth_me(user: dict = Depends(require_user)) -> dict:
    return user


# ── Feature routers ──────────────────────────────────────────────────────


app.include_router(profile_router)
app.include_router(search_router)
app.include_router(chat_router)
app.include_router(journal_router)
app.include_router(community_router)
app.include_router(insights_router)


# ── Admin endpoints ──────────────────────────────────────────────────────


@app.get("/analytics")
def analytics(user: dict = Depends(require_admin)) -> dict:
    return compute_analytics(get_events())


@app.get("/cache/stats")
def cache_stats(user: dict = Depends(require_admin)) -> dict:
    return get_cache_stats()


# ── Media ────────────────────────────────────────────────────────────────


app.mount(
    DEFAULT_MEDIA_CONFIG.url_prefix,
    StaticFiles(directory=str(DEFAULT_MEDIA_CONFIG.root), check_dir=False),
    name="media",
)
