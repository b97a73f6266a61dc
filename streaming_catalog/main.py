from datetime import datetime, timezone
from typing import Optional

import asyncpg
import uvicorn
from fastapi import FastAPI, Header, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from starlette import status
from starlette.responses import JSONResponse

from streaming_catalog.auth import CredentialError, CredentialErrorKind, CredentialStore
from streaming_catalog.cache import CatalogCache
from streaming_catalog.logger import logger
from streaming_catalog.lookup import CatalogLookup, CategoryNotFound
from streaming_catalog.remote.tmdb import TMDBClient
from streaming_catalog.settings import load_settings
from streaming_catalog.utils import timed

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

settings = load_settings()

app = FastAPI(title="streaming-catalog")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"{request.method} {request.url.path} crashed: {exc!r}")
    return JSONResponse({"error": "Internal server error"}, status_code=500)


class LoginParams(BaseModel):
    email: str = Field(pattern=EMAIL_PATTERN)
    password: str = Field(min_length=6)


class RegisterParams(LoginParams):
    name: str = Field(min_length=2)


@app.on_event("startup")
@timed
async def startup_event():
    if not settings.postgres_uri:
        raise RuntimeError("POSTGRES_URI not configured")
    app.state.pool = await asyncpg.create_pool(settings.postgres_uri)
    app.state.credentials = CredentialStore(app.state.pool, settings.token_secret)
    app.state.tmdb = TMDBClient(api_key=settings.tmdb_api_key)
    app.state.catalog_cache = CatalogCache(
        app.state.tmdb, ttl_millis=settings.catalog_ttl_seconds * 1000
    )
    app.state.lookup = CatalogLookup(app.state.catalog_cache)
    logger.info(f"catalog cache ttl is {settings.catalog_ttl_seconds} s")


@app.on_event("shutdown")
async def shutdown_event():
    await app.state.tmdb.close()
    await app.state.pool.close()


@app.get("/api/health")
async def health() -> JSONResponse:
    return JSONResponse(
        {
            "status": "OK",
            "message": "Streaming catalog API is running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    )


@app.get("/api/movies/featured")
@timed
async def featured_movie(request: Request) -> JSONResponse:
    lookup: CatalogLookup = request.app.state.lookup
    movie = await lookup.get_featured()
    if movie is None:
        return JSONResponse({"error": "No featured movie"}, status_code=404)
    return JSONResponse(movie.to_dict())


@app.get("/api/movies/categories")
@timed
async def movie_categories(request: Request) -> JSONResponse:
    lookup: CatalogLookup = request.app.state.lookup
    categories = await lookup.get_categories()
    return JSONResponse(
        {
            category.value: [movie.to_dict() for movie in movies]
            for category, movies in categories.items()
        }
    )


@app.get("/api/movies/category/{category}")
@timed
async def movies_by_category(request: Request, category: str) -> JSONResponse:
    lookup: CatalogLookup = request.app.state.lookup
    logger.info(f"fetching movies for category {category}")
    try:
        movies = await lookup.get_by_category_name(category)
    except CategoryNotFound:
        return JSONResponse({"error": "Category not found"}, status_code=404)
    return JSONResponse([movie.to_dict() for movie in movies])


@app.get("/api/movies/search")
@timed
async def search_movies(
    request: Request,
    q: str = "",
    limit: int = Query(ge=1, le=20, default=5),
) -> JSONResponse:
    lookup: CatalogLookup = request.app.state.lookup
    try:
        movies = await lookup.search(q, limit=limit)
    except ValueError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)
    return JSONResponse([movie.to_dict() for movie in movies])


@app.get("/api/movies")
@timed
async def all_movies(request: Request) -> JSONResponse:
    lookup: CatalogLookup = request.app.state.lookup
    movies = await lookup.get_all()
    return JSONResponse([movie.to_dict() for movie in movies])


def _credential_error_response(exc: CredentialError) -> JSONResponse:
    if exc.kind is CredentialErrorKind.CONFLICT:
        return JSONResponse({"error": exc.message}, status_code=status.HTTP_400_BAD_REQUEST)
    return JSONResponse({"error": exc.message}, status_code=status.HTTP_401_UNAUTHORIZED)


@app.post("/api/auth/login")
@timed
async def login(request: Request, body: LoginParams) -> JSONResponse:
    credentials: CredentialStore = request.app.state.credentials
    logger.info(f"login attempt for {body.email}")
    try:
        user = await credentials.verify_credentials(body.email, body.password)
    except CredentialError as exc:
        return _credential_error_response(exc)

    return JSONResponse({"token": credentials.issue_token(user), "user": user.to_dict()})


@app.post("/api/auth/register")
@timed
async def register(request: Request, body: RegisterParams) -> JSONResponse:
    credentials: CredentialStore = request.app.state.credentials
    logger.info(f"registration attempt for {body.email}")
    try:
        user = await credentials.create_account(body.email, body.password, body.name)
    except CredentialError as exc:
        return _credential_error_response(exc)

    return JSONResponse(
        {"token": credentials.issue_token(user), "user": user.to_dict()},
        status_code=status.HTTP_201_CREATED,
    )


@app.get("/api/auth/me")
async def current_user(request: Request, authorization: Optional[str] = Header(default=None)):
    credentials: CredentialStore = request.app.state.credentials
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        return JSONResponse({"error": "Missing bearer token"}, status_code=401)
    try:
        claims = credentials.verify_token(token)
    except CredentialError as exc:
        return _credential_error_response(exc)
    return JSONResponse({"user": claims})


def run() -> None:
    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
