"""Entry point for the FastAPI-powered movie library."""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from datetime import date
from typing import Any

import httpx
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import Base64Bytes, BaseModel, Field

from .config import settings
from .database import Database
from .exceptions import (
    DuplicateMovieError,
    EncodingError,
    MappingError,
    MovieNotFoundError,
    ParseError,
    RemoteMovieError,
)
from .models import DomainMovie, MovieRating
from .repository import MovieRepository
from .services.images import ImageEncoder
from .services.importer import ImageUpload, MovieImportService
from .services.mapping import TMDBMappingService
from .services.tmdb import MOVIE_CATEGORIES, TMDBClient

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app: FastAPI


class CollectionCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    description: str | None = None


class ImageBody(BaseModel):
    data: Base64Bytes
    content_type: str | None = None

    def as_upload(self) -> ImageUpload:
        return (self.data, self.content_type)


class MovieCreate(BaseModel):
    movie_id: int
    title: str = Field(min_length=1, max_length=255)
    tagline: str | None = None
    overview: str | None = None
    runtime: int | None = Field(default=None, ge=0)
    release_date: date
    rating: MovieRating = MovieRating.NR
    vote_average: float = Field(default=0.0, ge=0.0, le=10.0)
    trailer_url: str | None = None
    collection_id: int
    poster: ImageBody | None = None
    backdrop: ImageBody | None = None


class MovieUpdate(BaseModel):
    """Partial edit; only the fields present in the request are written."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    tagline: str | None = None
    overview: str | None = None
    runtime: int | None = Field(default=None, ge=0)
    release_date: date | None = None
    rating: MovieRating | None = None
    vote_average: float | None = Field(default=None, ge=0.0, le=10.0)
    trailer_url: str | None = None
    poster: ImageBody | None = None
    backdrop: ImageBody | None = None


def _upload(body: ImageBody | None) -> ImageUpload | None:
    return body.as_upload() if body is not None else None


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    exit_stack = AsyncExitStack()
    tmdb_http = await exit_stack.enter_async_context(
        httpx.AsyncClient(
            base_url=str(settings.tmdb_api_url),
            timeout=httpx.Timeout(settings.tmdb_timeout_seconds, connect=10.0),
        )
    )
    image_http = await exit_stack.enter_async_context(
        httpx.AsyncClient(
            timeout=httpx.Timeout(settings.image_timeout_seconds, connect=10.0),
            follow_redirects=True,
        )
    )
    database = Database(settings.database_url)
    await database.create_all()

    image_encoder = ImageEncoder(image_http)
    import_service = MovieImportService(
        settings,
        TMDBClient(settings, tmdb_http),
        TMDBMappingService(settings, image_encoder),
        MovieRepository(database.session_factory),
        image_encoder,
    )
    await import_service.ensure_default_collection()

    fastapi_app.state.import_service = import_service
    fastapi_app.state.database = database

    try:
        yield
    finally:  # pragma: no cover - teardown path exercised at runtime
        await database.dispose()
        await exit_stack.aclose()


def create_app() -> FastAPI:
    fastapi_app = FastAPI(
        title=settings.app_name,
        description="Movie library importing metadata from TMDB",
        version="1.0.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    register_routes(fastapi_app)
    return fastapi_app


def get_import_service(app: FastAPI) -> MovieImportService:
    service = getattr(app.state, "import_service", None)
    if not isinstance(service, MovieImportService):
        raise RuntimeError("Import service not initialised")
    return service


def _mapping_error_detail(exc: MappingError) -> dict[str, Any]:
    return {"error": exc.kind, "message": str(exc), "movieId": exc.movie_id}


def register_routes(fastapi_app: FastAPI) -> None:
    @fastapi_app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.post("/movies/import/{tmdb_id}")
    async def import_movie(tmdb_id: int) -> JSONResponse:
        service = get_import_service(fastapi_app)
        try:
            outcome = await service.import_movie(tmdb_id)
        except MovieNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except MappingError as exc:
            raise HTTPException(status_code=502, detail=_mapping_error_detail(exc)) from exc
        except RemoteMovieError as exc:
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        return JSONResponse(
            {"created": outcome.created, "movie": outcome.movie.model_dump(mode="json")},
            status_code=201 if outcome.created else 200,
        )

    @fastapi_app.get("/movies")
    async def library(collection_id: int | None = None) -> list[dict[str, Any]]:
        service = get_import_service(fastapi_app)
        movies = await service.repository.list_movies(collection_id=collection_id)
        return [movie.model_dump(mode="json") for movie in movies]

    @fastapi_app.get("/movies/{movie_id}")
    async def movie_details(movie_id: int) -> dict[str, Any]:
        service = get_import_service(fastapi_app)
        movie = await service.repository.get_movie(movie_id)
        if movie is None:
            raise HTTPException(status_code=404, detail=f"Movie {movie_id} not found")
        return movie.model_dump(mode="json")

    @fastapi_app.post("/movies", status_code=201)
    async def create_movie(payload: MovieCreate) -> dict[str, Any]:
        service = get_import_service(fastapi_app)
        movie = DomainMovie(
            **payload.model_dump(exclude={"collection_id", "poster", "backdrop"})
        )
        try:
            stored = await service.create_movie(
                movie,
                collection_id=payload.collection_id,
                poster=_upload(payload.poster),
                backdrop=_upload(payload.backdrop),
            )
        except KeyError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except DuplicateMovieError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        except EncodingError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return stored.model_dump(mode="json")

    @fastapi_app.put("/movies/{movie_id}")
    async def edit_movie(movie_id: int, payload: MovieUpdate) -> dict[str, Any]:
        service = get_import_service(fastapi_app)
        fields = payload.model_dump(exclude_unset=True, exclude={"poster", "backdrop"})
        try:
            movie = await service.edit_movie(
                movie_id,
                fields,
                poster=_upload(payload.poster),
                backdrop=_upload(payload.backdrop),
            )
        except (ValueError, EncodingError) as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        if movie is None:
            raise HTTPException(status_code=404, detail=f"Movie {movie_id} not found")
        return movie.model_dump(mode="json")

    @fastapi_app.put("/movies/{movie_id}/{image_kind}")
    async def upload_image(movie_id: int, image_kind: str, request: Request) -> dict[str, Any]:
        if image_kind not in {"poster", "backdrop"}:
            raise HTTPException(status_code=404, detail="Unknown image kind")
        data = await request.body()
        if not data:
            raise HTTPException(status_code=400, detail="Image body is empty")
        content_type = request.headers.get("content-type")
        service = get_import_service(fastapi_app)
        try:
            movie = await service.replace_images(
                movie_id, **{image_kind: (data, content_type)}
            )
        except EncodingError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        if movie is None:
            raise HTTPException(status_code=404, detail=f"Movie {movie_id} not found")
        return movie.model_dump(mode="json")

    @fastapi_app.delete("/movies/{movie_id}")
    async def delete_movie(movie_id: int) -> dict[str, bool]:
        service = get_import_service(fastapi_app)
        if not await service.repository.delete_movie(movie_id):
            raise HTTPException(status_code=404, detail=f"Movie {movie_id} not found")
        return {"deleted": True}

    @fastapi_app.get("/tmdb/movies/{tmdb_id}")
    async def preview_movie(tmdb_id: int) -> dict[str, Any]:
        service = get_import_service(fastapi_app)
        try:
            result = await service.preview_movie(tmdb_id)
        except MovieNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except RemoteMovieError as exc:
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        if result.error is not None:
            raise HTTPException(status_code=502, detail=_mapping_error_detail(result.error))
        return result.unwrap().to_payload()

    @fastapi_app.get("/tmdb/lists/{category}")
    async def movie_list(category: str, count: int = 20) -> list[dict[str, Any]]:
        if category not in MOVIE_CATEGORIES:
            raise HTTPException(status_code=400, detail="Unsupported movie category")
        if not 1 <= count <= 100:
            raise HTTPException(status_code=400, detail="count must be between 1 and 100")
        service = get_import_service(fastapi_app)
        try:
            movies = await service.movie_list(category, count)  # type: ignore[arg-type]
        except RemoteMovieError as exc:
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        return [movie.model_dump(mode="json") for movie in movies]

    @fastapi_app.get("/actors/{person_id}")
    async def actor_detail(person_id: int) -> dict[str, Any]:
        service = get_import_service(fastapi_app)
        try:
            actor = await service.actor_detail(person_id)
        except MovieNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except (RemoteMovieError, ParseError) as exc:
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        return actor.model_dump(mode="json")

    @fastapi_app.get("/collections")
    async def collections() -> list[dict[str, Any]]:
        service = get_import_service(fastapi_app)
        return [
            collection.model_dump(mode="json")
            for collection in await service.repository.list_collections()
        ]

    @fastapi_app.post("/collections", status_code=201)
    async def create_collection(payload: CollectionCreate) -> dict[str, Any]:
        service = get_import_service(fastapi_app)
        try:
            collection = await service.repository.create_collection(
                payload.name, payload.description
            )
        except ValueError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return collection.model_dump(mode="json")

    @fastapi_app.post("/collections/{collection_id}/movies/{movie_id}")
    async def add_to_collection(collection_id: int, movie_id: int) -> dict[str, bool]:
        service = get_import_service(fastapi_app)
        try:
            linked = await service.repository.link_to_collection(movie_id, collection_id)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return {"linked": linked}


app = create_app()
