"""End-to-end import workflow tests with faked TMDB and image hosts."""

from __future__ import annotations

import asyncio
from datetime import date

import httpx
import pytest

from moviepro.config import Settings
from moviepro.database import Database
from moviepro.exceptions import DuplicateMovieError, MappingError, ParseError
from moviepro.models import DomainMovie, MovieRating
from moviepro.repository import MovieRepository
from moviepro.services.images import ImageEncoder
from moviepro.services.importer import MovieImportService
from moviepro.services.mapping import TMDBMappingService
from moviepro.services.tmdb import TMDBClient


def build_settings() -> Settings:
    return Settings(
        _env_file=None,
        TMDB_API_KEY="tmdb-key",
        DEFAULT_COLLECTION_NAME="Everything",
    )  # type: ignore[call-arg]


def tmdb_handler(payloads: dict[str, dict], calls: list[str]):
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        if request.url.host == "image.tmdb.org":
            return httpx.Response(200, content=b"img", headers={"content-type": "image/jpeg"})
        payload = payloads.get(request.url.path)
        if payload is None:
            return httpx.Response(404, json={"status_message": "missing"})
        return httpx.Response(200, json=payload)

    return handler


async def _build_service(tmp_path, payloads, calls):
    settings = build_settings()
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'import.db'}")
    await database.create_all()
    transport = httpx.MockTransport(tmdb_handler(payloads, calls))
    api_client = httpx.AsyncClient(transport=transport, base_url="https://api.example.com")
    image_client = httpx.AsyncClient(transport=transport)
    encoder = ImageEncoder(image_client)
    service = MovieImportService(
        settings,
        TMDBClient(settings, api_client),
        TMDBMappingService(settings, encoder),
        MovieRepository(database.session_factory),
        encoder,
    )
    return service, database, (api_client, image_client)


async def _close(database, clients) -> None:
    for client in clients:
        await client.aclose()
    await database.dispose()


@pytest.mark.anyio("asyncio")
async def test_import_saves_and_links_default_collection(tmp_path, movie_payload) -> None:
    calls: list[str] = []
    service, database, clients = await _build_service(
        tmp_path, {"/movie/603": movie_payload()}, calls
    )
    try:
        first = await service.import_movie(603)
        second = await service.import_movie(603)
        collections = await service.repository.list_collections()
        in_default = await service.repository.list_movies(collection_id=collections[0].id)
    finally:
        await _close(database, clients)

    assert first.created is True
    assert first.movie.poster is not None
    assert second.created is False
    assert second.movie.id == first.movie.id
    assert calls.count("/movie/603") == 1
    assert [collection.name for collection in collections] == ["Everything"]
    assert [movie.id for movie in in_default] == [first.movie.id]


@pytest.mark.anyio("asyncio")
async def test_import_propagates_mapping_errors(tmp_path, movie_payload) -> None:
    calls: list[str] = []
    service, database, clients = await _build_service(
        tmp_path, {"/movie/603": movie_payload(release_date="")}, calls
    )
    try:
        with pytest.raises(MappingError) as excinfo:
            await service.import_movie(603)
        movies = await service.repository.list_movies()
    finally:
        await _close(database, clients)

    assert isinstance(excinfo.value.cause, ParseError)
    assert movies == []


@pytest.mark.anyio("asyncio")
async def test_preview_and_actor_detail(tmp_path, movie_payload) -> None:
    calls: list[str] = []
    payloads = {
        "/movie/603": movie_payload(),
        "/person/6384": {
            "id": 6384,
            "name": "Keanu Reeves",
            "biography": "",
            "birthday": "1964-09-02",
            "place_of_birth": "Beirut, Lebanon",
            "profile_path": None,
        },
    }
    service, database, clients = await _build_service(tmp_path, payloads, calls)
    try:
        preview = await service.preview_movie(603)
        actor = await service.actor_detail(6384)
        stored = await service.repository.list_movies()
    finally:
        await _close(database, clients)

    assert preview.ok
    assert preview.unwrap().title == "The Matrix"
    assert stored == []
    assert actor.birthday == "Sep 02, 1964"
    assert actor.biography == "Not Available"
    assert actor.profile_path == "/images/default_cast_image.png"


@pytest.mark.anyio("asyncio")
async def test_replace_images_and_default_collection(tmp_path, movie_payload) -> None:
    calls: list[str] = []
    service, database, clients = await _build_service(
        tmp_path, {"/movie/603": movie_payload()}, calls
    )
    try:
        await service.ensure_default_collection()
        await service.ensure_default_collection()
        outcome = await service.import_movie(603)
        updated = await service.replace_images(
            outcome.movie.id, poster=(b"new", "image/webp")
        )
        collections = await service.repository.list_collections()
    finally:
        await _close(database, clients)

    assert updated is not None
    assert updated.poster == "data:image/webp;base64,bmV3"
    assert [collection.name for collection in collections] == ["Everything"]


@pytest.mark.anyio("asyncio")
async def test_concurrent_imports_store_one_movie(tmp_path, movie_payload) -> None:
    calls: list[str] = []
    service, database, clients = await _build_service(
        tmp_path, {"/movie/603": movie_payload()}, calls
    )
    try:
        await service.ensure_default_collection()
        outcomes = await asyncio.gather(
            service.import_movie(603), service.import_movie(603)
        )
        movies = await service.repository.list_movies()
    finally:
        await _close(database, clients)

    assert sorted(outcome.created for outcome in outcomes) == [False, True]
    assert outcomes[0].movie.id == outcomes[1].movie.id
    assert [movie.movie_id for movie in movies] == [603]


def _local_movie(movie_id: int = 900001) -> DomainMovie:
    return DomainMovie(
        movie_id=movie_id,
        title="Home Movie",
        overview="Shot on a phone.",
        runtime=12,
        release_date=date(2021, 7, 4),
        rating=MovieRating.G,
    )


@pytest.mark.anyio("asyncio")
async def test_create_movie_encodes_uploads_and_links_collection(tmp_path) -> None:
    service, database, clients = await _build_service(tmp_path, {}, [])
    try:
        collection = await service.repository.create_collection("Family")
        stored = await service.create_movie(
            _local_movie(),
            collection_id=collection.id,
            poster=(b"abc", "image/png"),
        )
        in_collection = await service.repository.list_movies(collection_id=collection.id)
        with pytest.raises(KeyError):
            await service.create_movie(_local_movie(900002), collection_id=collection.id + 1)
        with pytest.raises(DuplicateMovieError):
            await service.create_movie(_local_movie(), collection_id=collection.id)
        movies = await service.repository.list_movies()
    finally:
        await _close(database, clients)

    assert stored.title == "Home Movie"
    assert stored.poster == "data:image/png;base64,YWJj"
    assert stored.backdrop is None
    assert [movie.id for movie in in_collection] == [stored.id]
    assert [movie.movie_id for movie in movies] == [900001]


@pytest.mark.anyio("asyncio")
async def test_edit_movie_updates_details_and_images(tmp_path) -> None:
    service, database, clients = await _build_service(tmp_path, {}, [])
    try:
        collection = await service.repository.create_collection("Family")
        stored = await service.create_movie(_local_movie(), collection_id=collection.id)
        details_only = await service.edit_movie(stored.id, {"title": "Home Movie II"})
        with_image = await service.edit_movie(
            stored.id,
            {"rating": MovieRating.PG},
            backdrop=(b"new", "image/webp"),
        )
        missing = await service.edit_movie(stored.id + 100, {"title": "Ghost"})
    finally:
        await _close(database, clients)

    assert details_only is not None
    assert details_only.title == "Home Movie II"
    assert details_only.backdrop is None
    assert with_image is not None
    assert with_image.title == "Home Movie II"
    assert with_image.rating is MovieRating.PG
    assert with_image.backdrop == "data:image/webp;base64,bmV3"
    assert missing is None
