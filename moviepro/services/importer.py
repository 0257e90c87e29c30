"""Import workflow tying the TMDB client, mapper and repository together."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..config import Settings
from ..exceptions import DuplicateMovieError, MappingError
from ..models import DomainMovie, StoredMovie
from ..payloads import ActorDetail, MovieSummary
from ..repository import MovieRepository
from .images import EncodedImage, ImageEncoder
from .mapping import MappingResult, TMDBMappingService
from .tmdb import MovieCategory, TMDBClient

logger = logging.getLogger(__name__)

ImageUpload = tuple[bytes, str | None]


@dataclass(slots=True)
class ImportOutcome:
    """Result of importing a TMDB movie into the local library."""

    movie: StoredMovie
    created: bool


class MovieImportService:
    """Coordinates remote lookups, mapping and persistence."""

    def __init__(
        self,
        settings: Settings,
        tmdb_client: TMDBClient,
        mapping_service: TMDBMappingService,
        repository: MovieRepository,
        image_encoder: ImageEncoder | None = None,
    ):
        self._settings = settings
        self._tmdb = tmdb_client
        self._mapper = mapping_service
        self._repository = repository
        self._images = image_encoder

    @property
    def repository(self) -> MovieRepository:
        return self._repository

    async def import_movie(self, tmdb_id: int) -> ImportOutcome:
        """Import ``tmdb_id`` unless it already exists locally.

        New movies are linked to the default collection. Mapping failures are
        logged and re-raised as :class:`MappingError`.
        """

        existing = await self._repository.get_by_tmdb_id(tmdb_id)
        if existing is not None:
            logger.info("TMDB movie %s already imported as %s", tmdb_id, existing.id)
            return ImportOutcome(movie=existing, created=False)

        detail = await self._tmdb.movie_detail(tmdb_id)
        try:
            mapped = await self._mapper.map_movie_detail(detail)
        except MappingError as exc:
            logger.warning(
                "Import of TMDB movie %s failed (%s): %s", tmdb_id, exc.kind, exc
            )
            raise

        try:
            stored = await self._repository.save(mapped)
        except DuplicateMovieError:
            # A concurrent import stored the same TMDB id first.
            existing = await self._repository.get_by_tmdb_id(tmdb_id)
            if existing is None:
                raise
            logger.info("TMDB movie %s was imported concurrently as %s", tmdb_id, existing.id)
            return ImportOutcome(movie=existing, created=False)
        await self._repository.link_to_named_collection(
            stored.id, self._settings.default_collection_name
        )
        logger.info("Imported TMDB movie %s as %s", tmdb_id, stored.id)
        return ImportOutcome(movie=stored, created=True)

    async def preview_movie(self, tmdb_id: int) -> MappingResult:
        """Map a remote movie without persisting it."""

        detail = await self._tmdb.movie_detail(tmdb_id)
        return await self._mapper.try_map_movie_detail(detail)

    async def actor_detail(self, person_id: int) -> ActorDetail:
        actor = await self._tmdb.actor_detail(person_id)
        return self._mapper.map_actor_detail(actor)

    async def movie_list(self, category: MovieCategory, count: int = 20) -> list[MovieSummary]:
        return await self._tmdb.movie_list(category, count)

    async def create_movie(
        self,
        movie: DomainMovie,
        *,
        collection_id: int,
        poster: ImageUpload | None = None,
        backdrop: ImageUpload | None = None,
    ) -> StoredMovie:
        """Store a locally authored movie and link it to ``collection_id``.

        Unknown collections raise ``KeyError`` before anything is written.
        """

        if await self._repository.get_collection(collection_id) is None:
            raise KeyError(f"Collection {collection_id} not found")
        encoded_poster = await self._encode_upload(poster)
        encoded_backdrop = await self._encode_upload(backdrop)
        images: dict[str, object] = {}
        if encoded_poster is not None:
            images.update(poster=encoded_poster.data, poster_type=encoded_poster.content_type)
        if encoded_backdrop is not None:
            images.update(
                backdrop=encoded_backdrop.data, backdrop_type=encoded_backdrop.content_type
            )

        stored = await self._repository.save(movie.model_copy(update=images))
        await self._repository.link_to_collection(stored.id, collection_id)
        logger.info("Created local movie %s in collection %s", stored.id, collection_id)
        return stored

    async def edit_movie(
        self,
        movie_id: int,
        fields: dict[str, object],
        *,
        poster: ImageUpload | None = None,
        backdrop: ImageUpload | None = None,
    ) -> StoredMovie | None:
        """Update a local movie's details and optionally its images."""

        updated = await self._repository.update_movie(movie_id, **fields)
        if updated is None or (poster is None and backdrop is None):
            return updated
        return await self.replace_images(movie_id, poster=poster, backdrop=backdrop)

    async def replace_images(
        self,
        movie_id: int,
        *,
        poster: ImageUpload | None = None,
        backdrop: ImageUpload | None = None,
    ) -> StoredMovie | None:
        """Store uploaded poster/backdrop bytes for a local movie."""

        encoded_poster = await self._encode_upload(poster)
        encoded_backdrop = await self._encode_upload(backdrop)
        return await self._repository.update_images(
            movie_id, poster=encoded_poster, backdrop=encoded_backdrop
        )

    async def _encode_upload(self, upload: ImageUpload | None) -> EncodedImage | None:
        if upload is None:
            return None
        if self._images is None:
            raise RuntimeError("Image uploads require an ImageEncoder")
        return await self._images.encode(*upload)

    async def ensure_default_collection(self) -> None:
        """Create the default collection on startup when it is missing."""

        names = {collection.name for collection in await self._repository.list_collections()}
        if self._settings.default_collection_name in names:
            return
        await self._repository.create_collection(
            self._settings.default_collection_name,
            self._settings.default_collection_description,
        )
