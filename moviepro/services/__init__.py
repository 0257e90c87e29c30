"""Service layer: TMDB access, image encoding, mapping and imports."""
