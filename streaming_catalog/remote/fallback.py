"""
Static catalog served when TMDB cannot be reached.
"""

from typing import Optional

from streaming_catalog.models import Movie

PLACEHOLDER_BASE = "https://via.placeholder.com"
PLACEHOLDER_IMAGE = f"{PLACEHOLDER_BASE}/500x750/0a0e27/ffffff?text=No+Image"
SAMPLE_VIDEO_BASE = "https://commondatastorage.googleapis.com/gtv-videos-bucket/sample"

DEMO_TRAILERS = {
    "Avengers: Endgame": f"{SAMPLE_VIDEO_BASE}/BigBuckBunny.mp4",
    "The Lion King": f"{SAMPLE_VIDEO_BASE}/ElephantsDream.mp4",
    "Frozen II": f"{SAMPLE_VIDEO_BASE}/ForBiggerBlazes.mp4",
    "Spider-Man: No Way Home": f"{SAMPLE_VIDEO_BASE}/ForBiggerEscapes.mp4",
    "Black Panther": f"{SAMPLE_VIDEO_BASE}/ForBiggerFun.mp4",
}
DEFAULT_TRAILER = DEMO_TRAILERS["Avengers: Endgame"]


def demo_trailer_url(title: str) -> str:
    # TMDB exposes trailers on /movie/{id}/videos only, one extra call per title
    return DEMO_TRAILERS.get(title, DEFAULT_TRAILER)


def _poster(label: str, size: str = "500x750") -> str:
    return f"{PLACEHOLDER_BASE}/{size}/0a0e27/ffffff?text={label}"


def _fallback_movie(
    movie_id: int,
    title: str,
    description: str,
    label: str,
    genres: tuple[str, ...],
    year: int,
    rating: str,
    trailer: Optional[str] = None,
) -> Movie:
    return Movie(
        id=str(movie_id),
        tmdb_id=movie_id,
        title=title,
        description=description,
        poster_url=_poster(label),
        backdrop_url=PLACEHOLDER_IMAGE,
        genres=genres,
        release_year=year,
        rating=rating,
        trailer_url=f"{SAMPLE_VIDEO_BASE}/{trailer}" if trailer else None,
    )


FALLBACK_DISNEY = (
    _fallback_movie(1, "Encanto", "A magical family story", "Encanto",
                    ("Animation", "Family"), 2021, "PG", "ForBiggerMeltdowns.mp4"),
    _fallback_movie(2, "Frozen II", "Elsa's adventure continues", "Frozen+II",
                    ("Animation", "Family"), 2019, "PG", "ForBiggerBlazes.mp4"),
    _fallback_movie(3, "Moana", "A Polynesian adventure", "Moana",
                    ("Animation", "Family"), 2016, "PG", "Sintel.mp4"),
    _fallback_movie(4, "Soul", "A musical journey of self-discovery", "Soul",
                    ("Animation", "Drama"), 2020, "PG"),
)

FALLBACK_MARVEL = (
    _fallback_movie(5, "Spider-Man: No Way Home", "The multiverse unleashed", "Spider-Man",
                    ("Action", "Adventure"), 2021, "PG-13", "ForBiggerEscapes.mp4"),
    _fallback_movie(6, "Black Panther", "Wakanda forever", "Black+Panther",
                    ("Action", "Adventure"), 2018, "PG-13", "ForBiggerFun.mp4"),
    _fallback_movie(7, "Avengers: Endgame", "The epic conclusion", "Avengers",
                    ("Action", "Adventure"), 2019, "PG-13", "BigBuckBunny.mp4"),
    _fallback_movie(8, "Iron Man", "The beginning of the MCU", "Iron+Man",
                    ("Action", "Adventure"), 2008, "PG-13", "ForBiggerJoyrides.mp4"),
)

FALLBACK_FEATURED = Movie(
    id="featured-1",
    tmdb_id=123,
    title="The Little Mermaid",
    description=(
        "A young mermaid dreams of life on land in this beloved Disney classic "
        "reimagined for a new generation."
    ),
    poster_url=_poster("The+Little+Mermaid"),
    backdrop_url=_poster("The+Little+Mermaid", size="1280x720"),
    genres=("Animation", "Family", "Fantasy"),
    release_year=2023,
    rating="PG",
    trailer_url=f"{SAMPLE_VIDEO_BASE}/ElephantsDream.mp4",
)


def fallback_disney() -> list[Movie]:
    return list(FALLBACK_DISNEY)


def fallback_marvel() -> list[Movie]:
    return list(FALLBACK_MARVEL)
