import re
from typing import Callable

from rapidfuzz import distance, process
from unidecode import unidecode

from streaming_catalog.logger import logger
from streaming_catalog.models import Movie


def _clean_string(string: str) -> str:
    string = unidecode(string).lower()
    return re.sub(r"[^\x00-\x7F]", "", string)


def get_searcher(movies: tuple[Movie, ...]) -> Callable[..., list[Movie]]:
    """Build a title searcher over `movies`. Callers rebuild it for every snapshot."""
    by_id = {}
    for movie in movies:
        by_id.setdefault(movie.id, movie)
    ids_2_clean_titles = {idx: _clean_string(movie.title) for idx, movie in by_id.items()}

    def search(query: str, limit: int = 10) -> list[Movie]:
        if len(query.strip()) == 0:
            raise ValueError("search query is empty")

        query = _clean_string(query)
        # https://maxbachmann.github.io/RapidFuzz/Usage/distance/JaroWinkler.html
        top_matches = process.extract(
            query,
            ids_2_clean_titles,
            limit=limit,
            scorer=distance.JaroWinkler.normalized_distance,
        )
        logger.debug(top_matches)
        return [by_id[movie_id] for _, _, movie_id in top_matches]

    return search
