# cinebook/utils/tmdb.py
import logging

import requests
from flask import current_app

from cinebook.extensions import cache
from cinebook.services.catalog import CatalogStore

logger = logging.getLogger(__name__)


@cache.memoize(timeout=600)
def fetch_from_tmdb(endpoint, params=None):
    if params is None:
        params = {}
    params = dict(params)
    params['api_key'] = current_app.config.get("TMDB_API_KEY")
    base = current_app.config.get("TMDB_BASE_URL", "https://api.themoviedb.org/3")
    url = f"{base}/{endpoint.lstrip('/')}"
    try:
        resp = requests.get(url, params=params, timeout=current_app.config.get("TMDB_REQUEST_TIMEOUT", 6))
        resp.raise_for_status()
        return resp.json()
    except requests.exceptions.RequestException as e:
        logger.warning("TMDB request failed: endpoint=%s -> %s", endpoint, e)
        return None


@cache.memoize(timeout=7200)
def fetch_movies_list(endpoint, params=None):
    data = fetch_from_tmdb(endpoint, params=params)
    if not data:
        return []
    return data.get('results', [])


@cache.memoize(timeout=7200)
def fetch_genres():
    data = fetch_from_tmdb("genre/movie/list", params={"language": "en-US"})
    if not data:
        return {}
    return {g['id']: g['name'] for g in data.get('genres', [])}


def fetch_runtime(movie_id):
    """Runtime as "2h 5m"; None when TMDB does not know it."""
    data = fetch_from_tmdb(f"movie/{movie_id}", params={'language': 'en-US'})
    runtime = data.get('runtime') if data else None
    if not runtime:
        return None
    return f"{int(runtime) // 60}h {int(runtime) % 60}m"


def tmdb_image_base():
    try:
        return current_app.config.get("TMDB_IMAGE_BASE_URL", "")
    except RuntimeError:
        return ""


def import_now_playing(limit=20, catalog=None):
    """Add now-playing TMDB movies to the catalog, skipping known titles."""
    catalog = catalog or CatalogStore()
    genre_map = fetch_genres()
    poster_base = tmdb_image_base()
    added = []
    for item in fetch_movies_list("movie/now_playing", {"page": 1, "language": "en-US"})[:limit]:
        title = item.get("title")
        if not title or catalog.find_movie_by_title(title):
            continue
        genre_ids = item.get("genre_ids") or []
        poster_path = item.get("poster_path")
        movie = catalog.add_movie(
            title=title,
            genre=genre_map.get(genre_ids[0]) if genre_ids else None,
            duration=fetch_runtime(item.get("id")),
            rating=item.get("vote_average"),
            description=item.get("overview"),
            poster_path=f"{poster_base}{poster_path}" if poster_base and poster_path else None,
        )
        added.append(movie)
    return added
