import requests

from cinebook.services.catalog import CatalogStore
from cinebook.utils import tmdb


class FakeResponse:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.exceptions.HTTPError(f"{self.status} error")

    def json(self):
        return self.payload


PAYLOADS = {
    "genre/movie/list": {"genres": [{"id": 28, "name": "Action"}, {"id": 18, "name": "Drama"}]},
    "movie/now_playing": {"results": [
        {"id": 1, "title": "Heat Wave", "genre_ids": [28], "vote_average": 7.345,
         "overview": "Cops and robbers.", "poster_path": "/heat.jpg"},
        {"id": 2, "title": "Quiet Days", "genre_ids": [], "vote_average": 6.0,
         "overview": "", "poster_path": None},
    ]},
    "movie/1": {"runtime": 125},
    "movie/2": {"runtime": None},
}


def fake_get(url, params=None, timeout=None):
    endpoint = url.split("/3/", 1)[1]
    assert params["api_key"] == "test-key"
    return FakeResponse(PAYLOADS[endpoint])


def test_import_now_playing(app, monkeypatch):
    monkeypatch.setattr(tmdb.requests, "get", fake_get)

    added = tmdb.import_now_playing(limit=10)

    assert [m.title for m in added] == ["Heat Wave", "Quiet Days"]
    heat = CatalogStore().find_movie_by_title("Heat Wave")
    assert heat.genre == "Action"
    assert heat.duration == "2h 5m"
    assert heat.rating == "7.3"
    assert heat.poster_path == "https://image.tmdb.org/t/p/w500/heat.jpg"
    quiet = CatalogStore().find_movie_by_title("Quiet Days")
    assert quiet.genre == "General"
    assert quiet.duration == "120 min"


def test_import_skips_known_titles(app, monkeypatch):
    monkeypatch.setattr(tmdb.requests, "get", fake_get)
    CatalogStore().add_movie("Heat Wave")

    added = tmdb.import_now_playing()

    assert [m.title for m in added] == ["Quiet Days"]


def test_tmdb_errors_yield_nothing(app, monkeypatch):
    def failing_get(url, params=None, timeout=None):
        return FakeResponse({}, status=503)

    monkeypatch.setattr(tmdb.requests, "get", failing_get)
    assert tmdb.fetch_from_tmdb("movie/now_playing") is None
    assert tmdb.import_now_playing() == []


def test_cli_init_db(app):
    result = app.test_cli_runner().invoke(args=["init-db"])
    assert "Database tables created." in result.output
