import pytest

from cinebook.models import User
from cinebook.services.builders import build_booking, build_movie, normalize_rating
from cinebook.services.catalog import CatalogStore
from cinebook.services.errors import InvalidRequest, RegistrationError
from cinebook.services.identity import IdentityStore
from cinebook.services.session import UserSession


@pytest.fixture
def identity(app):
    return IdentityStore()


@pytest.fixture
def catalog(app):
    return CatalogStore()


def test_register_hashes_password(identity, user):
    stored = User.query.filter_by(email="alice@example.com").one()
    assert stored.password_hash != "s3cret"
    assert stored.check_password("s3cret")


def test_lookup_by_email_and_username(identity, user):
    assert identity.find_user_by_email("ALICE@example.com ").id == user.id
    assert identity.find_user_by_username("alice").id == user.id
    assert identity.find_user_by_username("nobody") is None


def test_verify_credentials(identity, user):
    assert identity.verify_credentials("alice@example.com", "s3cret").id == user.id
    assert identity.verify_credentials("alice@example.com", "wrong") is None
    assert identity.verify_credentials("ghost@example.com", "s3cret") is None
    assert identity.verify_credentials("alice@example.com", "") is None


def test_duplicate_email_or_username_rejected(identity, user):
    with pytest.raises(RegistrationError):
        identity.register("Alice Two", "alice@example.com", "alice2", "pw")
    with pytest.raises(RegistrationError):
        identity.register("Alice Two", "alice2@example.com", "alice", "pw")
    assert User.query.count() == 1


def test_registration_requires_every_field(identity):
    with pytest.raises(InvalidRequest):
        identity.register("Carol", "carol@example.com", "", "pw")


def test_search_by_title_substring(catalog):
    catalog.add_movie("The Dark Knight", genre="Action")
    catalog.add_movie("Dark Waters", genre="Drama")
    catalog.add_movie("Up", genre="Comedy")
    assert [m.title for m in catalog.search_movies_by_title("dark")] == ["Dark Waters", "The Dark Knight"]
    assert catalog.search_movies_by_title("matrix") == []
    assert len(catalog.search_movies_by_title("")) == 3


def test_insert_and_find(catalog):
    movie_id = catalog.insert_movie(build_movie("Parasite", rating="8.5"))
    assert catalog.find_movie_by_id(movie_id).title == "Parasite"
    assert catalog.find_movie_by_id(movie_id + 100) is None
    assert catalog.find_movie_by_title("parasite").id == movie_id


def test_movie_defaults(app):
    movie = build_movie("  Mystery Film ")
    assert movie.title == "Mystery Film"
    assert movie.genre == "General"
    assert movie.duration == "120 min"
    assert movie.rating == "PG-13"
    assert movie.description == ""


def test_genre_description_only_when_missing(app):
    assert build_movie("Alien", genre="Horror").description.startswith("A terrifying horror")
    assert build_movie("Alien", genre="Horror", description="In space...").description == "In space..."


@pytest.mark.parametrize("title", ["", "   ", None])
def test_movie_title_required(app, title):
    with pytest.raises(InvalidRequest):
        build_movie(title)


def test_ratings(app):
    assert normalize_rating("7.5") == "7.5"
    assert normalize_rating(8) == "8.0"
    assert normalize_rating("family") == "G"
    assert normalize_rating("r") == "R"
    with pytest.raises(InvalidRequest):
        normalize_rating("11")
    with pytest.raises(InvalidRequest):
        normalize_rating("awesome")


def test_build_booking_validation(app):
    booking = build_booking(1, 2, ["A1", "B2"], 21.5)
    assert booking.seats == "A1, B2"
    with pytest.raises(InvalidRequest):
        build_booking(0, 2, ["A1"], 10)
    with pytest.raises(InvalidRequest):
        build_booking(1, None, ["A1"], 10)
    with pytest.raises(InvalidRequest):
        build_booking(1, 2, [], 10)


def test_switching_users_clears_checkout_state(user, other_user):
    session = UserSession().login(user)
    session.remember_checkout(object(), "paypal")
    session.add_active_booking(3)
    assert session.booking_status(3) == "Created"

    session.login(other_user)
    assert session.user_id == other_user.id
    assert session.pricing is None and session.payment_method is None
    assert session.booking_status(3) == "Not Started"


def test_logout_clears_session(user):
    session = UserSession(user)
    session.add_active_booking(1)
    session.logout()
    assert not session.is_authenticated
    assert session.active_bookings == {}
