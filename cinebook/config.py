import os

basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "cinebook-dev-secret")

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "CINEBOOK_DATABASE_URL", "sqlite:///" + os.path.join(basedir, "moviebooking.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Flask-Caching (simple). Production deployments should point this at Redis.
    CACHE_TYPE = os.environ.get("CACHE_TYPE", "SimpleCache")
    CACHE_DEFAULT_TIMEOUT = 600

    TMDB_API_KEY = os.environ.get("TMDB_API_KEY", "")
    TMDB_BASE_URL = "https://api.themoviedb.org/3"
    TMDB_IMAGE_BASE_URL = "https://image.tmdb.org/t/p/w500"
    TMDB_REQUEST_TIMEOUT = 6

    MAIL_SERVER = os.environ.get("MAIL_SERVER", "localhost")
    MAIL_PORT = int(os.environ.get("MAIL_PORT", 25))
    MAIL_USE_TLS = os.environ.get("MAIL_USE_TLS", "false").lower() == "true"
    MAIL_USERNAME = os.environ.get("MAIL_USERNAME")
    MAIL_PASSWORD = os.environ.get("MAIL_PASSWORD")
    MAIL_DEFAULT_SENDER = os.environ.get("MAIL_DEFAULT_SENDER", "no-reply@cinebook.local")

    # Receives refund-required alerts; alerts are skipped when unset.
    CINEBOOK_OPERATOR_EMAIL = os.environ.get("CINEBOOK_OPERATOR_EMAIL")

    CINEBOOK_PAYMENT_TIMEOUT = float(os.environ.get("CINEBOOK_PAYMENT_TIMEOUT", 5.0))
    CINEBOOK_BASE_PRICE = 10.0
    CINEBOOK_SERVICE_FEE = 1.5
    CINEBOOK_TAX_RATE = 0.0


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = "testing"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    CACHE_TYPE = "NullCache"
    MAIL_SUPPRESS_SEND = True
    CINEBOOK_OPERATOR_EMAIL = "ops@cinebook.local"
    CINEBOOK_PAYMENT_TIMEOUT = 1.0
    TMDB_API_KEY = "test-key"
