import time

import pytest

from cinebook import create_app
from cinebook.config import TestingConfig
from cinebook.extensions import db
from cinebook.services.catalog import CatalogStore
from cinebook.services.identity import IdentityStore
from cinebook.services.notifications import notify_refund_required
from cinebook.services.orchestrator import BookingOrchestrator
from cinebook.services.payments import PaymentMethod, PaymentReceipt
from cinebook.services.session import UserSession


class FakeGateway:
    """Payment gateway whose answer and latency the test controls."""

    method = PaymentMethod.CREDIT_CARD

    def __init__(self, success=True, delay=0):
        self.success = success
        self.delay = delay
        self.calls = []

    def charge(self, amount, payer_info):
        self.calls.append((amount, payer_info))
        if self.delay:
            time.sleep(self.delay)
        tx = f"FAKE-{len(self.calls)}"
        status = "Approved" if self.success else "Card declined"
        return PaymentReceipt(self.method, tx, self.success, status)


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def gateway(app):
    fake = FakeGateway()
    app.extensions["cinebook.orchestrator"].gateway_factory = lambda method: fake
    return fake


@pytest.fixture
def orchestrator(app, gateway):
    return BookingOrchestrator(gateway_factory=lambda method: gateway,
                               payment_timeout=1.0,
                               notifier=notify_refund_required)


@pytest.fixture
def user(app):
    return IdentityStore().register("Alice Nguyen", "alice@example.com", "alice", "s3cret")


@pytest.fixture
def other_user(app):
    return IdentityStore().register("Bob Tran", "bob@example.com", "bob", "hunter2")


@pytest.fixture
def movie(app):
    return CatalogStore().add_movie("Inception", genre="Sci-Fi", duration="2h 28m", rating="8.8")


@pytest.fixture
def user_session(user):
    return UserSession(user)
