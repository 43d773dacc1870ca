"""
Explicit per-user session.

A UserSession is created at login and cleared at logout. It is handed to
the orchestrator on every call instead of living in a global, and it
holds the checkout state (last pricing context and payment method) that
must never leak from one identity to the next.
"""
NOT_STARTED = "Not Started"
CREATED = "Created"


class UserSession:

    def __init__(self, user=None, active_bookings=None):
        self.user = user
        self.active_bookings = dict(active_bookings or {})
        self.pricing = None
        self.payment_method = None

    @property
    def is_authenticated(self):
        return self.user is not None

    @property
    def user_id(self):
        return self.user.id if self.user else None

    def login(self, user):
        if self.user is not None and self.user.id != user.id:
            self.clear()
        self.user = user
        return self

    def logout(self):
        self.clear()
        self.user = None

    def clear(self):
        self.active_bookings.clear()
        self.pricing = None
        self.payment_method = None

    def remember_checkout(self, pricing, payment_method):
        self.pricing = pricing
        self.payment_method = payment_method

    def add_active_booking(self, movie_id, status=CREATED):
        self.active_bookings[int(movie_id)] = status

    def booking_status(self, movie_id):
        return self.active_bookings.get(int(movie_id), NOT_STARTED)
