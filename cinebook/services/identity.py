import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from cinebook.extensions import db
from cinebook.models import User
from cinebook.services.errors import InvalidRequest, PersistenceFailure, RegistrationError

logger = logging.getLogger(__name__)


class IdentityStore:

    def find_user_by_id(self, user_id):
        return db.session.get(User, user_id)

    def find_user_by_email(self, email):
        return User.query.filter_by(email=(email or "").strip().lower()).first()

    def find_user_by_username(self, username):
        return User.query.filter_by(username=(username or "").strip()).first()

    def verify_credentials(self, email, password):
        """The matching user, or None when the email or password is wrong."""
        user = self.find_user_by_email(email)
        if user and password and user.check_password(password):
            return user
        return None

    def insert_user(self, user):
        try:
            db.session.add(user)
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise RegistrationError("Email or username already exists")
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.exception("Could not save user %s", user.email)
            raise PersistenceFailure(f"Could not save user: {e}")
        return user.id

    def register(self, name, email, username, password):
        if not all([name, email, username, password]):
            raise InvalidRequest("Name, email, username and password are required")
        email = email.strip().lower()
        username = username.strip()
        if self.find_user_by_email(email):
            raise RegistrationError("Email already exists")
        if self.find_user_by_username(username):
            raise RegistrationError("Username already exists")

        user = User(name=name.strip(), email=email, username=username)
        user.set_password(password)
        self.insert_user(user)
        logger.info("Registered user %s", user.username)
        return user
