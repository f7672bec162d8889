"""
Authentication

Supplies the identity that owns every transaction and goal.

Two providers match the two ways the app runs:
- DemoAuthProvider: always signed in as the demo user (in-memory store)
- SessionAuthProvider: email + password accounts (remote store)

Accounts live in a UserDirectory. Only a bcrypt hash of the password is
stored, and the user id is a random id assigned at sign-up, so knowing
someone's email is not enough to reach their records.

The provider holds no process-wide state; the UI keeps one per browser
session in st.session_state.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import uuid4

import bcrypt
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic import ValidationError as PydanticValidationError


DEMO_USER_ID = "demo"
DEMO_EMAIL = "demo@piggybank.local"

SIGN_IN_REFUSED = "Wrong email or password"


class Identity(BaseModel):
    """An authenticated user."""
    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., min_length=1)
    email: Optional[str] = None


class UserRecord(BaseModel):
    """A stored account."""
    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., min_length=1)
    email: EmailStr
    password_hash: str = Field(..., description="Hashed password (bcrypt)")


class AuthenticationError(Exception):
    """Sign-in or sign-up was refused."""
    pass


# =============================================================================
# USER DIRECTORY
# =============================================================================

class UserDirectory(ABC):
    """Where accounts are kept, keyed by normalised email."""

    @abstractmethod
    def find_user(self, email: str) -> Optional[UserRecord]:
        pass

    @abstractmethod
    def add_user(self, record: UserRecord) -> None:
        pass


class InMemoryUserDirectory(UserDirectory):

    def __init__(self):
        self._users: dict[str, UserRecord] = {}

    def find_user(self, email: str) -> Optional[UserRecord]:
        return self._users.get(email)

    def add_user(self, record: UserRecord) -> None:
        self._users[record.email] = record


# =============================================================================
# PROVIDERS
# =============================================================================

class AuthProvider(ABC):
    """Abstract source of the current identity."""

    @abstractmethod
    def current_identity(self) -> Optional[Identity]:
        """The signed-in user, or None."""
        pass

    @property
    def supports_sign_in(self) -> bool:
        return False

    def sign_in(self, email: str, password: str) -> Identity:
        raise AuthenticationError("This mode does not support signing in")

    def sign_up(self, email: str, password: str) -> Identity:
        raise AuthenticationError("This mode does not support creating accounts")

    def sign_out(self) -> None:
        pass


class DemoAuthProvider(AuthProvider):
    """Always signed in as the demo user."""

    def current_identity(self) -> Optional[Identity]:
        return Identity(user_id=DEMO_USER_ID, email=DEMO_EMAIL)


class _CredentialsForm(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=4, max_length=72)

    @field_validator('email', mode='before')
    @classmethod
    def normalise_email(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v


def _read_credentials(email: str, password: str) -> _CredentialsForm:
    try:
        return _CredentialsForm(email=email, password=password)
    except PydanticValidationError as e:
        field = e.errors()[0]["loc"][0]
        if field == "password":
            raise AuthenticationError("Passwords need at least 4 characters")
        raise AuthenticationError("Please enter a valid email address")


class SessionAuthProvider(AuthProvider):
    """
    Email and password accounts backed by a UserDirectory.

    sign_up creates the account and signs in; sign_in checks the password
    against the stored hash. A wrong password and an unknown email get the
    same message.
    """

    def __init__(self, directory: UserDirectory, hash_rounds: int = 12):
        self._directory = directory
        self._hash_rounds = hash_rounds
        self._identity: Optional[Identity] = None

    @property
    def supports_sign_in(self) -> bool:
        return True

    def current_identity(self) -> Optional[Identity]:
        return self._identity

    def sign_up(self, email: str, password: str) -> Identity:
        form = _read_credentials(email, password)
        if self._directory.find_user(form.email) is not None:
            raise AuthenticationError("An account with this email already exists")

        password_hash = bcrypt.hashpw(
            form.password.encode("utf-8"),
            bcrypt.gensalt(rounds=self._hash_rounds),
        )
        record = UserRecord(
            user_id=uuid4().hex,
            email=form.email,
            password_hash=password_hash.decode("utf-8"),
        )
        self._directory.add_user(record)

        self._identity = Identity(user_id=record.user_id, email=record.email)
        return self._identity

    def sign_in(self, email: str, password: str) -> Identity:
        form = _read_credentials(email, password)
        record = self._directory.find_user(form.email)
        if record is None or not self._password_matches(form.password, record):
            raise AuthenticationError(SIGN_IN_REFUSED)

        self._identity = Identity(user_id=record.user_id, email=record.email)
        return self._identity

    def _password_matches(self, password: str, record: UserRecord) -> bool:
        try:
            return bcrypt.checkpw(
                password.encode("utf-8"),
                record.password_hash.encode("utf-8"),
            )
        except ValueError:
            # Stored hash is not a bcrypt hash
            return False

    def sign_out(self) -> None:
        self._identity = None
