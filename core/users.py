import threading
from datetime import datetime
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from .clock import Clock, utc_now
from .errors import NotFoundError, ValidationError
from .storage import InMemoryRepository, Repository


class User(BaseModel):
    id: str
    name: str
    email: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    credit_balance: Optional[int] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CreateUserRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: Optional[str] = None
    bio: Optional[str] = None


class UpdateLocationRequest(BaseModel):
    latitude: float
    longitude: float
    address: Optional[str] = None


class UserDirectory:
    """In-memory stand-in for the account service that owns user records.

    The ledgers only read users through ``find_user``/``get`` and write the
    cached ``credit_balance`` through ``set_credit_balance``.
    """

    def __init__(self, storage: Optional[Repository[User]] = None, clock: Clock = utc_now):
        self.storage = storage if storage is not None else InMemoryRepository()
        self.clock = clock
        self._lock = threading.Lock()

    def add_user(
        self,
        name: str,
        email: Optional[str] = None,
        user_id: Optional[str] = None,
        bio: Optional[str] = None,
    ) -> User:
        name = (name or "").strip()
        if not name:
            raise ValidationError("User name is required")
        email = email.strip().lower() if email else None
        with self._lock:
            if email and self.storage.find_by_predicate(lambda u: u.email == email):
                raise ValidationError("Email already registered")
            user = User(id=user_id or str(uuid4()), name=name, email=email, bio=bio, created_at=self.clock())
            return self.storage.insert(user)

    def get(self, user_id: str) -> Optional[User]:
        return self.storage.find_by_id(user_id)

    def find_user(self, user_id: str) -> User:
        user = self.storage.find_by_id(user_id)
        if not user:
            raise NotFoundError(f"User {user_id} not found")
        return user

    def set_credit_balance(self, user_id: str, value: Optional[int]) -> User:
        with self._lock:
            user = self.find_user(user_id)
            return self.storage.update(user.model_copy(update={"credit_balance": value}))

    def list_users(self) -> list[User]:
        return self.storage.find_by_predicate(lambda u: True)

    def set_location(
        self, user_id: str, latitude: float, longitude: float, address: Optional[str] = None
    ) -> User:
        if not -90 <= latitude <= 90 or not -180 <= longitude <= 180:
            raise ValidationError("Latitude must be within ±90 and longitude within ±180")
        with self._lock:
            user = self.find_user(user_id)
            return self.storage.update(user.model_copy(update={
                "latitude": latitude,
                "longitude": longitude,
                "location": address or user.location,
            }))
