import threading
from datetime import datetime, timedelta
from typing import Optional, Union
from uuid import UUID, uuid4

from core.clock import Clock, utc_now
from core.errors import (
    AuthorizationError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from core.storage import InMemoryRepository, Repository
from core.users import UserDirectory
from credit_ledger.models import CREDIT_ACTIONS, CreditAction
from credit_ledger.service import CreditLedger, Posting

from .models import Booking, BookingStatus, BookingView, CreateBookingRequest

UNKNOWN_NAME = "Unknown"


class BookingLedger:
    """Admits, stores and transitions session bookings.

    A single lock covers the conflict scan plus insert and every status
    transition, so two overlapping requests for the same participant can never
    both be admitted.
    """

    def __init__(
        self,
        users: UserDirectory,
        credits: CreditLedger,
        storage: Optional[Repository[Booking]] = None,
        clock: Clock = utc_now,
        default_duration: int = 60,
    ):
        self.users = users
        self.credits = credits
        self.storage = storage if storage is not None else InMemoryRepository()
        self.clock = clock
        self.default_duration = default_duration
        self._lock = threading.RLock()

    def create_booking(self, seeker_id: str, request: CreateBookingRequest) -> BookingView:
        provider = self.users.find_user(request.provider_id)
        seeker = self.users.find_user(seeker_id)
        if provider.id == seeker.id:
            raise ValidationError("Cannot book a session with yourself")

        duration = self.default_duration if request.duration is None else request.duration
        if isinstance(duration, bool) or not isinstance(duration, int) or duration <= 0:
            raise ValidationError("Duration must be a positive number of minutes")
        if request.time.tzinfo is not None:
            raise ValidationError("Session time must be a local wall-clock time without offset")

        start = datetime.combine(request.date, request.time)
        try:
            end = start + timedelta(minutes=duration)
        except OverflowError:
            raise ValidationError("Session must end before the year 10000")

        with self._lock:
            conflict = self._find_conflict({provider.id, seeker.id}, start, end)
            if conflict:
                raise ConflictError(
                    f"Time slot conflict detected with booking {conflict.id} "
                    f"({conflict.start:%Y-%m-%d %H:%M}-{conflict.end:%H:%M})"
                )

            now = self.clock()
            booking = Booking(
                id=uuid4(),
                provider_id=provider.id,
                seeker_id=seeker.id,
                skill_id=request.skill_id,
                date=request.date,
                time=request.time,
                duration=duration,
                status=BookingStatus.PENDING,
                message=request.message or "",
                created_at=now,
                updated_at=now,
            )
            self.storage.insert(booking)

        return self._view(booking, seeker.id)

    def transition(
        self,
        booking_id: Union[UUID, str],
        actor_id: Optional[str],
        new_status: Union[BookingStatus, str],
    ) -> BookingView:
        """Move a booking along its lifecycle.

        ``actor_id=None`` is the system actor: it may complete a confirmed
        session but can never confirm on the provider's behalf. Completion
        settles credits first and only then commits the new status.
        """
        target = self._parse_status(new_status)

        with self._lock:
            booking = self.get(booking_id)

            if actor_id is not None and not booking.involves(actor_id):
                raise AuthorizationError("Only booking participants can update this booking")
            if target == BookingStatus.CONFIRMED and actor_id != booking.provider_id:
                raise AuthorizationError("Only provider can confirm bookings")
            if booking.status == target == BookingStatus.COMPLETED:
                raise InvalidStateError("Booking already completed")
            if not booking.can_transition_to(target):
                raise InvalidStateError(
                    f"Cannot change booking from {booking.status.value} to {target.value}"
                )

            updated = booking.model_copy(update={"status": target, "updated_at": self.clock()})
            if target == BookingStatus.COMPLETED:
                self._settle_credits(booking)
            self.storage.update(updated)

        return self._view(updated, actor_id)

    def complete(self, booking_id: Union[UUID, str], actor_id: Optional[str] = None) -> BookingView:
        return self.transition(booking_id, actor_id, BookingStatus.COMPLETED)

    def get(self, booking_id: Union[UUID, str]) -> Booking:
        booking = self.storage.find_by_id(self._coerce_id(booking_id))
        if not booking:
            raise NotFoundError(f"Booking {booking_id} not found")
        return booking

    def list_for_user(self, user_id: str) -> list[BookingView]:
        bookings = self.storage.find_by_predicate(lambda b: b.involves(user_id))
        bookings.sort(key=lambda b: b.start)
        return [self._view(b, user_id) for b in bookings]

    def _find_conflict(self, participants: set[str], start: datetime, end: datetime) -> Optional[Booking]:
        candidates = self.storage.find_by_predicate(
            lambda b: b.is_active() and bool(participants & {b.provider_id, b.seeker_id})
        )
        for booking in candidates:
            if booking.overlaps(start, end):
                return booking
        return None

    def _settle_credits(self, booking: Booking) -> None:
        related_id = str(booking.id)
        self.credits.post_batch([
            Posting(
                booking.provider_id,
                CREDIT_ACTIONS[CreditAction.SESSION_COMPLETE_PROVIDER],
                CreditAction.SESSION_COMPLETE_PROVIDER.value,
                related_id,
            ),
            Posting(
                booking.seeker_id,
                CREDIT_ACTIONS[CreditAction.SESSION_COMPLETE_SEEKER],
                CreditAction.SESSION_COMPLETE_SEEKER.value,
                related_id,
            ),
        ])

    def _view(self, booking: Booking, viewer_id: Optional[str] = None) -> BookingView:
        provider = self.users.get(booking.provider_id)
        seeker = self.users.get(booking.seeker_id)
        return BookingView(
            **booking.model_dump(),
            provider_name=provider.name if provider else UNKNOWN_NAME,
            seeker_name=seeker.name if seeker else UNKNOWN_NAME,
            is_provider=booking.provider_id == viewer_id if viewer_id else None,
        )

    @staticmethod
    def _parse_status(status: Union[BookingStatus, str]) -> BookingStatus:
        try:
            return BookingStatus(status)
        except ValueError:
            raise ValidationError(f"Invalid status: {status}")

    @staticmethod
    def _coerce_id(booking_id: Union[UUID, str]) -> Optional[UUID]:
        if isinstance(booking_id, UUID):
            return booking_id
        try:
            return UUID(str(booking_id))
        except ValueError:
            return None
