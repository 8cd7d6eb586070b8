import logging

from fastapi import APIRouter, Depends, HTTPException, status

from api.deps import Services, get_current_user, get_services
from core.errors import SkilLinkError
from core.users import User

from .models import BookingResponse, BookingView, CreateBookingRequest, UpdateBookingStatusRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    request: CreateBookingRequest,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> BookingResponse:
    try:
        booking = services.bookings.create_booking(user.id, request)
    except SkilLinkError as e:
        logger.warning("Booking request from %s to %s rejected: %s", user.id, request.provider_id, e)
        raise HTTPException(status_code=e.status_code, detail=str(e))

    logger.info("Booking %s requested by %s with %s", booking.id, user.id, request.provider_id)
    return BookingResponse(message="Booking request sent successfully", booking=booking)


@router.get("", response_model=list[BookingView])
def list_bookings(
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> list[BookingView]:
    return services.bookings.list_for_user(user.id)


@router.patch("/{booking_id}", response_model=BookingResponse)
def update_booking_status(
    booking_id: str,
    request: UpdateBookingStatusRequest,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> BookingResponse:
    try:
        booking = services.bookings.transition(booking_id, user.id, request.status)
    except SkilLinkError as e:
        logger.warning("Booking %s transition to %s by %s rejected: %s", booking_id, request.status, user.id, e)
        raise HTTPException(status_code=e.status_code, detail=str(e))

    logger.info("Booking %s is now %s", booking_id, booking.status.value)
    return BookingResponse(message=f"Booking {booking.status.value} successfully", booking=booking)


@router.patch("/{booking_id}/complete", response_model=BookingResponse)
def complete_booking(
    booking_id: str,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> BookingResponse:
    try:
        booking = services.bookings.complete(booking_id, user.id)
    except SkilLinkError as e:
        logger.warning("Completion of booking %s by %s rejected: %s", booking_id, user.id, e)
        raise HTTPException(status_code=e.status_code, detail=str(e))

    logger.info("Booking %s completed, credits settled", booking_id)
    return BookingResponse(message="Booking completed and credits awarded", booking=booking)
