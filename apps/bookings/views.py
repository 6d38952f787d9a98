"""API views for the booking domain."""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from .application.command_handlers import (
    CancelBookingCommand,
    CancelBookingHandler,
    CreateBookingCommand,
    CreateBookingHandler,
    ModifyBookingCommand,
    ModifyBookingHandler,
)
from .domain import errors
from .domain.errors import BookingError
from .models import Booking
from .serializers import (
    BookingCancelSerializer,
    BookingCreateSerializer,
    BookingModifySerializer,
    BookingSerializer,
)

UUID_PATTERN = "[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"

ERROR_STATUS_CODES = {
    errors.VALIDATION: status.HTTP_400_BAD_REQUEST,
    errors.AUTHENTICATION: status.HTTP_401_UNAUTHORIZED,
    errors.AUTHORIZATION: status.HTTP_403_FORBIDDEN,
    errors.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    errors.CONFLICT: status.HTTP_409_CONFLICT,
    errors.STATE: status.HTTP_409_CONFLICT,
}


def booking_error_response(error: BookingError) -> Response:
    return Response(
        {"error": error.to_dict()},
        status=ERROR_STATUS_CODES.get(error.category, status.HTTP_400_BAD_REQUEST),
    )


class BookingViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Bookings of the authenticated user: list, detail, create, modify and cancel."""

    queryset = Booking.objects.select_related("hotel", "room", "payment", "user").all()
    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ["status", "hotel"]
    lookup_value_regex = UUID_PATTERN

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return BookingCreateSerializer
        if self.action == "cancel":
            return BookingCancelSerializer
        if self.action == "partial_update":
            return BookingModifySerializer
        return BookingSerializer

    def get_queryset(self):  # type: ignore
        return super().get_queryset().filter(user=self.request.user).order_by("-created_at")

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = CreateBookingHandler().handle(
            CreateBookingCommand(
                user_id=request.user.id,
                hotel_id=data["hotel_id"],
                room_id=data["room_id"],
                check_in=data["check_in"],
                check_out=data["check_out"],
                number_of_guests=data["number_of_guests"],
                number_of_rooms=data["number_of_rooms"],
            )
        )
        if not result.ok:
            return booking_error_response(result.error)

        bookings = self.get_queryset().filter(pk__in=result.booking_ids)
        return Response(
            {
                "booking_ids": [str(booking_id) for booking_id in result.booking_ids],
                "payment_id": str(result.payment_id),
                "total_amount": str(result.total_amount.amount),
                "currency": result.total_amount.currency,
                "bookings": BookingSerializer(bookings, many=True).data,
            },
            status=status.HTTP_201_CREATED,
        )

    def partial_update(self, request, pk=None):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = ModifyBookingHandler().handle(
            ModifyBookingCommand(
                booking_id=pk,
                user_id=request.user.id,
                check_in=data.get("check_in"),
                check_out=data.get("check_out"),
                number_of_guests=data.get("number_of_guests"),
            )
        )
        if not result.ok:
            return booking_error_response(result.error)

        booking = self.get_queryset().get(pk=result.booking_id)
        return Response(BookingSerializer(booking).data)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        # Ownership is checked by the handler, so look the booking up unfiltered.
        result = CancelBookingHandler().handle(
            CancelBookingCommand(
                booking_id=pk,
                user_id=request.user.id,
                reason=serializer.validated_data["reason"],
            )
        )
        if not result.ok:
            return booking_error_response(result.error)
        return Response({"id": str(result.booking_id), "status": Booking.Status.CANCELLED.value})
