from typing import Optional

from pydantic import BaseModel, Field


class BookingCreatePayload(BaseModel):
    """
    Schema for creating a booking. Prices are never accepted from the client.
    Required fields are checked by the booking service so a missing field
    gets the same message whichever one is absent.
    """

    hotel_id: Optional[int] = Field(None, description="Hotel to book")
    room_id: Optional[int] = Field(None, description="Room (type) within the hotel")
    check_in_date: Optional[str] = Field(None, description="Check-in date, YYYY-MM-DD")
    check_out_date: Optional[str] = Field(None, description="Check-out date, YYYY-MM-DD")
    number_of_guests: Optional[int] = Field(None, description="Guests, 1-20 (default 1)")
    number_of_rooms: Optional[int] = Field(None, description="Units of the room, 1-10 (default 1)")


class BookingModifyPayload(BaseModel):
    """
    Schema for modifying an existing booking. All fields are optional; the
    total price is recomputed when dates, room or quantity change.
    """

    check_in_date: Optional[str] = Field(None, description="New check-in date, YYYY-MM-DD")
    check_out_date: Optional[str] = Field(None, description="New check-out date, YYYY-MM-DD")
    number_of_guests: Optional[int] = Field(None, description="New guest count")
    number_of_rooms: Optional[int] = Field(None, description="New number of units")
    room_id: Optional[int] = Field(None, description="Another room of the same hotel")


class BookingStatusPayload(BaseModel):
    status: Optional[str] = Field(None, description="pending, confirmed, cancelled or completed")
    payment_status: Optional[str] = Field(None, description="pending, paid, failed or refunded")
