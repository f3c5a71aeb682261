"""
Booking Manager Tool
Cancels a guest's own booking:
1. Read booking + guest + listing, scoped to (booking id, user id)
2. Parse the fields needed for the confirmation
3. Scoped update: status -> cancelled
4. Best-effort confirmation email (never undoes the cancellation)
"""

import json
from typing import Optional

from loguru import logger

from ..interfaces.email_sender import EmailSender
from ..interfaces.sql_executor import NO_DATA, ReadOnlyQueryExecutor, ScopedWriteExecutor


BOOKING_STATUS_CANCELLED = 3

SELECT_BOOKING_SQL = f"""
    SELECT b.Id, b.StartDate, u.Email, u.FullName, u.UserName,
           l.Title AS ListingTitle
    FROM Bookings b
    JOIN Users u ON b.GuestId = u.Id
    JOIN Listings l ON b.ListingId = l.Id
    WHERE b.Id = %(booking_id)s
      AND b.GuestId = %(user_id)s
      AND b.Status != {BOOKING_STATUS_CANCELLED}
    LIMIT 1
"""

CANCEL_BOOKING_SQL = f"""
    UPDATE Bookings
    SET Status = {BOOKING_STATUS_CANCELLED},
        CancelledAt = UTC_TIMESTAMP(),
        CancellationReason = 'Cancelled by AI Agent request'
    WHERE Id = %(booking_id)s
      AND GuestId = %(user_id)s
      AND Status != {BOOKING_STATUS_CANCELLED}
"""


def cancellation_email(guest_name: str, listing_title: str, start_date: str) -> str:
    """Inner HTML for the cancellation confirmation"""
    return (
        f"<h3>Your booking has been cancelled</h3>"
        f"<p>Hi {guest_name},</p>"
        f"<p>Your stay at <strong>{listing_title}</strong> starting on "
        f"<strong>{start_date}</strong> has been cancelled as requested.</p>"
        f"<p>If this was a mistake, you can book again from the listing page.</p>"
    )


class BookingManagerTool:
    """cancel_my_booking"""
    
    TOOL_NAME = "BookingManager"
    
    def __init__(
        self,
        reader: ReadOnlyQueryExecutor,
        writer: ScopedWriteExecutor,
        email_sender: EmailSender
    ):
        self.reader = reader
        self.writer = writer
        self.email_sender = email_sender
    
    async def cancel_booking(self, booking_id, user_id: Optional[str] = None) -> str:
        """
        Args:
            booking_id: Booking to cancel
            user_id: Authenticated user (injected, never from the model)
        
        Returns:
            str: Human-readable outcome for the model
        """
        if not user_id:
            return "Error: You must be logged in."
        
        try:
            booking_id = int(booking_id)
        except (TypeError, ValueError):
            return f"Error: '{booking_id}' is not a valid booking number."
        
        not_found = (
            f"Error: Booking #{booking_id} not found, does not belong to you, "
            f"or is already cancelled."
        )
        params = {"booking_id": booking_id, "user_id": user_id}
        
        # Step 1: fetch details
        json_result = await self.reader.execute(SELECT_BOOKING_SQL, params)
        if json_result.startswith(NO_DATA) or json_result.strip() == "[]":
            return not_found
        if json_result.startswith("SQL Error") or json_result.startswith("Error"):
            logger.error(f"[BookingManager] Lookup failed for #{booking_id}: {json_result}")
            return f"Error: Could not look up Booking #{booking_id}. Please try again later."
        
        # Step 2: parse
        try:
            row = json.loads(json_result)[0]
            guest_email = row.get("Email") or ""
            guest_name = row.get("FullName") or row.get("UserName") or "Guest"
            listing_title = row.get("ListingTitle") or "Property"
            start_date = str(row["StartDate"])
        except (ValueError, KeyError, IndexError, TypeError, AttributeError) as e:
            logger.error(f"[BookingManager] Could not parse booking #{booking_id}: {e}")
            return "Error parsing booking details."
        
        # Step 3: scoped write
        success = await self.writer.execute(CANCEL_BOOKING_SQL, {"booking_id": booking_id}, user_id)
        if not success:
            return f"Failed to update Booking #{booking_id}."
        
        logger.info(f"[BookingManager] Booking #{booking_id} cancelled by {user_id}")
        
        # Step 4: notification
        if not guest_email:
            return f"Success: Booking #{booking_id} for '{listing_title}' has been cancelled."
        
        try:
            sent = await self.email_sender.send(
                guest_email,
                f"Booking Cancelled: {listing_title}",
                cancellation_email(guest_name, listing_title, start_date)
            )
        except Exception as e:
            logger.error(f"[BookingManager] Cancellation email failed for #{booking_id}: {e}")
            sent = False
        
        if not sent:
            return (
                f"Success: Booking #{booking_id} for '{listing_title}' has been cancelled. "
                f"The confirmation email to {guest_email} could not be sent."
            )
        
        return (
            f"Success: Booking #{booking_id} for '{listing_title}' has been cancelled. "
            f"A confirmation email has been sent to {guest_email}."
        )
    
    def register(self, registry):
        registry.register(
            tool_name=self.TOOL_NAME,
            function_name="cancel_my_booking",
            description="Cancels a specific booking of the current user and sends a confirmation email.",
            parameters={
                "type": "object",
                "properties": {
                    "booking_id": {"type": "integer", "description": "The Booking ID to cancel"},
                    "user_id": {"type": "string"}
                },
                "required": ["booking_id"]
            },
            handler=self.cancel_booking
        )
