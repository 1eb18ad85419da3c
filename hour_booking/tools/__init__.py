"""MCP tool registration."""

from .booking_tools import BookingTools, register_booking_tools

__all__ = ["BookingTools", "register_booking_tools"]
