"""Resource availability and conflict resolution for service-business bookings."""

__version__ = "0.1.0"
