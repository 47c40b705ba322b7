# tradesync/__init__.py
"""
Venue reconciliation subsystem package.

Provides:
- Configuration & endpoints for the venue REST API
- Core domain enums & models
- Order and order-book trackers
- Services for trading (place/cancel/balance) and periodic reconciliation
- Application-level VenueClient facade
"""
