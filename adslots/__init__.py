"""
Slot scheduling for display-network advertising campaigns.

Decides whether and when a campaign booked on a set of display groups
can start, commits or releases capacity reservations, and retries
queued campaigns as capacity frees up.
"""

__version__ = "0.1.0"
