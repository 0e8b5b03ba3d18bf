"""
Utility modules for the scheduling backend.

This package contains shared helper functions used across the application,
mainly clinic-timezone datetime handling and time-of-day canonicalization.
"""
