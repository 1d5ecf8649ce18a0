"""
Utilities Package

Helper functions used across the application.

- timestamps.py: server clock and the canonical ISO-8601 rendering
"""

from reviewchain.utils.timestamps import format_timestamp, utc_now

__all__ = ["format_timestamp", "utc_now"]
