"""
Query assistant client.

Orchestrates natural-language SQL generation, hand edits, execution and
history synchronization against the query assistant backend.
"""

__version__ = "0.1.0"
