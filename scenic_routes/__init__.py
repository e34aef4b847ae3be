"""Scenic Routes backend.

Plans short scenic walks (loop, one-way, point-to-point) and full-day
sightseeing schedules over points of interest.
"""

__version__ = "0.1.0"
