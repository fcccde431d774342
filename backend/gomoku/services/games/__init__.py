"""Game domain services: board, turn timer, rooms and the room registry.

This package contains the match state machine and is imported by the
Socket.IO handlers and HTTP routes, keeping transport concerns separated
from core game mechanics.
"""
