"""Room domain services: registry, buzz arbitration, fanout and cleanup.

These modules know nothing about Flask requests; the Socket.IO handlers
parse inbound events and call into them.
"""
from .broadcast import Broadcaster
from .buzzer import buzz
from .registry import RoomRegistry
from .sweeper import CleanupSweeper

__all__ = ['Broadcaster', 'CleanupSweeper', 'RoomRegistry', 'buzz']
