"""Repository exports"""
from .timers import TimerRepository

__all__ = ['TimerRepository']
