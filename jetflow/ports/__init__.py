"""Ports layer - Interfaces for external collaborators."""

from .clock import ClockPort
from .logger import LoggerPort
from .metrics import MetricsPort
from .transport import TransportPort

__all__ = ["ClockPort", "LoggerPort", "MetricsPort", "TransportPort"]
