"""Reelwright: compile captured UI interactions into a rendered-time schedule."""

__version__ = "0.1.0"
