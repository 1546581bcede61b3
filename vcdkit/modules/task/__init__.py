"""
Task Module - Black Box Interface

Purpose: Drive server-side asynchronous operations to a terminal state
Interface: refresh(), wait_until_complete(), wait_all()
Hidden: Polling loop, sleep/cancel race, deadline tracking

Observes tasks only; it never aborts the remote operation.
"""

from .task import DEFAULT_POLL_INTERVAL, TaskModule

__all__ = ["TaskModule", "DEFAULT_POLL_INTERVAL"]
