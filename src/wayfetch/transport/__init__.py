"""src/wayfetch/transport/__init__.py

Transport layer module for Wayfetch.

This module provides low-level connection management: asyncio TCP
connections, TLS contexts, and the agent that hands connections out to
request hops.
"""

from .agent import Agent
from .connection import AsyncConnection
from .tls import create_ssl_context

__all__ = ["Agent", "AsyncConnection", "create_ssl_context"]
