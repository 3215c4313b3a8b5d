"""
Adapters layer - Store implementations behind the service protocols.
"""

from .memory_store import InMemoryClinicStore

__all__ = ["InMemoryClinicStore"]
