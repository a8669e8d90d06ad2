"""Datastore interface and in-memory implementation."""
from __future__ import annotations

from byoai_compliance.store.memory import ComplianceStore, InMemoryStore

__all__ = ["ComplianceStore", "InMemoryStore"]
