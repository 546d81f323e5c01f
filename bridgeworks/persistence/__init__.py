"""Persistence — RequestStore protocol and its in-memory implementation."""

from bridgeworks.persistence.request_repository import InMemoryRequestRepository, RequestStore

__all__ = ["InMemoryRequestRepository", "RequestStore"]
