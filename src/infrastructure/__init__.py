"""
Infrastructure layer - External adapters for the defense workflow.

This layer contains:
- In-memory stubs for repositories, directory, and notifier
- The system clock adapter
- Observability (structlog configuration, correlation ids)

IMPORT RULES:
- CAN import from: domain, application
- Implements ports defined in application layer
"""

from src.infrastructure.adapters import SystemTimeAuthority

__all__: list[str] = ["SystemTimeAuthority"]
