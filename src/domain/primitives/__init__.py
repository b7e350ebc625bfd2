"""Domain primitives shared by the application services.

- AtomicOperationContext: compensating rollback for multi-entity writes
"""

from src.domain.primitives.ensure_atomicity import AtomicOperationContext

__all__: list[str] = ["AtomicOperationContext"]
