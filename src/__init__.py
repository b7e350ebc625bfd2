"""
Thesis Defense Workflow - university thesis-defense lifecycle core

Manages thesis form review (Instructor -> Admin -> Manager) with revision
loops, jury assignment, availability collection, time-slot negotiation,
meeting scheduling, and scoring.

Layers:
- domain: pure state machines, aggregators, and value types
- application: async orchestration over injected ports
- infrastructure: in-memory stubs and structured logging
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
