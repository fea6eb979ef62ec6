"""Ubuntu VM bootstrap (idempotent, step-driven).

Core design goals:
- Idempotent steps guarded by live precondition checks
- Fixed step order with declared dependencies
- Primary/fallback install methods per step
- Fail fast, except for best-effort steps
- Centralized logging
"""

__all__ = []
