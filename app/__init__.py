"""
Check-in application code.

This package contains the check-in implementations:
- schedule: Recurrence configs and window computation
- tracking: Instance status derivation
- submission: Form payload, validation, drafts and submission
- config: Application settings

Uses generic infrastructure from the common/ package.
"""

from app.config import settings

__all__ = ["settings"]
