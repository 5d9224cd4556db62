"""Request-side helpers for application code protecting its endpoints."""

from __future__ import annotations

from .deps import bearer_token, current_subject, require_subject

__all__ = ["bearer_token", "current_subject", "require_subject"]
