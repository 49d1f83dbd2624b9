from __future__ import annotations

from mediacheck.models.entities import Base

__all__ = ["Base"]
