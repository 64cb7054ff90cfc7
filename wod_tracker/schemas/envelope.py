"""Success envelope schemas shared across API handlers."""

from __future__ import annotations

from datetime import datetime
from typing import Generic
from typing import Literal
from typing import TypeVar

from pydantic import BaseModel

DataT = TypeVar("DataT")


class SuccessResponse(BaseModel, Generic[DataT]):
    """Top-level envelope for successful responses."""

    success: Literal[True] = True
    data: DataT
    message: str | None = None


class HealthStatus(BaseModel):
    """Liveness payload for ``/health``."""

    status: Literal["healthy"] = "healthy"
    timestamp: datetime
    uptime: float
    environment: str


class ApiIndex(BaseModel):
    """Discovery payload for ``/api``."""

    message: str
    version: str
    endpoints: dict[str, str]
