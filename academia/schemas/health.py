from datetime import datetime

from academia.schemas.base import APIModel


class HealthResponse(APIModel):
    status: str
    timestamp: datetime
    uptime: float
    environment: str
    database: str
