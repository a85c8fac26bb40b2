"""Cron trigger schemas."""

from typing import Dict

from pydantic import BaseModel


class PriceRefreshResponse(BaseModel):
    success: bool
    message: str
    stats: Dict[str, int]
