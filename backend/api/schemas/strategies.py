"""Strategy schemas"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class StrategyCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    description: Optional[str] = None
    is_active: bool = True
    rules: List[str] = []


class StrategyUpdate(BaseModel):
    """Partial update; a given ``rules`` list replaces the stored rules"""
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    description: Optional[str] = None
    is_active: Optional[bool] = None
    rules: Optional[List[str]] = None


class StrategyResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    is_active: bool
    rules: List[str] = []
    trade_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
