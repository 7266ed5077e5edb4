from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class StorageStats(BaseModel):
    """Summary of what the local store holds"""
    total_cards: int = Field(ge=0)
    active_cards: int = Field(ge=0)
    archived_cards: int = Field(ge=0)
    storage_size_bytes: int = Field(ge=0)
    last_backup_date: Optional[datetime] = None
