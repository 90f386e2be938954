"""
Activity feed and dashboard stats schemas
"""

from datetime import datetime
from typing import Optional, Dict, Any

from credensuite.schemas.common import CamelModel


class ActivityEventResponse(CamelModel):
    id: str
    timestamp: datetime
    type: str
    actor: Optional[str] = None
    subject_id: Optional[str] = None
    subject_name: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


class DashboardStats(CamelModel):
    total_members: int
    active_members: int
    inactive_members: int
    cards_generated: int
    downloads_today: int
