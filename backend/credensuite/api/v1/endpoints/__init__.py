# API endpoints
from . import members, settings, templates, activity, health

__all__ = ["members", "settings", "templates", "activity", "health"]
