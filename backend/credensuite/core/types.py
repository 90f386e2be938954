"""Column types and defaults shared by the models"""
import uuid
from datetime import datetime

from sqlalchemy import String, TypeDecorator


def generate_uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Naive UTC; every DateTime column stores naive UTC"""
    return datetime.utcnow()


class GUID(TypeDecorator):
    """UUID kept as its 36-character string form on every backend"""
    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else str(value)

    def process_result_value(self, value, dialect):
        return None if value is None else str(value)
