from sqlalchemy import Column, Integer

from credensuite.core.database import Base


class YearCounter(Base):
    """Per calendar year member sequence, advanced only by atomic upsert"""
    __tablename__ = "year_counters"

    year = Column(Integer, primary_key=True, autoincrement=False)
    seq = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<YearCounter {self.year}={self.seq}>"
