"""
Weekly Summary Model

Stores the externally generated summary text for one ISO week.
One row per (iso_year, week_of_year); regenerating a week replaces its content.
"""

from sqlalchemy import Column, Integer, Text, String, DateTime, UniqueConstraint
from mindreel.database import Base, utcnow


class WeeklySummary(Base):
    __tablename__ = "weekly_summaries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    iso_year = Column(Integer, nullable=False)
    week_of_year = Column(Integer, nullable=False)
    start_date = Column(String(10), nullable=False)
    end_date = Column(String(10), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint("iso_year", "week_of_year", name="uq_weekly_summaries_iso_week"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "iso_year": self.iso_year,
            "week_of_year": self.week_of_year,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "content": self.content,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<WeeklySummary {self.iso_year}-W{self.week_of_year:02d}>"
