"""
Entry Model

A short free-text note about current work. The calendar date and ISO week
columns are derived from created_at when the entry is stored, so history
views can page by week without recomputing.
"""

from sqlalchemy import Column, Integer, Text, String, DateTime, Index
from mindreel.database import Base, utcnow


class Entry(Base):
    __tablename__ = "entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    content = Column(Text, nullable=False)
    date = Column(String(10), nullable=False, index=True)
    week_of_year = Column(Integer, nullable=False)
    iso_year = Column(Integer, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)

    __table_args__ = (
        Index("ix_entries_iso_week", "iso_year", "week_of_year"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "content": self.content,
            "date": self.date,
            "week_of_year": self.week_of_year,
            "iso_year": self.iso_year,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Entry {self.id} {self.date}>"
