from sqlalchemy import Column, Integer, String, DateTime
from mindreel.database import Base, utcnow


class Migration(Base):
    """Ledger row recording one applied schema migration."""
    __tablename__ = "migrations"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(255), nullable=False)
    applied_at = Column(DateTime, nullable=False, default=utcnow)

    def __repr__(self):
        return f"<Migration {self.id} {self.name}>"
