from sqlalchemy import Boolean, CheckConstraint, Column, Integer, String
from mindreel.database import Base

SETTINGS_ID = 1


class Settings(Base):
    """Singleton configuration row.

    The id is pinned to SETTINGS_ID by a check constraint, so the table can
    never hold more than one row. Only SettingsStore writes to it.
    """
    __tablename__ = "settings"

    id = Column(Integer, primary_key=True, default=SETTINGS_ID)
    popup_interval_minutes = Column(Integer, nullable=False, default=60)
    global_shortcut = Column(String(100), nullable=True)
    onboarding_completed = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        CheckConstraint(f"id = {SETTINGS_ID}", name="ck_settings_singleton"),
        CheckConstraint("popup_interval_minutes >= 0", name="ck_settings_interval_non_negative"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "popup_interval_minutes": self.popup_interval_minutes,
            "global_shortcut": self.global_shortcut,
            "onboarding_completed": bool(self.onboarding_completed),
        }

    def __repr__(self):
        return f"<Settings interval={self.popup_interval_minutes} shortcut={self.global_shortcut}>"
