"""
Reader usage model module.
"""
import enum

from sqlalchemy import Column, DateTime, Integer, String, UniqueConstraint

from nalanda.models.base import BaseModel


class PeriodType(str, enum.Enum):
    """Usage window types."""
    DAILY = "daily"
    MONTHLY = "monthly"


class ReaderUsage(BaseModel):
    """
    Per-user chunk read counter for one usage period.
    """
    __tablename__ = "reader_usages"
    __table_args__ = (
        UniqueConstraint("user_id", "period_type", "period_start", name="uq_reader_usages_period"),
    )

    user_id = Column(Integer, nullable=False, index=True)
    period_type = Column(String(10), nullable=False)
    period_start = Column(DateTime, nullable=False)
    used_count = Column(Integer, nullable=False, default=0)
    reset_at = Column(DateTime, nullable=False)

    def __repr__(self):
        return f"<ReaderUsage {self.user_id} {self.period_type} {self.period_start}>"
