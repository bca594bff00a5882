"""
Usage quota service module.

Tracks free readers' chunk reads against daily and monthly caps. Windows are
calendar days and calendar months in UTC; counter rows are created lazily on
the first read of a period.
"""
import logging
from datetime import datetime, timedelta
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from nalanda.core.config import settings
from nalanda.core.exceptions import ConflictError, QuotaExceededError
from nalanda.models.usage import PeriodType, ReaderUsage
from nalanda.schemas.usage import UsageCheck, UsageSummary

logger = logging.getLogger(__name__)

# A lost race on the lazily created rows is retried once
RECORD_ATTEMPTS = 2


def day_start(now: datetime) -> datetime:
    """Midnight UTC starting the day that contains ``now``."""
    return datetime(now.year, now.month, now.day)


def month_start(now: datetime) -> datetime:
    """First instant (UTC) of the month that contains ``now``."""
    return datetime(now.year, now.month, 1)


def next_month_start(now: datetime) -> datetime:
    """First instant (UTC) of the month after the one containing ``now``."""
    if now.month == 12:
        return datetime(now.year + 1, 1, 1)
    return datetime(now.year, now.month + 1, 1)


class UsageService:
    """
    Service for free reader usage quotas.
    """

    def __init__(
        self,
        db: Session,
        daily_limit: Optional[int] = None,
        monthly_limit: Optional[int] = None,
    ):
        """
        Initialize the usage service.

        Args:
            db: Database session
            daily_limit: Chunk reads allowed per UTC day
            monthly_limit: Chunk reads allowed per UTC month
        """
        self.db = db
        self.daily_limit = settings.FREE_READER_DAILY_CHUNKS if daily_limit is None else daily_limit
        self.monthly_limit = settings.FREE_READER_MONTHLY_CHUNKS if monthly_limit is None else monthly_limit

    def _get_row(
        self,
        user_id: int,
        period_type: PeriodType,
        period_start: datetime,
        lock: bool = False,
    ) -> Optional[ReaderUsage]:
        query = self.db.query(ReaderUsage).filter(
            ReaderUsage.user_id == user_id,
            ReaderUsage.period_type == period_type.value,
            ReaderUsage.period_start == period_start,
        )
        if lock:
            query = query.with_for_update()
        return query.first()

    def _current_rows(
        self,
        user_id: int,
        now: datetime,
        lock: bool = False,
    ) -> Tuple[Optional[ReaderUsage], Optional[ReaderUsage]]:
        daily = self._get_row(user_id, PeriodType.DAILY, day_start(now), lock)
        monthly = self._get_row(user_id, PeriodType.MONTHLY, month_start(now), lock)
        return daily, monthly

    def _evaluate(
        self,
        daily: Optional[ReaderUsage],
        monthly: Optional[ReaderUsage],
        amount: int,
        now: datetime,
    ) -> UsageCheck:
        daily_used = daily.used_count if daily else 0
        monthly_used = monthly.used_count if monthly else 0

        daily_remaining = max(0, self.daily_limit - daily_used)
        monthly_remaining = max(0, self.monthly_limit - monthly_used)

        daily_reset = day_start(now) + timedelta(days=1)
        monthly_reset = next_month_start(now)

        daily_blocks = daily_remaining < amount
        monthly_blocks = monthly_remaining < amount
        allowed = not daily_blocks and not monthly_blocks

        if monthly_blocks:
            reset_at = monthly_reset
        elif daily_blocks:
            reset_at = daily_reset
        elif monthly_remaining < daily_remaining:
            reset_at = monthly_reset
        else:
            reset_at = daily_reset

        return UsageCheck(
            allowed=allowed,
            remaining=min(daily_remaining, monthly_remaining),
            reset_at=reset_at,
        )

    def can_consume(self, user_id: int, amount: int = 1, now: Optional[datetime] = None) -> UsageCheck:
        """
        Check whether a reader may read ``amount`` more chunks.

        ``remaining`` is the smaller of the two windows' allowances. ``reset_at``
        belongs to the binding window: when denied, the latest reset among the
        windows that block; when allowed, the window with fewer reads left
        (daily on ties).

        Args:
            user_id: The reader's id
            amount: Number of chunks about to be read
            now: Current UTC time, defaults to the wall clock

        Returns:
            UsageCheck: allowed flag, remaining allowance and reset time
        """
        now = now or datetime.utcnow()
        daily, monthly = self._current_rows(user_id, now)
        return self._evaluate(daily, monthly, amount, now)

    def _record(self, user_id: int, amount: int, now: datetime) -> None:
        daily, monthly = self._current_rows(user_id, now, lock=True)

        check = self._evaluate(daily, monthly, amount, now)
        if not check.allowed:
            raise QuotaExceededError(
                "Free reading limit reached",
                remaining=check.remaining,
                reset_at=check.reset_at,
            )

        if daily is None:
            daily = ReaderUsage(
                user_id=user_id,
                period_type=PeriodType.DAILY.value,
                period_start=day_start(now),
                used_count=0,
                reset_at=day_start(now) + timedelta(days=1),
            )
            self.db.add(daily)
        daily.used_count += amount

        if monthly is None:
            monthly = ReaderUsage(
                user_id=user_id,
                period_type=PeriodType.MONTHLY.value,
                period_start=month_start(now),
                used_count=0,
                reset_at=next_month_start(now),
            )
            self.db.add(monthly)
        monthly.used_count += amount

        self.db.commit()

    def consume(self, user_id: int, amount: int = 1, now: Optional[datetime] = None) -> None:
        """
        Record ``amount`` chunk reads against both windows.

        The caps are checked again inside the transaction that writes both
        counters; any failure rolls back both.

        Raises:
            QuotaExceededError: If the reads would exceed either cap
            ConflictError: If another request keeps creating the same period rows
        """
        now = now or datetime.utcnow()

        for attempt in range(1, RECORD_ATTEMPTS + 1):
            try:
                self._record(user_id, amount, now)
                return
            except QuotaExceededError:
                self.db.rollback()
                raise
            except IntegrityError as e:
                self.db.rollback()
                logger.warning(f"Usage rows for user {user_id} written concurrently (attempt {attempt}): {str(e)}")
            except Exception as e:
                self.db.rollback()
                logger.error(f"Error recording usage for user {user_id}: {str(e)}")
                raise

        raise ConflictError("Reading usage changed concurrently, please retry")

    def get_usage_summary(self, user_id: int, now: Optional[datetime] = None) -> UsageSummary:
        """Current counts, limits and reset times for both windows."""
        now = now or datetime.utcnow()
        daily, monthly = self._current_rows(user_id, now)

        return UsageSummary(
            daily_used=daily.used_count if daily else 0,
            daily_limit=self.daily_limit,
            monthly_used=monthly.used_count if monthly else 0,
            monthly_limit=self.monthly_limit,
            daily_reset_at=daily.reset_at if daily else day_start(now) + timedelta(days=1),
            monthly_reset_at=monthly.reset_at if monthly else next_month_start(now),
        )
