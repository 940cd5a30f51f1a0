"""content/dashboard.py -- Aggregate numbers for the admin dashboard."""

from __future__ import annotations

from datetime import datetime, timezone

from content.store import ContentStore
from core.db import store_errors
from core.errors import FetchFailed

RECENT_LIMIT = 5


def month_start(now: datetime | None = None) -> str:
    """ISO timestamp of midnight UTC on the first day of the current month."""
    now = now or datetime.now(timezone.utc)
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0).isoformat()


class DashboardService:
    def __init__(self, store: ContentStore) -> None:
        self.store = store

    def content_metrics(self) -> dict:
        """Totals plus the five newest articles and activity entries.

        monthly_views sums the view counts of articles published since the
        start of the month; it is not a count of views made this month.
        """
        with store_errors(FetchFailed):
            return {
                "total_articles": self.store.count_articles(),
                "total_categories": self.store.count_categories(),
                "total_page_views": self.store.total_views(),
                "monthly_views": self.store.total_views(published_since=month_start()),
                "recent_articles": self.store.recent_articles(RECENT_LIMIT),
                "recent_activity": self.store.recent_activity(RECENT_LIMIT),
            }
