"""Dashboard analytics over the project set.

All aggregation happens in ``summarize_projects`` on already-loaded projects so
it can be exercised without a database; ``AnalyticsEngine`` only fetches the
rows for the current and preceding windows.
"""

from __future__ import annotations

import math
from collections import Counter, defaultdict
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from uxrmetrics.db.models import ProjectModel, utcnow
from uxrmetrics.models import ProjectSource, ProjectStatus
from uxrmetrics.projects.filters import ProjectFilters, to_utc
from uxrmetrics.projects.repository import fetch_projects

ALL_TIME_START = datetime(2020, 1, 1, tzinfo=timezone.utc)
TOP_CATEGORY_LIMIT = 5

# (label, exclusive upper bound in days); the last band is open-ended
COMPLETION_BANDS: list[tuple[str, float]] = [
    ("< 1 week", 7),
    ("1-2 weeks", 14),
    ("2-4 weeks", 28),
    ("1-2 months", 60),
    ("> 2 months", math.inf),
]


class TimeRange(str, Enum):
    THREE_MONTHS = "3months"
    SIX_MONTHS = "6months"
    TWELVE_MONTHS = "12months"
    ALL = "all"

    @property
    def months(self) -> int | None:
        return {"3months": 3, "6months": 6, "12months": 12}.get(self.value)

    @property
    def bucket_count(self) -> int:
        return self.months or 12

    def window_start(self, now: datetime) -> datetime:
        if self.months is None:
            return ALL_TIME_START
        return shift_months(now, -self.months)

    def prior_window_start(self, now: datetime) -> datetime | None:
        """Start of the equally long window preceding this one (none for ``all``)."""
        if self.months is None:
            return None
        return shift_months(now, -2 * self.months)


def shift_months(value: datetime, months: int) -> datetime:
    """Move ``value`` by whole calendar months, clamping the day to the month length."""
    index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    next_month = datetime(year + month // 12, month % 12 + 1, 1)
    last_day = (next_month - timedelta(days=1)).day
    return value.replace(year=year, month=month, day=min(value.day, last_day))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def percentage(part: float, whole: float) -> int:
    return round_half_up(part / whole * 100) if whole else 0


def month_label(value: datetime) -> str:
    return value.strftime("%b %y")


def _created(project: ProjectModel) -> datetime:
    return to_utc(project.created_at)


def _in_window(
    projects: Iterable[ProjectModel], start: datetime, end: datetime, inclusive_end: bool
) -> list[ProjectModel]:
    selected = []
    for project in projects:
        if project.created_at is None:
            continue
        created = _created(project)
        if created < start:
            continue
        if created > end or (not inclusive_end and created == end):
            continue
        selected.append(project)
    return selected


def _category_names(project: ProjectModel) -> list[str]:
    return [pt.tag.category.name for pt in project.tags]


def completion_band(days: float) -> str:
    for label, upper in COMPLETION_BANDS:
        if days < upper:
            return label
    return COMPLETION_BANDS[-1][0]


def summarize_projects(
    projects: Sequence[ProjectModel],
    time_range: TimeRange,
    now: datetime,
    prior_projects: Sequence[ProjectModel] | None = None,
) -> dict[str, Any]:
    """Compute every dashboard series for ``time_range`` ending at ``now``.

    ``projects`` and ``prior_projects`` may contain rows outside their window;
    they are re-filtered on ``created_at`` here.
    """
    now = to_utc(now)
    start = time_range.window_start(now)
    current = _in_window(projects, start, now, inclusive_end=True)

    # Monthly buckets, oldest first
    buckets: list[tuple[str, list[ProjectModel]]] = []
    for i in range(time_range.bucket_count - 1, -1, -1):
        month = shift_months(now, -i)
        members = [
            p for p in current
            if _created(p).year == month.year and _created(p).month == month.month
        ]
        buckets.append((month_label(month), members))

    project_trends = []
    completion_rates = []
    participant_metrics = []
    for label, members in buckets:
        completed = sum(1 for p in members if p.status == ProjectStatus.COMPLETED.value)
        active = sum(1 for p in members if p.status == ProjectStatus.ACTIVE.value)
        total = len(members)
        participants = sum(p.participant_count or 0 for p in members)

        project_trends.append(
            {"month": label, "completed": completed, "active": active, "total": total}
        )
        completion_rates.append({"month": label, "rate": percentage(completed, total)})
        participant_metrics.append(
            {
                "month": label,
                "participants": participants,
                "avg_per_project": round_half_up(participants / total) if total else 0,
            }
        )

    # Source distribution
    source_counts = Counter(ProjectSource(p.source).value for p in current)
    source_distribution = [
        {
            "source": source,
            "label": source.replace("_", " "),
            "count": count,
            "percentage": percentage(count, len(current)),
        }
        for source, count in sorted(source_counts.items(), key=lambda item: (-item[1], item[0]))
    ]

    # Time to completion
    band_counts = Counter()
    for project in current:
        if project.status != ProjectStatus.COMPLETED.value:
            continue
        if project.start_date is None or project.end_date is None:
            continue
        delta = to_utc(project.end_date) - to_utc(project.start_date)
        band_counts[completion_band(delta.total_seconds() / 86400)] += 1
    time_to_completion = [
        {"range": label, "count": band_counts[label]} for label, _ in COMPLETION_BANDS
    ]

    # Top categories, with growth against the preceding window
    category_counts = Counter(name for p in current for name in _category_names(p))
    prior_counts: Counter | None = None
    prior_start = time_range.prior_window_start(now)
    if prior_start is not None and prior_projects is not None:
        prior = _in_window(prior_projects, prior_start, start, inclusive_end=False)
        prior_counts = Counter(name for p in prior for name in _category_names(p))

    top_categories = []
    ranked = sorted(category_counts.items(), key=lambda item: (-item[1], item[0]))
    for name, count in ranked[:TOP_CATEGORY_LIMIT]:
        previous = prior_counts.get(name, 0) if prior_counts is not None else 0
        growth = percentage(count - previous, previous) if previous else None
        top_categories.append({"category": name, "count": count, "growth": growth})

    # Budget per category; a project counts once per category it is tagged in
    budget_totals: dict[str, Decimal] = defaultdict(Decimal)
    budget_projects: Counter = Counter()
    for project in current:
        for name in dict.fromkeys(_category_names(project)):
            budget_totals[name] += project.budget or Decimal(0)
            budget_projects[name] += 1
    budget_by_category = [
        {"category": name, "amount": float(amount), "projects": budget_projects[name]}
        for name, amount in sorted(budget_totals.items(), key=lambda item: (-item[1], item[0]))
    ]

    return {
        "time_range": time_range.value,
        "project_trends": project_trends,
        "completion_rates": completion_rates,
        "participant_metrics": participant_metrics,
        "source_distribution": source_distribution,
        "time_to_completion": time_to_completion,
        "top_categories": top_categories,
        "budget_by_category": budget_by_category,
    }


class AnalyticsEngine:
    """Loads the projects behind the analytics dashboard and aggregates them."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def compute(self, time_range: TimeRange, now: datetime | None = None) -> dict[str, Any]:
        now = to_utc(now or utcnow())
        start = time_range.window_start(now)

        projects = await fetch_projects(
            self.session, ProjectFilters(start_date=start, end_date=now), order="created"
        )

        prior_projects = None
        prior_start = time_range.prior_window_start(now)
        if prior_start is not None:
            prior_projects = await fetch_projects(
                self.session,
                ProjectFilters(start_date=prior_start, end_date=start - timedelta(microseconds=1)),
                order="created",
            )

        return summarize_projects(projects, time_range, now, prior_projects=prior_projects)
