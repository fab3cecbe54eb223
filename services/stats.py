# services/stats.py

from collections import Counter, OrderedDict
from datetime import date
from typing import Iterable, List, Optional

from models.enums import RequestStatus, RequestType, StatsPeriod
from models.request import Request


def period_key(day: date, period: StatsPeriod) -> str:
    """ISO-style bucket label: 2025-03-14, 2025-W11, 2025-03."""
    period = StatsPeriod(period)
    if period == StatsPeriod.day:
        return day.isoformat()
    if period == StatsPeriod.week:
        year, week, _ = day.isocalendar()
        return f"{year}-W{week:02d}"
    return f"{day.year}-{day.month:02d}"


def _empty_status_counts() -> dict:
    return {status.value: 0 for status in RequestStatus}


def summarize_requests(
    requests: Iterable[Request],
    period: StatsPeriod = StatsPeriod.month,
    request_type: Optional[RequestType] = None,
) -> dict:
    """
    Dashboard numbers: totals per status and per type, plus a per-period
    breakdown keyed on the requested usage date, oldest period first.
    """
    by_status = _empty_status_counts()
    by_type = Counter({t.value: 0 for t in RequestType})
    buckets = {}
    total = 0

    for request in requests:
        if request_type is not None and request.type != request_type:
            continue

        total += 1
        status = RequestStatus(request.status).value
        by_status[status] += 1
        by_type[request.type.value] += 1

        key = period_key(request.date, period)
        bucket = buckets.setdefault(key, {"total": 0, **_empty_status_counts()})
        bucket["total"] += 1
        bucket[status] += 1

    periods: List[dict] = [
        {"period": key, **counts}
        for key, counts in OrderedDict(sorted(buckets.items())).items()
    ]

    return {
        "total": total,
        "by_status": by_status,
        "by_type": dict(by_type),
        "period": StatsPeriod(period).value,
        "periods": periods,
    }
