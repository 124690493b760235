"""
Indicateurs d'abonnement (admin), calculés à partir des profils.
"""
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

from printstream.admin import repository as admin_repository
from printstream.config import SUBSCRIPTION_MONTHLY_PRICE

TRACKED_STATUSES = ("active", "trialing", "past_due", "canceled", "incomplete")


def _percent(part: int, whole: int, digits: int = 0) -> float:
    if not whole:
        return 0
    value = round(part / whole * 100, digits)
    return int(value) if digits == 0 else value


def _growth(profiles: List[dict], since: datetime) -> List[Dict[str, Any]]:
    since_day = since.date().isoformat()
    per_day: Counter = Counter()
    for p in profiles:
        created = str(p.get("created_at") or "")
        status = p.get("subscription_status") or "none"
        if not created or status == "none":
            continue
        day = created.split("T")[0]
        if day >= since_day:
            per_day[day] += 1
    return [{"date": day, "count": per_day[day]} for day in sorted(per_day)]


# module printstream.analytics.service
def subscription_analytics(period_days: int = 30) -> Dict[str, Any]:
    profiles = admin_repository.fetch_profile_statuses()
    since = datetime.now(timezone.utc) - timedelta(days=period_days)

    counts = Counter(p.get("subscription_status") or "none" for p in profiles)
    by_status = {s: counts.get(s, 0) for s in TRACKED_STATUSES}
    total = len(profiles)
    subscribed = total - counts.get("none", 0)
    return {
        "subscriptionGrowth": _growth(profiles, since),
        "subscriptionsByStatus": by_status,
        "retentionRate": {
            "totalSubscriptions": total,
            "retainedSubscriptions": by_status["active"],
            "retentionRate": _percent(by_status["active"], total),
        },
        "conversionRate": {"conversionRate": _percent(subscribed, total)},
    }


def subscription_metrics() -> Dict[str, Any]:
    """MRR estimé (abonnés actifs x prix mensuel) et churn (annulés / abonnés connus)."""
    active = admin_repository.count_table_rows("profiles", eq={"subscription_status": "active"})
    trialing = admin_repository.count_table_rows("profiles", eq={"subscription_status": "trialing"})
    canceled = admin_repository.count_table_rows("profiles", eq={"subscription_status": "canceled"})
    return {
        "activeSubscriptions": active,
        "trialSubscriptions": trialing,
        "mrr": f"{active * SUBSCRIPTION_MONTHLY_PRICE:.2f}",
        "churnRate": _percent(canceled, active + trialing + canceled, 1),
    }
