import logging

from fastapi import APIRouter, Depends, Query

from printstream.analytics import service as analytics_service
from printstream.utils.errors import server_error
from printstream.utils.security import require_admin

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/analytics", tags=["Analytics"], dependencies=[Depends(require_admin)])


@router.get("/subscriptions")
def subscription_analytics(period_days: int = Query(30, alias="periodDays", ge=1, le=365)):
    try:
        return analytics_service.subscription_analytics(period_days)
    except Exception as e:
        logger.exception("analytics.views.subscription_analytics failed")
        raise server_error(e)


@router.get("/subscriptions/metrics")
def subscription_metrics():
    return analytics_service.subscription_metrics()
