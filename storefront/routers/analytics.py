from fastapi import APIRouter, Depends, Query
from sqlmodel import Session
from storefront.db.session import get_session
from storefront.models.user import User
from storefront.routers.auth import get_current_superuser
from storefront.services.analytics import AnalyticsService

router = APIRouter()

def get_analytics_service(session: Session = Depends(get_session)) -> AnalyticsService:
    return AnalyticsService(session)

@router.get("/")
def get_analytics(
    days: int = Query(7, ge=1, le=366),
    current_user: User = Depends(get_current_superuser),
    service: AnalyticsService = Depends(get_analytics_service)
):
    """Totals plus a zero-filled daily sales series for the dashboard charts."""
    return service.get_dashboard(days=days)
