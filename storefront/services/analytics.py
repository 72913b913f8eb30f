from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional

from sqlalchemy import func
from sqlmodel import Session, select

from storefront.models.order import Order
from storefront.models.product import Product
from storefront.models.user import User
from storefront.utils.clock import utcnow


class AnalyticsService:
    def __init__(self, session: Session):
        self.session = session

    def get_analytics_data(self) -> dict:
        total_users = self.session.exec(select(func.count(User.id)).where(User.is_active == True)).one()
        total_products = self.session.exec(select(func.count(Product.id)).where(Product.is_active == True)).one()
        total_sales, total_revenue = self.session.exec(
            select(func.count(Order.id), func.coalesce(func.sum(Order.total_amount), 0))
        ).one()

        return {
            "users": total_users,
            "products": total_products,
            "totalSales": total_sales,
            "totalRevenue": float(total_revenue),
        }

    def get_daily_sales_data(self, start_date: date, end_date: date) -> List[dict]:
        """One entry per calendar day in [start_date, end_date], zero-filled."""
        day = func.date(Order.created_at)
        rows = self.session.exec(
            select(day, func.count(Order.id), func.sum(Order.total_amount))
            .where(
                Order.created_at >= datetime.combine(start_date, time.min, tzinfo=timezone.utc),
                Order.created_at < datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=timezone.utc),
            )
            .group_by(day)
        ).all()

        # SQLite hands back strings, PostgreSQL date objects
        by_day = {str(d): (sales, float(revenue or 0)) for d, sales, revenue in rows}

        data = []
        current = start_date
        while current <= end_date:
            sales, revenue = by_day.get(current.isoformat(), (0, 0.0))
            data.append({"date": current.isoformat(), "sales": sales, "revenue": revenue})
            current += timedelta(days=1)
        return data

    def get_dashboard(self, days: int = 7, end_date: Optional[date] = None) -> dict:
        end_date = end_date or utcnow().date()
        start_date = end_date - timedelta(days=days - 1)
        return {
            "analyticsData": self.get_analytics_data(),
            "dailySalesData": self.get_daily_sales_data(start_date, end_date),
        }
