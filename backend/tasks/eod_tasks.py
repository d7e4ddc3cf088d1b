import logging
from datetime import date
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import SessionLocal
from services.stock_alerts import build_alerts
from services.sales_analytics import billing_summary
from utils.date_utils import today_local
from utils.formatting import format_indian_currency

logger = logging.getLogger(__name__)


def run_eod_tasks(today: Optional[date] = None):
    """
    End-of-day summary: the day's billing and the current stock alerts.

    Runs from the scheduler with its own session. Delivery of the summary
    (email) belongs to the alerting service; here it is logged.
    Returns the summary so it can be inspected.
    """
    today = today or today_local()
    logger.info(f"Starting end-of-day tasks for {today}.")
    db: Session = SessionLocal()
    try:
        sales = billing_summary(db, today)
        alerts = build_alerts(db, today)
        summary = alerts["summary"]

        logger.info(
            f"EOD {today}: {sales['today_bills']} bills, revenue {format_indian_currency(sales['today_revenue'])}"
        )
        logger.info(
            f"EOD {today}: {summary['total_alerts']} stock alerts "
            f"(low {summary['low_stock_count']}, out {summary['out_of_stock_count']}, "
            f"expired {summary['expired_count']}, expiring soon {summary['expiring_soon_count']})"
        )
        for item in alerts["expired"]:
            logger.warning(f"Expired on shelf: '{item.name}' batch {item.batch_number}, expiry {item.expiry_date}")
        for item in alerts["out_of_stock"]:
            logger.warning(f"Out of stock: '{item.name}' batch {item.batch_number}")

        return {"date": today, "sales": sales, "alerts": summary}
    except SQLAlchemyError as e:
        logger.error(f"Error during end-of-day tasks: {e}", exc_info=True)
        raise
    finally:
        db.close()
