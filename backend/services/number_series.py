import logging

from sqlalchemy import update, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from models.number_series import NumberSeries
from services.exceptions import StorageError

logger = logging.getLogger("number_series")

INVOICE_SERIES = "invoice"


def _increment(counter_db: Session, name: str):
    result = counter_db.execute(
        update(NumberSeries)
        .where(NumberSeries.name == name)
        .values(last_value=NumberSeries.last_value + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        return None
    return counter_db.execute(select(NumberSeries.last_value).where(NumberSeries.name == name)).scalar_one()


def allocate_number(db: Session, name: str) -> int:
    """
    Hand out the next number of a series in its own committed transaction.

    The number stays consumed even if the document that asked for it is never
    saved, so numbers can have gaps but are never handed out twice.
    """
    with Session(bind=db.get_bind()) as counter_db:
        try:
            value = _increment(counter_db, name)
            if value is None:
                try:
                    counter_db.add(NumberSeries(name=name, last_value=1))
                    counter_db.commit()
                    return 1
                except IntegrityError:
                    # Another request created the series first
                    counter_db.rollback()
                    value = _increment(counter_db, name)
            counter_db.commit()
            return value
        except SQLAlchemyError as e:
            counter_db.rollback()
            logger.exception(f"Could not allocate next number for series '{name}'")
            raise StorageError(f"Could not allocate a number for '{name}'") from e


def format_number(prefix: str, value: int, padding: int) -> str:
    return f"{prefix}{str(value).zfill(padding)}"
