from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
import logging

from database import get_db
from schemas.payments import Payment, PaymentCreate
from schemas.ledgers import CustomerLedger, CustomerSummary
from services import ledger
from services.exceptions import BillingError
from utils.auth_utils import get_user_identifier, require_role
from routers.errors import to_http_exception

router = APIRouter(prefix="/payments", tags=["Payments"])
logger = logging.getLogger("payments")


@router.post("", response_model=Payment, status_code=status.HTTP_201_CREATED)
def create_payment(
    payment: PaymentCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_role(["admin"])),
):
    """Record a payment received from a customer."""
    user_identifier = get_user_identifier(user)
    try:
        db_payment = ledger.record_payment(db, payment, changed_by=user_identifier)
    except BillingError as e:
        logger.warning(f"Payment for {payment.customer_phone} rejected: {e.message}")
        raise to_http_exception(e)
    logger.info(f"Payment of {db_payment.amount_paid} from {db_payment.customer_phone} recorded by user {user_identifier}")
    return db_payment


@router.get("/customers", response_model=List[CustomerSummary])
def read_customers(db: Session = Depends(get_db)):
    """Every customer with billed/paid totals and balance, most recently active first."""
    return ledger.list_customers(db)


@router.get("/customer/{phone}", response_model=CustomerLedger)
def read_customer_ledger(phone: str, db: Session = Depends(get_db)):
    """Chronological ledger with running balance for one customer."""
    try:
        return ledger.build_ledger(db, phone)
    except BillingError as e:
        raise to_http_exception(e)
