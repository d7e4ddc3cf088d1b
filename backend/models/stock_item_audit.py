from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from database import Base
from utils.date_utils import now_local


class StockItemAudit(Base):
    __tablename__ = "stock_item_audit"

    id = Column(Integer, primary_key=True, index=True)
    stock_item_id = Column(Integer, ForeignKey("stock_items.id"), nullable=False, index=True)
    change_type = Column(String, nullable=False)  # "sale", "manual"
    change_amount = Column(Integer, nullable=False) # cartons, negative for sales
    old_quantity = Column(Integer, nullable=False)
    new_quantity = Column(Integer, nullable=False)
    changed_by = Column(String, nullable=True)
    timestamp = Column(DateTime(timezone=True), default=now_local)
    note = Column(String, nullable=True)

    stock_item = relationship("StockItem", back_populates="audits")
