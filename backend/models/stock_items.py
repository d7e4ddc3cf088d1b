from sqlalchemy import Column, Integer, String, Numeric, Date, Enum, CheckConstraint
from sqlalchemy.orm import relationship
from decimal import Decimal
from database import Base
import enum
from models.audit_mixin import TimestampMixin
from services.stock_status import StockStatus, classify


class StockCategory(enum.Enum):
    MEDICINE = "Medicine"
    EQUIPMENT = "Equipment"
    CONSUMABLES = "Consumables"
    SURGICAL = "Surgical"
    OTHER = "Other"


class StockItem(Base, TimestampMixin):
    __tablename__ = "stock_items"
    __table_args__ = (
        CheckConstraint("quantity_in_cartons >= 0", name="ck_stock_items_quantity_non_negative"),
        CheckConstraint("units_per_pack >= 1", name="ck_stock_items_units_per_pack"),
        CheckConstraint("packs_per_carton >= 1", name="ck_stock_items_packs_per_carton"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    category = Column(Enum(StockCategory, values_callable=lambda e: [m.value for m in e]),
                      default=StockCategory.MEDICINE, nullable=False)
    manufacturer = Column(String, nullable=False)
    batch_number = Column(String, nullable=False)
    units_per_pack = Column(Integer, default=1, nullable=False)
    packs_per_carton = Column(Integer, default=1, nullable=False)
    quantity_in_cartons = Column(Integer, default=0, nullable=False) # the only stored stock figure
    pack_cost_price = Column(Numeric(12, 2), default=0, nullable=False)
    pack_selling_price = Column(Numeric(12, 2), default=0, nullable=False)
    manufacturing_date = Column(Date, nullable=True)
    expiry_date = Column(Date, nullable=False)
    reorder_level = Column(Integer, default=2, nullable=False) # in cartons
    location = Column(String, default="Main Storage", nullable=False)

    # Relationships
    audits = relationship("StockItemAudit", back_populates="stock_item", cascade="all, delete-orphan")

    @property
    def total_packs(self) -> int:
        return self.packs_per_carton * self.quantity_in_cartons

    @property
    def carton_selling_price(self) -> Decimal:
        return Decimal(self.pack_selling_price) * self.packs_per_carton

    @property
    def carton_cost_price(self) -> Decimal:
        return Decimal(self.pack_cost_price) * self.packs_per_carton

    @property
    def stock_value(self) -> Decimal:
        return self.carton_cost_price * self.quantity_in_cartons

    @property
    def packaging(self) -> str:
        return f"{self.units_per_pack}×{self.packs_per_carton}"

    @property
    def status(self) -> StockStatus:
        return classify(self)
