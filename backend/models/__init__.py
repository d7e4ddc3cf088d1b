from models.stock_items import StockItem, StockCategory
from models.stock_item_audit import StockItemAudit
from models.invoices import Invoice, PaymentMethod, PaymentStatus
from models.invoice_items import InvoiceItem
from models.customer_payments import CustomerPayment
from models.app_config import AppConfig
from models.audit_log import AuditLog
from models.number_series import NumberSeries

__all__ = ['AppConfig', 'AuditLog', 'CustomerPayment', 'Invoice', 'InvoiceItem', 'NumberSeries', 'PaymentMethod', 'PaymentStatus', 'StockCategory', 'StockItem', 'StockItemAudit',]
