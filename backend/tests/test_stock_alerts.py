from datetime import timedelta

from conftest import make_item
from models.app_config import AppConfig
from services.stock_alerts import build_alerts


def names(items):
    return sorted(item.name for item in items)


def test_alert_buckets(db, fixed_today):
    far = fixed_today + timedelta(days=300)
    make_item(db, name="Healthy", quantity_in_cartons=40, expiry_date=far)
    make_item(db, name="Low", quantity_in_cartons=2, reorder_level=2, expiry_date=far)
    make_item(db, name="Empty", quantity_in_cartons=0, expiry_date=far)
    make_item(db, name="Expired", quantity_in_cartons=9, expiry_date=fixed_today - timedelta(days=1))
    make_item(db, name="Soon and low", quantity_in_cartons=1, expiry_date=fixed_today + timedelta(days=10))
    make_item(db, name="Soon", quantity_in_cartons=30, expiry_date=fixed_today + timedelta(days=30))

    alerts = build_alerts(db, fixed_today)

    assert names(alerts["low_stock"]) == ["Low", "Soon and low"]
    assert names(alerts["out_of_stock"]) == ["Empty"]
    assert names(alerts["expired"]) == ["Expired"]
    assert names(alerts["expiring_soon"]) == ["Soon", "Soon and low"]
    assert alerts["summary"] == {
        "low_stock_count": 2,
        "out_of_stock_count": 1,
        "expired_count": 1,
        "expiring_soon_count": 2,
        "total_alerts": 6,
    }


def test_expiring_soon_window_can_be_overridden(db, fixed_today):
    make_item(db, name="Soon", expiry_date=fixed_today + timedelta(days=20))

    assert len(build_alerts(db, fixed_today)["expiring_soon"]) == 1

    db.add(AppConfig(name="EXPIRING_SOON_DAYS", value="7"))
    db.commit()
    assert build_alerts(db, fixed_today)["expiring_soon"] == []


def test_unusable_override_falls_back_to_default(db, fixed_today):
    make_item(db, name="Soon", expiry_date=fixed_today + timedelta(days=20))
    db.add(AppConfig(name="EXPIRING_SOON_DAYS", value="soon"))
    db.commit()
    assert len(build_alerts(db, fixed_today)["expiring_soon"]) == 1
