import logging

from sqlalchemy.orm import Session

import settings
from models.app_config import AppConfig
from schemas.app_config import AppConfigUpdate
from utils.date_utils import now_local

# Audit imports
from crud.audit_log import create_audit_log
from schemas.audit_log import AuditLogCreate
from utils import sqlalchemy_to_dict

logger = logging.getLogger("app_config")

# Settings that may be overridden at runtime, with their environment defaults
OVERRIDABLE_SETTINGS = {
    "EXPIRING_SOON_DAYS": lambda: settings.EXPIRING_SOON_DAYS,
    "REORDER_WINDOW_DAYS": lambda: settings.REORDER_WINDOW_DAYS,
}


# Get config by name (or all configs)
def get_config(db: Session, name: str = None):
    if name:
        return db.query(AppConfig).filter(AppConfig.name == name).first()
    return db.query(AppConfig).order_by(AppConfig.name).all()


def get_int_setting(db: Session, name: str) -> int:
    """Positive integer setting: the app_config override if there is a usable one, else the environment value."""
    default = OVERRIDABLE_SETTINGS[name]()
    db_config = get_config(db, name=name)
    if db_config is None:
        return default
    try:
        value = int(db_config.value)
    except ValueError:
        logger.warning(f"Ignoring non-integer override {name}={db_config.value!r}, using {default}")
        return default
    if value < 1:
        logger.warning(f"Ignoring non-positive override {name}={value}, using {default}")
        return default
    return value


# Update config by name; overridable settings are created on first write
def update_config_by_name(db: Session, name: str, config: AppConfigUpdate, user_id: str):
    db_config = get_config(db, name=name)
    if db_config:
        old_values = sqlalchemy_to_dict(db_config)
        action = 'UPDATE'
        for field, value in config.model_dump(exclude_unset=True).items():
            setattr(db_config, field, value)
        db_config.updated_at = now_local()
        db_config.updated_by = user_id
    elif name in OVERRIDABLE_SETTINGS:
        old_values = {}
        action = 'CREATE'
        db_config = AppConfig(name=name, value=config.value, created_by=user_id)
        db.add(db_config)
    else:
        return None

    db.flush()
    log_entry = AuditLogCreate(
        table_name='app_config',
        record_id=db_config.id,
        changed_by=user_id,
        action=action,
        old_values=old_values,
        new_values=sqlalchemy_to_dict(db_config)
    )
    create_audit_log(db, log_entry)
    db.commit()
    db.refresh(db_config)
    logger.info(f"Configuration '{name}' set to '{db_config.value}' by {user_id}")
    return db_config
