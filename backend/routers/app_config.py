from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database import get_db
from schemas.app_config import AppConfigUpdate, AppConfigOut
from crud import app_config as crud_app_config
from utils.auth_utils import get_user_identifier, require_role

router = APIRouter(prefix="/configurations", tags=["Configurations"])
logger = logging.getLogger(__name__)


@router.get("", response_model=List[AppConfigOut])
def get_configs(
    name: Optional[str] = None,
    db: Session = Depends(get_db),
    user: dict = Depends(require_role(["admin"])),
):
    configs = crud_app_config.get_config(db, name=name)
    # Always return a list, even if empty
    return [configs] if name and configs else configs or []


@router.patch("/{name}", response_model=AppConfigOut)
def update_config(
    name: str,
    config: AppConfigUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_role(["admin"])),
):
    if name in crud_app_config.OVERRIDABLE_SETTINGS:
        try:
            valid = int(config.value) >= 1
        except ValueError:
            valid = False
        if not valid:
            raise HTTPException(status_code=400, detail=f"{name} must be a positive whole number of days")

    updated = crud_app_config.update_config_by_name(db, name, config, get_user_identifier(user))
    if not updated:
        raise HTTPException(status_code=404, detail="Configuration not found")
    return updated
