import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tailor_billing import models, schemas
from tailor_billing.config import settings
from tailor_billing.database import get_db

logger = logging.getLogger(__name__)

UPI_ID_KEY = "upi_id"

router = APIRouter(
    prefix="/api/settings",
    tags=["Settings"]
)


def get_upi_id(db: Session) -> str:
    row = db.get(models.ShopSetting, UPI_ID_KEY)
    if row and row.value:
        return row.value
    return settings.DEFAULT_UPI_ID


@router.get("/upi")
def read_upi_settings(db: Session = Depends(get_db)):
    return {"upi_id": get_upi_id(db)}


@router.put("/upi")
def update_upi_settings(
    body: schemas.UpiSettingsUpdate,
    db: Session = Depends(get_db)
):
    row = db.get(models.ShopSetting, UPI_ID_KEY)
    if row is None:
        row = models.ShopSetting(key=UPI_ID_KEY)
        db.add(row)

    row.value = body.upi_id.strip()
    db.commit()

    logger.info("UPI id updated")
    return {"upi_id": row.value}
