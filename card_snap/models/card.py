import re
import uuid
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional, Tuple
from datetime import datetime, timezone
from enum import Enum


COLOR_HEX_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")


class BarcodeFormat(str, Enum):
    """Barcode symbology; values are the persisted tokens"""
    QR_CODE = "qrCode"
    CODE_128 = "code128"
    EAN_13 = "ean13"
    UPC_A = "upcA"
    CODE_39 = "code39"
    PDF_417 = "pdf417"

    @property
    def display_name(self) -> str:
        return FORMAT_DISPLAY_NAMES[self]


FORMAT_DISPLAY_NAMES = {
    BarcodeFormat.QR_CODE: "QR Code",
    BarcodeFormat.CODE_128: "Code 128",
    BarcodeFormat.EAN_13: "EAN-13",
    BarcodeFormat.UPC_A: "UPC-A",
    BarcodeFormat.CODE_39: "Code 39",
    BarcodeFormat.PDF_417: "PDF417",
}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_card_id() -> str:
    return f"card_{uuid.uuid4().hex}"


class LoyaltyCard(BaseModel):
    """Domain model of a loyalty card"""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique card identifier")
    name: str = Field(..., description="Display name")
    store_name: str = Field(..., description="Store the card belongs to")
    barcode_data: str = Field(..., description="Raw encoded barcode payload")
    format: BarcodeFormat = Field(..., description="Barcode symbology")
    created_at: datetime = Field(..., description="Creation time (UTC)")
    updated_at: datetime = Field(..., description="Last modification time (UTC)")
    image_url: Optional[str] = None
    color_hex: Optional[str] = Field(None, description="Card color as #RRGGBB")
    notes: Optional[str] = None
    is_archived: bool = False

    @field_validator("created_at", "updated_at")
    @classmethod
    def ensure_utc(cls, value: datetime) -> datetime:
        # Naive timestamps are taken to be UTC already
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def validation_errors(self, now: Optional[datetime] = None) -> List[Tuple[str, str]]:
        """
        Check business rules that construction does not enforce.

        Args:
            now: Current UTC time to judge creation time against (defaults to utc_now())

        Returns:
            List of (field, message) pairs; empty when the card is valid
        """
        errors = []
        if not self.name.strip():
            errors.append(("name", "Card name must not be empty"))
        if not self.store_name.strip():
            errors.append(("store_name", "Store name must not be empty"))
        if not self.barcode_data.strip():
            errors.append(("barcode_data", "Barcode data must not be empty"))
        if not isinstance(self.format, BarcodeFormat):
            errors.append(("format", f"Unrecognized barcode format: {self.format!r}"))
        if self.created_at > (now or utc_now()):
            errors.append(("created_at", "Creation time is in the future"))
        if self.updated_at < self.created_at:
            errors.append(("updated_at", "Update time precedes creation time"))
        if self.color_hex is not None and not COLOR_HEX_PATTERN.match(self.color_hex):
            errors.append(("color_hex", f"Color must look like #RRGGBB, got {self.color_hex!r}"))
        return errors

    @property
    def is_valid(self) -> bool:
        return not self.validation_errors()

    @property
    def format_display_name(self) -> str:
        return self.format.display_name

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match on card or store name"""
        query = query.strip().lower()
        return query in self.name.lower() or query in self.store_name.lower()

    def __str__(self) -> str:
        return f"LoyaltyCard(id={self.id}, name={self.name}, store_name={self.store_name})"
