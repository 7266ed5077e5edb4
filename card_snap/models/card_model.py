"""
Persisted representation of a loyalty card.

The persisted field names below are the on-disk compatibility contract; they
must not change without a migration.
"""
import logging
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict

from ..errors import MalformedRecordError
from .card import BarcodeFormat, LoyaltyCard

logger = logging.getLogger(__name__)

# attribute name -> persisted field name
PERSISTED_FIELDS = {
    "id": "id",
    "name": "name",
    "store_name": "store_name",
    "barcode_data": "barcode_data",
    "format": "format",
    "created_at": "created_at",
    "updated_at": "updated_at",
    "image_url": "image_url",
    "color_hex": "color_hex",
    "notes": "notes",
    "is_archived": "is_archived",
}

REQUIRED_FIELDS = (
    "id", "name", "store_name", "barcode_data", "format", "created_at", "updated_at",
)
OPTIONAL_STRING_FIELDS = ("image_url", "color_hex", "notes")


def _parse_timestamp(value: str, field: str, record_id: str) -> datetime:
    try:
        # fromisoformat only accepts a trailing 'Z' from 3.11 on
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        return datetime.fromisoformat(value)
    except ValueError as e:
        raise MalformedRecordError(
            f"Field '{field}' is not an ISO-8601 timestamp",
            field=field,
            record_id=record_id,
            technical_details=str(e)
        ) from e


class LoyaltyCardModel(BaseModel):
    """Flat, string-encoded mirror of LoyaltyCard used for storage"""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    store_name: str
    barcode_data: str
    format: str
    created_at: str
    updated_at: str
    image_url: Optional[str] = None
    color_hex: Optional[str] = None
    notes: Optional[str] = None
    is_archived: bool = False

    def to_json(self) -> Dict[str, Any]:
        """Serialize to the persisted field layout (fixed key order)"""
        return {persisted: getattr(self, attr) for attr, persisted in PERSISTED_FIELDS.items()}

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "LoyaltyCardModel":
        """
        Deserialize from the persisted field layout.

        Raises:
            MalformedRecordError: if a required field is missing or mistyped
        """
        if not isinstance(data, Mapping):
            raise MalformedRecordError(
                f"Record must be an object, got {type(data).__name__}"
            )

        record_id = data.get("id") if isinstance(data.get("id"), str) else None
        values: Dict[str, Any] = {}

        for attr in REQUIRED_FIELDS:
            key = PERSISTED_FIELDS[attr]
            if data.get(key) is None:
                raise MalformedRecordError(
                    f"Missing required field '{key}'", field=key, record_id=record_id
                )
            if not isinstance(data[key], str):
                raise MalformedRecordError(
                    f"Field '{key}' must be a string", field=key, record_id=record_id
                )
            values[attr] = data[key]

        for attr in OPTIONAL_STRING_FIELDS:
            key = PERSISTED_FIELDS[attr]
            value = data.get(key)
            if value is not None and not isinstance(value, str):
                raise MalformedRecordError(
                    f"Field '{key}' must be a string", field=key, record_id=record_id
                )
            values[attr] = value

        is_archived = data.get(PERSISTED_FIELDS["is_archived"])
        if is_archived is not None and not isinstance(is_archived, bool):
            raise MalformedRecordError(
                "Field 'is_archived' must be a boolean", field="is_archived", record_id=record_id
            )
        values["is_archived"] = bool(is_archived)

        return cls(**values)

    @classmethod
    def from_domain(cls, card: LoyaltyCard) -> "LoyaltyCardModel":
        return cls(
            id=card.id,
            name=card.name,
            store_name=card.store_name,
            barcode_data=card.barcode_data,
            format=card.format.value,
            created_at=card.created_at.isoformat(),
            updated_at=card.updated_at.isoformat(),
            image_url=card.image_url,
            color_hex=card.color_hex,
            notes=card.notes,
            is_archived=card.is_archived,
        )

    def to_domain(self) -> LoyaltyCard:
        """
        Convert to the domain entity.

        An unrecognized format token decodes as QR code rather than failing.

        Raises:
            MalformedRecordError: if a timestamp cannot be parsed
        """
        try:
            barcode_format = BarcodeFormat(self.format)
        except ValueError:
            logger.warning(
                f"Card {self.id} has unknown barcode format '{self.format}', using qrCode"
            )
            barcode_format = BarcodeFormat.QR_CODE

        return LoyaltyCard(
            id=self.id,
            name=self.name,
            store_name=self.store_name,
            barcode_data=self.barcode_data,
            format=barcode_format,
            created_at=_parse_timestamp(self.created_at, "created_at", self.id),
            updated_at=_parse_timestamp(self.updated_at, "updated_at", self.id),
            image_url=self.image_url,
            color_hex=self.color_hex,
            notes=self.notes,
            is_archived=self.is_archived,
        )

    def copy_with(self, **changes: Any) -> "LoyaltyCardModel":
        return self.model_copy(update=changes)

    def __str__(self) -> str:
        return f"LoyaltyCardModel(id={self.id}, name={self.name}, store_name={self.store_name})"
