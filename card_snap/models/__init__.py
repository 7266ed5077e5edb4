from .card import LoyaltyCard, BarcodeFormat, new_card_id, utc_now
from .card_model import LoyaltyCardModel, PERSISTED_FIELDS
from .card_orm import CardRecordORM, Base
from .converters import payload_to_record, record_to_payload, record_to_domain, domain_to_record, records_to_domain
from .result import Result, Success, Failure
from .stats import StorageStats

__all__ = [
    "LoyaltyCard",
    "BarcodeFormat",
    "new_card_id",
    "utc_now",
    "LoyaltyCardModel",
    "PERSISTED_FIELDS",
    "CardRecordORM",
    "Base",
    "payload_to_record",
    "record_to_payload",
    "record_to_domain",
    "domain_to_record",
    "records_to_domain",
    "Result",
    "Success",
    "Failure",
    "StorageStats",
]
