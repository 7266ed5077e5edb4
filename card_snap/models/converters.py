"""Utilities to convert between stored payloads, raw records and domain cards"""
import json
import logging
from typing import Any, Dict, Iterable, List, Optional

from ..errors import MalformedRecordError
from .card import LoyaltyCard
from .card_model import LoyaltyCardModel

logger = logging.getLogger(__name__)


def payload_to_record(payload: str, record_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Parse a stored JSON payload into a raw record

    Args:
        payload: JSON text as stored in the payload column
        record_id: Id of the row, for error reporting

    Returns:
        Raw record dict

    Raises:
        MalformedRecordError: if the payload is not a JSON object
    """
    try:
        record = json.loads(payload)
    except (TypeError, ValueError) as e:
        raise MalformedRecordError(
            "Stored payload is not valid JSON",
            record_id=record_id,
            technical_details=str(e)
        ) from e

    if not isinstance(record, dict):
        raise MalformedRecordError(
            f"Stored payload must be an object, got {type(record).__name__}",
            record_id=record_id
        )
    return record


def record_to_payload(record: Dict[str, Any]) -> str:
    """Serialize a raw record to the JSON text stored in the payload column"""
    return json.dumps(record, ensure_ascii=False)


def record_to_domain(record: Dict[str, Any]) -> LoyaltyCard:
    """
    Convert a raw record to a domain card

    Raises:
        MalformedRecordError: if the record fails required-field validation
    """
    return LoyaltyCardModel.from_json(record).to_domain()


def domain_to_record(card: LoyaltyCard) -> Dict[str, Any]:
    """Convert a domain card to a raw record in the persisted layout"""
    return LoyaltyCardModel.from_domain(card).to_json()


def records_to_domain(records: Iterable[Dict[str, Any]]) -> List[LoyaltyCard]:
    """
    Convert raw records to domain cards, skipping malformed ones

    Args:
        records: Raw records in storage order

    Returns:
        Domain cards in the same order, without the records that failed to decode
    """
    cards = []
    for record in records:
        try:
            cards.append(record_to_domain(record))
        except MalformedRecordError as e:
            logger.warning(f"Skipping malformed card record {e.record_id or '?'}: {e.message}")
    return cards
