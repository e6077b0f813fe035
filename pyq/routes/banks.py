"""Question-bank listing endpoints."""
import logging

from fastapi import APIRouter, HTTPException

from pyq.errors import MalformedBankError
from pyq.services.bank_service import list_bank_ids, load_stored_bank, serialize_bank_metadata
from pyq.utils import validate_id

router = APIRouter(prefix="/api/banks", tags=["banks"])
logger = logging.getLogger(__name__)


@router.get("")
def list_banks() -> list[dict[str, object]]:
    """List stored question banks; unreadable ones are skipped."""
    banks = []
    for bank_id in list_bank_ids():
        try:
            bank = load_stored_bank(bank_id)
        except MalformedBankError as e:
            logger.warning(f"Skipping question bank {bank_id}: {e}")
            continue
        banks.append(serialize_bank_metadata(bank_id, bank))
    return banks


@router.get("/{bank_id}")
def get_bank(bank_id: str) -> dict[str, object]:
    """Metadata for one stored question bank."""
    bank_id = validate_id("bankId", bank_id)
    try:
        bank = load_stored_bank(bank_id)
    except MalformedBankError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return serialize_bank_metadata(bank_id, bank)
