"""
Transaction normalizer - all defensive parsing of raw indexer records happens here.

Raw records arrive as loosely typed dicts: amounts as strings or numbers,
timestamps under ``timestamp`` or ``blockTime``, value movements buried in
``tokenTransfers`` / ``nativeTransfers`` / ``accountData``. Every record is
mapped to exactly one NormalizedTransaction. Nothing is dropped and nothing
raises; unusable fields fall back to zero or a default and are logged.
"""

import logging
import re
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from branq_scoring.config import settings
from branq_scoring.domain.exceptions import InvalidTransactionDataError
from branq_scoring.domain.models import NormalizedTransaction, StakingRecord, StakingStatus
from branq_scoring.domain.protocols import ProtocolRegistry, get_registry
from branq_scoring.utils.numeric import parse_decimal, parse_int

LAMPORTS_PER_SOL = 1_000_000_000
MAX_TIMESTAMP = 253_402_300_799  # 9999-12-31T23:59:59Z
DEFAULT_TYPE = "TRANSFER"

_SWAP_PATTERN = re.compile(r"swapped\s+([\d.]+)\s+(\w+)\s+for\s+([\d.]+)\s+(\w+)", re.IGNORECASE)


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _list(value: Any) -> List[Mapping[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def resolve_timestamp(raw: Mapping[str, Any]) -> int:
    """``timestamp ?? blockTime ?? 0`` in epoch seconds; millisecond values are scaled down"""
    value = raw.get("timestamp")
    if value is None:
        value = raw.get("blockTime")
    timestamp = parse_int(value)

    if timestamp > MAX_TIMESTAMP:
        timestamp //= 1000
    if timestamp <= 0 or timestamp > MAX_TIMESTAMP:
        return 0
    return timestamp


def _lamports_to_sol(value: Any) -> float:
    return parse_decimal(value) / LAMPORTS_PER_SOL


def _token_symbol(transfer: Mapping[str, Any], fallback: str = "Unknown") -> str:
    return _text(transfer.get("tokenSymbol")) or _text(transfer.get("mint")) or fallback


def _amount_from_swap(raw: Mapping[str, Any], wallet: str) -> Optional[Tuple[float, str]]:
    match = _SWAP_PATTERN.search(_text(raw.get("description")))
    if match:
        amount_in, token_in, amount_out, token_out = match.groups()
        if _text(raw.get("source")).lower() == wallet.lower():
            return -parse_decimal(amount_in), token_in
        return parse_decimal(amount_out), token_out

    for transfer in _list(raw.get("tokenTransfers")):
        if transfer.get("fromUserAccount") == wallet:
            return -abs(parse_decimal(transfer.get("tokenAmount"))), _token_symbol(transfer)
        if transfer.get("toUserAccount") == wallet:
            return abs(parse_decimal(transfer.get("tokenAmount"))), _token_symbol(transfer)
    return None


def _amount_from_native(raw: Mapping[str, Any], wallet: str) -> Optional[Tuple[float, str]]:
    inflow = 0.0
    outflow = 0.0
    for transfer in _list(raw.get("nativeTransfers")):
        amount = _lamports_to_sol(transfer.get("amount"))
        if transfer.get("toUserAccount") == wallet:
            inflow += amount
        elif transfer.get("fromUserAccount") == wallet:
            outflow += amount
    net = inflow - outflow
    return (net, "SOL") if net else None


def _amount_from_tokens(raw: Mapping[str, Any], wallet: str) -> Optional[Tuple[float, str]]:
    for transfer in _list(raw.get("tokenTransfers")):
        if transfer.get("toUserAccount") == wallet:
            return parse_decimal(transfer.get("tokenAmount")), _token_symbol(transfer, "Unknown Token")
        if transfer.get("fromUserAccount") == wallet:
            return -parse_decimal(transfer.get("tokenAmount")), _token_symbol(transfer, "Unknown Token")
    return None


def _amount_from_account_data(raw: Mapping[str, Any], wallet: str) -> Optional[Tuple[float, str]]:
    for account in _list(raw.get("accountData")):
        for change in _list(account.get("tokenBalanceChanges")):
            if change.get("userAccount") != wallet:
                continue
            raw_amount = change.get("rawTokenAmount")
            if isinstance(raw_amount, dict) and raw_amount.get("tokenAmount") and raw_amount.get("decimals"):
                decimals = parse_int(raw_amount.get("decimals"))
                amount = parse_decimal(raw_amount.get("tokenAmount")) / (10 ** max(0, min(decimals, 18)))
            else:
                amount = parse_decimal(change.get("amount"))
            return amount, _text(change.get("symbol")) or _text(change.get("mint")) or "Unknown Token"

        if account.get("account") == wallet and account.get("nativeBalanceChange"):
            return _lamports_to_sol(account.get("nativeBalanceChange")), "SOL"
    return None


def _amount_from_first_transfer(raw: Mapping[str, Any]) -> Optional[Tuple[float, str]]:
    """Direction is unknown without a wallet address, so the value is taken as-is"""
    token_transfers = _list(raw.get("tokenTransfers"))
    if token_transfers:
        return parse_decimal(token_transfers[0].get("tokenAmount")), _token_symbol(token_transfers[0], "Unknown Token")
    native_transfers = _list(raw.get("nativeTransfers"))
    if native_transfers:
        return _lamports_to_sol(native_transfers[0].get("amount")), "SOL"
    return None


def resolve_amount(raw: Mapping[str, Any], wallet: str = "") -> Tuple[float, str]:
    """
    Signed amount and currency of a raw record.

    Resolution order (first non-empty wins):
    1. SWAP description / token legs touching the wallet
    2. Net native transfers touching the wallet (lamports -> SOL)
    3. Token transfers touching the wallet
    4. accountData token or native balance changes for the wallet
    5. The record's own ``amount`` field
    6. Fee paid by the wallet, as an outflow
    7. First token or native transfer, unsigned
    """
    default_currency = settings.default_currency

    if wallet:
        steps = [_amount_from_native, _amount_from_tokens, _amount_from_account_data]
        if _text(raw.get("type")).upper() == "SWAP":
            steps.insert(0, _amount_from_swap)
        for step in steps:
            resolved = step(raw, wallet)
            if resolved is not None:
                return resolved

    if raw.get("amount") not in (None, ""):
        return parse_decimal(raw.get("amount")), _text(raw.get("currency")) or default_currency

    if wallet and raw.get("fee") and raw.get("feePayer") == wallet:
        return -resolve_fee(raw), "SOL"

    resolved = _amount_from_first_transfer(raw)
    if resolved is not None:
        return resolved

    return 0.0, _text(raw.get("currency")) or default_currency


def resolve_fee(raw: Mapping[str, Any]) -> float:
    """Fee in SOL; integer values (or anything >= 1) are lamports"""
    fee = raw.get("fee")
    value = max(parse_decimal(fee), 0.0)
    if isinstance(fee, int) or value >= 1:
        return value / LAMPORTS_PER_SOL
    return value


def _volumes(raw: Mapping[str, Any]) -> Tuple[float, float]:
    token_volume = sum(abs(parse_decimal(t.get("tokenAmount"))) for t in _list(raw.get("tokenTransfers")))
    native_volume = sum(abs(_lamports_to_sol(t.get("amount"))) for t in _list(raw.get("nativeTransfers")))
    return token_volume, native_volume


def _build(raw: Mapping[str, Any], wallet: str) -> NormalizedTransaction:
    if not isinstance(raw, dict):
        raise InvalidTransactionDataError(f"Expected an object, got {type(raw).__name__}")

    amount, currency = resolve_amount(raw, wallet)
    token_volume, native_volume = _volumes(raw)
    native_transfers = _list(raw.get("nativeTransfers"))
    first_native = native_transfers[0] if native_transfers else {}

    return NormalizedTransaction(
        timestamp=resolve_timestamp(raw),
        amount=amount,
        currency=(currency or settings.default_currency).upper(),
        type=(_text(raw.get("type")) or DEFAULT_TYPE).upper(),
        source=_text(raw.get("source")) or _text(first_native.get("fromUserAccount")),
        destination=_text(raw.get("destination")) or _text(first_native.get("toUserAccount")),
        description=_text(raw.get("description")),
        protocol=_text(raw.get("protocol")),
        program_id=_text(raw.get("programId")),
        fee=resolve_fee(raw),
        signature=_text(raw.get("signature")),
        token_volume=token_volume,
        native_volume=native_volume,
    )


def normalize_transaction(raw: Any, wallet_address: str = "") -> NormalizedTransaction:
    """Normalize one raw record; never raises"""
    try:
        tx = _build(raw, wallet_address)
    except (InvalidTransactionDataError, TypeError, ValueError, AttributeError, OverflowError) as e:
        signature = raw.get("signature") if isinstance(raw, dict) else None
        logging.debug(
            f"Transaction degraded to defaults: {e}",
            extra={"signature": signature, "step": "normalize"},
        )
        return NormalizedTransaction(
            timestamp=0, amount=0.0, currency=settings.default_currency, type=DEFAULT_TYPE
        )

    if tx.amount == 0:
        logging.debug(
            "No amount resolved for transaction",
            extra={"signature": tx.signature or None, "step": "normalize"},
        )
    return tx


def normalize_transactions(
    raw_transactions: Optional[Iterable[Any]], wallet_address: str = ""
) -> List[NormalizedTransaction]:
    """Normalize every raw record, preserving order and count"""
    if not raw_transactions:
        return []
    return [normalize_transaction(raw, wallet_address) for raw in raw_transactions]


def _staking_status(raw: Mapping[str, Any]) -> StakingStatus:
    if _text(raw.get("type")).upper() == "STAKE_DEACTIVATE":
        return StakingStatus.DEACTIVATING
    status = _text(raw.get("status")).lower()
    for candidate in StakingStatus:
        if candidate.value.lower() == status:
            return candidate
    return StakingStatus.ACTIVE


def normalize_staking_record(
    raw: Any, registry: Optional[ProtocolRegistry] = None
) -> Optional[StakingRecord]:
    """Normalize one raw staking entry; non-object entries yield None"""
    if not isinstance(raw, dict):
        logging.debug("Skipping non-object staking record", extra={"step": "normalize_staking"})
        return None

    registry = registry or get_registry()
    address = _text(raw.get("validatorAddress")) or "Unknown"
    return StakingRecord(
        validator_address=address,
        amount=parse_decimal(raw.get("amount")),
        status=_staking_status(raw),
        timestamp=resolve_timestamp(raw),
        validator_name=_text(raw.get("validatorName")) or registry.validator_name(address),
    )


def normalize_staking_records(
    raw_records: Optional[Iterable[Any]], registry: Optional[ProtocolRegistry] = None
) -> List[StakingRecord]:
    if not raw_records:
        return []
    records = (normalize_staking_record(raw, registry) for raw in raw_records)
    return [record for record in records if record is not None]
