"""Unit tests for raw record normalization"""

import pytest

from branq_scoring.domain.models import StakingStatus
from branq_scoring.domain.normalizer import (
    normalize_staking_record,
    normalize_staking_records,
    normalize_transaction,
    normalize_transactions,
    resolve_fee,
    resolve_timestamp,
)
from conftest import WALLET


@pytest.mark.parametrize(
    "raw, expected",
    [
        ({"timestamp": 1_600_000_000}, 1_600_000_000),
        ({"blockTime": 1_600_000_000}, 1_600_000_000),
        ({"timestamp": "1600000000"}, 1_600_000_000),
        ({"timestamp": 1_600_000_000_000}, 1_600_000_000),  # milliseconds
        ({"timestamp": -5}, 0),
        ({"timestamp": "yesterday"}, 0),
        ({}, 0),
    ],
)
def test_resolve_timestamp(raw, expected):
    assert resolve_timestamp(raw) == expected


def test_timestamp_prefers_timestamp_over_block_time():
    assert resolve_timestamp({"timestamp": 1_600_000_000, "blockTime": 1_500_000_000}) == 1_600_000_000


def test_string_amount_is_stripped_of_decoration():
    tx = normalize_transaction({"timestamp": 1_600_000_000, "amount": "1,234.5 SOL"})

    assert tx.amount == 1234.5
    assert tx.currency == "SOL"
    assert tx.type == "TRANSFER"


def test_native_transfers_are_netted_for_the_wallet():
    raw = {
        "timestamp": 1_600_000_000,
        "nativeTransfers": [
            {"fromUserAccount": "Other", "toUserAccount": WALLET, "amount": 2_000_000_000},
            {"fromUserAccount": WALLET, "toUserAccount": "Other", "amount": 500_000_000},
        ],
    }

    tx = normalize_transaction(raw, WALLET)

    assert tx.amount == pytest.approx(1.5)
    assert tx.currency == "SOL"
    assert tx.native_volume == pytest.approx(2.5)
    assert tx.source == "Other"


def test_swap_description_outflow_when_wallet_is_source():
    raw = {
        "timestamp": 1_600_000_000,
        "type": "SWAP",
        "source": WALLET,
        "description": "wallet swapped 2 SOL for 300 USDC",
    }

    tx = normalize_transaction(raw, WALLET)

    assert tx.amount == -2.0
    assert tx.currency == "SOL"


def test_swap_description_inflow_when_wallet_is_not_source():
    raw = {
        "timestamp": 1_600_000_000,
        "type": "SWAP",
        "source": "JUPITER",
        "description": "wallet swapped 2 SOL for 300 usdc",
    }

    tx = normalize_transaction(raw, WALLET)

    assert tx.amount == 300.0
    assert tx.currency == "USDC"


def test_token_transfer_touching_wallet():
    raw = {
        "timestamp": 1_600_000_000,
        "tokenTransfers": [
            {"fromUserAccount": WALLET, "toUserAccount": "Other", "tokenAmount": 25, "tokenSymbol": "USDC"},
        ],
    }

    tx = normalize_transaction(raw, WALLET)

    assert tx.amount == -25.0
    assert tx.currency == "USDC"
    assert tx.token_volume == 25.0


def test_account_data_native_balance_change():
    raw = {
        "timestamp": 1_600_000_000,
        "accountData": [{"account": WALLET, "nativeBalanceChange": -1_000_000_000, "tokenBalanceChanges": []}],
    }

    tx = normalize_transaction(raw, WALLET)

    assert tx.amount == pytest.approx(-1.0)
    assert tx.currency == "SOL"


def test_fee_payer_outflow_when_nothing_else_moves():
    raw = {"timestamp": 1_600_000_000, "fee": 5000, "feePayer": WALLET}

    tx = normalize_transaction(raw, WALLET)

    assert tx.amount == pytest.approx(-0.000005)
    assert tx.fee == pytest.approx(0.000005)


def test_first_transfer_used_without_wallet():
    raw = {
        "timestamp": 1_600_000_000,
        "nativeTransfers": [{"fromUserAccount": "A", "toUserAccount": "B", "amount": 3_000_000_000}],
    }

    tx = normalize_transaction(raw)

    assert tx.amount == pytest.approx(3.0)
    assert tx.currency == "SOL"


@pytest.mark.parametrize(
    "fee, expected",
    [
        (5000, 0.000005),
        (0.000005, 0.000005),
        ("5000", 0.000005),
        (-10, 0.0),
        (None, 0.0),
    ],
)
def test_resolve_fee(fee, expected):
    assert resolve_fee({"fee": fee}) == pytest.approx(expected)


def test_malformed_record_degrades_to_zero():
    tx = normalize_transaction("not a record")

    assert tx.timestamp == 0
    assert tx.amount == 0.0
    assert tx.currency == "SOL"
    assert not tx.has_timestamp


def test_no_record_is_dropped():
    raws = [{"timestamp": 1_600_000_000, "amount": 1}, None, 42, {"amount": "abc"}]

    transactions = normalize_transactions(raws)

    assert len(transactions) == 4
    assert transactions[0].amount == 1.0
    assert all(tx.amount == 0.0 for tx in transactions[1:])


def test_type_and_currency_are_upper_cased():
    tx = normalize_transaction({"timestamp": 1, "amount": 5, "currency": "usdc", "type": "swap"})

    assert tx.currency == "USDC"
    assert tx.type == "SWAP"


def test_normalize_transactions_handles_none():
    assert normalize_transactions(None) == []


def test_staking_record_from_known_validator():
    record = normalize_staking_record(
        {
            "validatorAddress": "9QU2QSxhb24FUX3Tu2FpPVXELRiMiXfUPuVehganrC5K",
            "amount": "12.5",
            "timestamp": 1_600_000_000,
        }
    )

    assert record.validator_name == "Everstake"
    assert record.amount == 12.5
    assert record.status == StakingStatus.ACTIVE
    assert record.is_locked


def test_staking_deactivation_type():
    record = normalize_staking_record({"validatorAddress": "Abcdefghijkl", "amount": 1, "type": "STAKE_DEACTIVATE"})

    assert record.status == StakingStatus.DEACTIVATING
    assert not record.is_locked
    assert record.validator_name == "Validator Abcdef...ijkl"


def test_staking_explicit_status_and_missing_address():
    record = normalize_staking_record({"amount": 1, "status": "delegated"})

    assert record.status == StakingStatus.DELEGATED
    assert record.validator_address == "Unknown"
    assert record.validator_name == "Unknown Validator"


def test_non_object_staking_records_are_skipped():
    records = normalize_staking_records([{"amount": 1}, "junk", None])

    assert len(records) == 1
