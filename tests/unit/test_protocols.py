"""Unit tests for the protocol registry"""

import json

import pytest

from branq_scoring.domain.exceptions import ProtocolRegistryError
from branq_scoring.domain.protocols import (
    DEFAULT_REGISTRY_PATH,
    RISK_HIGH,
    RISK_MEDIUM,
    RISK_SAFE,
    build_registry,
    get_registry,
    load_registry,
)


@pytest.fixture
def registry():
    return load_registry()


def test_packaged_registry_loads(registry):
    assert registry.version == "2024.06.1"
    assert "SOL" in registry.blue_chip_assets
    assert len(registry.tools) == 6


def test_get_registry_is_cached():
    assert get_registry() is get_registry()


def test_lending_protocol_matches_whole_words(registry):
    assert registry.is_lending_protocol("Solend")
    assert registry.is_lending_protocol("", "deposit on port finance")
    assert not registry.is_lending_protocol("transport fee")


def test_collateral_source_is_case_insensitive(registry):
    assert registry.is_collateral_source("kamino")
    assert not registry.is_collateral_source("JUPITER")


@pytest.mark.parametrize(
    "label, tier",
    [
        ("casino-royale", RISK_HIGH),
        ("leveraged derivatives", RISK_HIGH),
        ("dex aggregator", RISK_MEDIUM),
        ("staking pool", RISK_SAFE),
        ("something new", RISK_MEDIUM),
    ],
)
def test_risk_tier(registry, label, tier):
    assert registry.risk_tier(label) == tier


def test_validator_names(registry):
    assert registry.validator_name("9QU2QSxhb24FUX3Tu2FpPVXELRiMiXfUPuVehganrC5K") == "Everstake"
    assert registry.validator_name("") == "Unknown Validator"
    assert registry.validator_name("ABCDEFGHIJKLMNOP") == "Validator ABCDEF...MNOP"


def test_reputable_validator_by_name_or_address(registry):
    assert registry.is_reputable_validator("Coinbase Cloud")
    assert registry.is_reputable_validator("", "Gr9Fuf9YMtD4bVMPwZkxafjj8wzDCo9WrEZmMJjnQomj")
    assert not registry.is_reputable_validator("Random Validator")


def test_missing_section_is_rejected():
    with open(DEFAULT_REGISTRY_PATH, "r", encoding="utf-8") as f:
        data = json.load(f)
    del data["lending"]

    with pytest.raises(ProtocolRegistryError):
        build_registry(data)


def test_missing_key_is_rejected():
    with open(DEFAULT_REGISTRY_PATH, "r", encoding="utf-8") as f:
        data = json.load(f)
    del data["assets"]["stablecoins"]

    with pytest.raises(ProtocolRegistryError):
        build_registry(data)


def test_missing_file_is_rejected(tmp_path):
    with pytest.raises(ProtocolRegistryError):
        load_registry(str(tmp_path / "absent.json"))


def test_invalid_json_is_rejected(tmp_path):
    path = tmp_path / "protocols.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ProtocolRegistryError):
        load_registry(str(path))
