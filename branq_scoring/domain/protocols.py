"""
Protocol registry - versioned classification data for keyword/program matching.

Which protocols count as lending venues, which sources indicate collateral
activity, which programs are aggregators or multisigs, and which protocol
categories are risky all live in ``data/protocols.json``. Calculators only
ask the registry questions; they never carry their own lists.
"""

import json
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional

from branq_scoring.config import settings
from branq_scoring.domain.exceptions import ProtocolRegistryError

DEFAULT_REGISTRY_PATH = Path(__file__).resolve().parent.parent / "data" / "protocols.json"

RISK_SAFE = "safe"
RISK_MEDIUM = "medium"
RISK_HIGH = "high"


def _lower_set(values: Iterable[str]) -> FrozenSet[str]:
    return frozenset(str(v).lower() for v in values)


def _contains_any(text: str, needles: Iterable[str]) -> bool:
    return any(needle in text for needle in needles)


def _contains_word(text: str, words: Iterable[str]) -> bool:
    return any(re.search(rf"\b{re.escape(word)}\b", text) for word in words)


@dataclass(frozen=True)
class ToolCategory:
    """Program ids, source names and description keywords for one tool type"""

    name: str
    program_ids: FrozenSet[str]
    sources: FrozenSet[str]
    keywords: FrozenSet[str]

    def matches(self, program_id: str, source: str, description: str) -> bool:
        return (
            program_id in self.program_ids
            or _contains_any(source, self.sources)
            or _contains_any(description, self.keywords)
        )


@dataclass(frozen=True)
class ProtocolRegistry:
    version: str
    blue_chip_assets: FrozenSet[str]
    stablecoins: FrozenSet[str]
    major_tokens: FrozenSet[str]
    lending_protocols: FrozenSet[str]
    borrow_keywords: FrozenSet[str]
    repay_keywords: FrozenSet[str]
    liquidation_keywords: FrozenSet[str]
    lending_keywords: FrozenSet[str]
    collateral_sources: FrozenSet[str]
    collateral_types: FrozenSet[str]
    collateral_keywords: FrozenSet[str]
    top_up_types: FrozenSet[str]
    top_up_keywords: FrozenSet[str]
    tools: Mapping[str, ToolCategory]
    risk_tiers: Mapping[str, FrozenSet[str]]
    reputable_validators: FrozenSet[str]
    validator_names: Mapping[str, str]

    # Lending / collateral

    def is_lending_protocol(self, *fields: str) -> bool:
        """Whole-word match, so "port" does not fire on "transport"."""
        return any(_contains_word(f.lower(), self.lending_protocols) for f in fields if f)

    def is_collateral_source(self, source: str) -> bool:
        return source.upper() in self.collateral_sources

    # Assets

    def is_blue_chip(self, currency: str) -> bool:
        return currency.upper() in self.blue_chip_assets

    def is_stablecoin(self, currency: str) -> bool:
        return currency.upper() in self.stablecoins

    # Risk

    def risk_tier(self, protocol: str) -> str:
        """
        Classify a protocol label into high / medium / safe risk.

        High-risk keywords win over medium, medium over safe; labels matching
        nothing are treated as medium risk.
        """
        label = protocol.lower()
        for tier in (RISK_HIGH, RISK_MEDIUM, RISK_SAFE):
            if _contains_any(label, self.risk_tiers.get(tier, ())):
                return tier
        return RISK_MEDIUM

    # Validators

    def validator_name(self, address: str) -> str:
        if address in self.validator_names:
            return self.validator_names[address]
        if not address or address == "Unknown":
            return "Unknown Validator"
        return f"Validator {address[:6]}...{address[-4:]}"

    def is_reputable_validator(self, name: str, address: str = "") -> bool:
        label = (name or self.validator_names.get(address, "")).lower()
        return bool(label) and _contains_any(label, self.reputable_validators)


def _section(data: Mapping[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key)
    if not isinstance(value, dict):
        raise ProtocolRegistryError(f"Protocol registry is missing section '{key}'")
    return value


def build_registry(data: Mapping[str, Any]) -> ProtocolRegistry:
    """Validate raw registry JSON and build a ProtocolRegistry"""
    assets = _section(data, "assets")
    lending = _section(data, "lending")
    collateral = _section(data, "collateral")
    tools = _section(data, "tools")
    risk = _section(data, "risk")
    validators = _section(data, "validators")

    try:
        return ProtocolRegistry(
            version=str(data.get("version", "unversioned")),
            blue_chip_assets=frozenset(a.upper() for a in assets["blue_chip"]),
            stablecoins=frozenset(a.upper() for a in assets["stablecoins"]),
            major_tokens=frozenset(a.upper() for a in assets["major"]),
            lending_protocols=_lower_set(lending["protocols"]),
            borrow_keywords=_lower_set(lending["borrow_keywords"]),
            repay_keywords=_lower_set(lending["repay_keywords"]),
            liquidation_keywords=_lower_set(lending["liquidation_keywords"]),
            lending_keywords=_lower_set(lending["interaction_keywords"]),
            collateral_sources=frozenset(s.upper() for s in collateral["sources"]),
            collateral_types=frozenset(t.upper() for t in collateral["types"]),
            collateral_keywords=_lower_set(collateral["keywords"]),
            top_up_types=frozenset(t.upper() for t in collateral["top_up_types"]),
            top_up_keywords=_lower_set(collateral["top_up_keywords"]),
            tools={
                name: ToolCategory(
                    name=name,
                    program_ids=frozenset(spec.get("program_ids", [])),
                    sources=_lower_set(spec.get("sources", [])),
                    keywords=_lower_set(spec.get("keywords", [])),
                )
                for name, spec in tools.items()
            },
            risk_tiers={tier: _lower_set(risk.get(tier, [])) for tier in (RISK_SAFE, RISK_MEDIUM, RISK_HIGH)},
            reputable_validators=_lower_set(validators["reputable"]),
            validator_names=dict(validators.get("names", {})),
        )
    except (KeyError, TypeError, AttributeError) as e:
        raise ProtocolRegistryError(f"Invalid protocol registry: {e}") from e


def load_registry(path: Optional[str] = None) -> ProtocolRegistry:
    """Load the registry from a JSON file (defaults to the packaged copy)"""
    file_path = Path(path) if path else DEFAULT_REGISTRY_PATH
    if not file_path.exists():
        raise ProtocolRegistryError(f"Protocol registry not found: {file_path}")

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ProtocolRegistryError(f"Protocol registry is not valid JSON: {e}") from e

    return build_registry(data)


@lru_cache(maxsize=1)
def get_registry() -> ProtocolRegistry:
    """Process-wide registry, loaded once from settings"""
    return load_registry(settings.protocol_registry_path)
