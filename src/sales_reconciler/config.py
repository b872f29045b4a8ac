"""Reporting configuration: identity, SKU catalog and reconciliation policies.

The configuration is an explicit object handed to every core operation. It
can be built from the defaults below or loaded from a YAML file with the
sections ``reporting``, ``catalog``, ``policies`` and ``segmentation``::

    reporting:
      sales_person: Shubham
      ss_name: Sumit Enterprises
    catalog:
      - id: sku_mc2
        label: MC2
        price: 420
        bottles_per_case: 30
      - id: sku_2l_mix
        label: 2L Mix
        price: 370
        bottles_per_case: 6
        report_column: 2 Ltr    # rolled into the "2 Ltr" report column
    policies:
      merge: overwrite          # or: accumulate
      ledger_rounding: two_decimal  # or: whole_case
      create_missing_outlets: true
    segmentation:
      min_block_length: 3
      invoice_prefix_pattern: 'FY\\d{2}-'

Sections that are omitted keep their default values.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List

import yaml

from sales_reconciler.model import MergePolicy, RoundingPolicy, SkuDefinition

logger = logging.getLogger(__name__)

MERGE_OVERWRITE: MergePolicy = "overwrite"  # Reset touched SKUs, then apply run totals
MERGE_ACCUMULATE: MergePolicy = "accumulate"  # Add run totals to stored quantities
ROUND_TWO_DECIMAL: RoundingPolicy = "two_decimal"  # Broken cases kept (e.g. 1.5)
ROUND_WHOLE_CASE: RoundingPolicy = "whole_case"  # Nearest whole case

MERGE_POLICIES = (MERGE_OVERWRITE, MERGE_ACCUMULATE)
ROUNDING_POLICIES = (ROUND_TWO_DECIMAL, ROUND_WHOLE_CASE)

DEFAULT_MIN_BLOCK_LENGTH = 3  # Stripped characters below which a block is noise
DEFAULT_INVOICE_PREFIX = r"FY\d{2}-"  # Fiscal-year invoice number prefix

MC2_BOTTLES_PER_CASE = 30
TWO_LITRE_BOTTLES_PER_CASE = 6
TWO_LITRE_COLUMN = "2 Ltr"  # Flavoured 2-litre SKUs are reported together

DEFAULT_CATALOG: List[SkuDefinition] = [
    SkuDefinition("sku_160ml", "160 ML Juice", 165),
    SkuDefinition("sku_apple", "APPLE", 155),
    SkuDefinition("sku_sparkel200", "SPARKEL 200 ML", 155),
    SkuDefinition("sku_nimbu_soda200", "Nimbu Soda 200 ml", 155),
    SkuDefinition("sku_nimbu_pani300", "Nimbu Pani 300 ml", 300),
    SkuDefinition("sku_zeera", "Mr. Fresh Zeera", 155),
    SkuDefinition("sku_juice_misc", "JUICE 300/500/600 ML", 300),
    SkuDefinition("sku_1ltr", "1 Ltr", 400),
    SkuDefinition("sku_2ltr", "2 Ltr", 370, TWO_LITRE_BOTTLES_PER_CASE),
    SkuDefinition(
        "sku_2l_mix", "2L Mix", 370, TWO_LITRE_BOTTLES_PER_CASE, TWO_LITRE_COLUMN
    ),
    SkuDefinition(
        "sku_2l_lichi", "2L Lichi", 370, TWO_LITRE_BOTTLES_PER_CASE, TWO_LITRE_COLUMN
    ),
    SkuDefinition(
        "sku_2l_guava", "2L Guava", 370, TWO_LITRE_BOTTLES_PER_CASE, TWO_LITRE_COLUMN
    ),
    SkuDefinition(
        "sku_2l_mango", "2L Mango", 370, TWO_LITRE_BOTTLES_PER_CASE, TWO_LITRE_COLUMN
    ),
    SkuDefinition("sku_coconut", "Coconut Water", 1280),
    SkuDefinition("sku_mc2", "MC2", 420, MC2_BOTTLES_PER_CASE),
    SkuDefinition("sku_energy", "D1 CAN ENERGY DRINK/ BASIL SEEDS", 155),
]


class ConfigError(ValueError):
    """Raised when a configuration file cannot be used."""


@dataclass(slots=True)
class ReportingConfig:
    """Everything the reconciliation engine needs besides the text itself."""

    sales_person: str = "Shubham"
    designation: str = "SO"
    manager: str = "Sanjay Sharma Ji"
    city: str = "Amritsar"
    ss_name: str = "Sumit Enterprises"
    default_beat: str = "Main Beat"
    default_contact_person: str = "Owner"
    catalog: List[SkuDefinition] = field(default_factory=lambda: list(DEFAULT_CATALOG))
    merge_policy: MergePolicy = MERGE_OVERWRITE
    ledger_rounding: RoundingPolicy = ROUND_TWO_DECIMAL
    create_missing_outlets: bool = True
    min_block_length: int = DEFAULT_MIN_BLOCK_LENGTH
    invoice_prefix_pattern: str = DEFAULT_INVOICE_PREFIX

    @property
    def sku_ids(self) -> List[str]:
        return [sku.sku_id for sku in self.catalog]

    def validate(self) -> "ReportingConfig":
        """Check policy names and patterns; return ``self`` for chaining."""
        if self.merge_policy not in MERGE_POLICIES:
            raise ConfigError(f"Unknown merge policy: {self.merge_policy!r}")
        if self.ledger_rounding not in ROUNDING_POLICIES:
            raise ConfigError(f"Unknown rounding policy: {self.ledger_rounding!r}")
        if self.min_block_length < 0:
            raise ConfigError("min_block_length must not be negative")
        try:
            prefix = re.compile(self.invoice_prefix_pattern)
        except re.error as exc:
            raise ConfigError(
                f"Invalid invoice prefix pattern: {self.invoice_prefix_pattern!r}"
            ) from exc
        if prefix.match(""):
            raise ConfigError("Invoice prefix pattern must not match empty text")

        seen: set[str] = set()
        for sku in self.catalog:
            if sku.sku_id in seen:
                raise ConfigError(f"Duplicate SKU id in catalog: {sku.sku_id}")
            if sku.bottles_per_case < 1:
                raise ConfigError(f"bottles_per_case must be >= 1 for {sku.sku_id}")
            seen.add(sku.sku_id)
        return self


def _parse_catalog(entries: Any) -> List[SkuDefinition]:
    if not isinstance(entries, list):
        raise ConfigError("'catalog' must be a list of SKU entries")

    catalog: List[SkuDefinition] = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise ConfigError(f"Invalid catalog entry: {entry!r}")
        try:
            catalog.append(
                SkuDefinition(
                    sku_id=str(entry["id"]).strip(),
                    label=str(entry["label"]).strip(),
                    price=float(entry.get("price", 0)),
                    bottles_per_case=int(entry.get("bottles_per_case", 1)),
                    report_column=str(entry.get("report_column") or "").strip(),
                )
            )
        except KeyError as exc:
            raise ConfigError(f"Catalog entry missing {exc.args[0]!r}: {entry!r}") from exc
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid catalog entry: {entry!r}") from exc
    return catalog


def config_from_dict(data: Dict[str, Any]) -> ReportingConfig:
    """Build a validated configuration from a parsed YAML mapping."""

    if not isinstance(data, dict):
        raise ConfigError("Configuration root must be a mapping")

    config = ReportingConfig()
    changes: Dict[str, Any] = {}

    reporting = data.get("reporting") or {}
    for key in (
        "sales_person",
        "designation",
        "manager",
        "city",
        "ss_name",
        "default_beat",
        "default_contact_person",
    ):
        if key in reporting:
            changes[key] = str(reporting[key])

    if "catalog" in data:
        changes["catalog"] = _parse_catalog(data["catalog"])

    policies = data.get("policies") or {}
    if "merge" in policies:
        changes["merge_policy"] = policies["merge"]
    if "ledger_rounding" in policies:
        changes["ledger_rounding"] = policies["ledger_rounding"]
    if "create_missing_outlets" in policies:
        changes["create_missing_outlets"] = bool(policies["create_missing_outlets"])

    segmentation = data.get("segmentation") or {}
    if "min_block_length" in segmentation:
        try:
            changes["min_block_length"] = int(segmentation["min_block_length"])
        except (TypeError, ValueError) as exc:
            raise ConfigError("min_block_length must be an integer") from exc
    if "invoice_prefix_pattern" in segmentation:
        changes["invoice_prefix_pattern"] = str(segmentation["invoice_prefix_pattern"])

    return replace(config, **changes).validate()


def load_config(path: Path | str | None = None) -> ReportingConfig:
    """Load configuration from ``path``; defaults when ``path`` is ``None``."""

    if path is None:
        return ReportingConfig()

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Could not parse {config_path}: {exc}") from exc

    config = config_from_dict(data)
    logger.debug("Loaded config from %s (%d SKUs)", config_path, len(config.catalog))
    return config


__all__ = [
    "ReportingConfig",
    "ConfigError",
    "DEFAULT_CATALOG",
    "MERGE_OVERWRITE",
    "MERGE_ACCUMULATE",
    "ROUND_TWO_DECIMAL",
    "ROUND_WHOLE_CASE",
    "load_config",
    "config_from_dict",
]
