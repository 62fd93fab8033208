"""
PURPOSE: Work-type coefficients and the read-only catalog they are looked up from.

The catalog is injected wherever coefficients are needed (recompute, tests)
instead of being read from a module global, so tests can pass synthetic
catalogs.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List

from mvo_planner.errors import ConfigurationError

SIZE_MULTIPLIERS = {
    "small_lean": 1.0,
    "medium_standard": 1.5,
    "large_extended": 2.0,
}


@dataclass(frozen=True)
class WorkTypeCoefficients:
    """Tuning constants for one category of work.

    Attributes:
        id: Catalog key.
        name: Display name.
        productivity_rate: Multiplier on utilization (lower = slower work).
        complexity_factor: Multiplier on required hours.
        variance_level: Std dev of the per-trial N(1, sigma) noise term.
        min_headcount_rule: Hard safety floor for any tested headcount.
        min_headcount_base: Base of the size-of-operation minimum.
        risk_multiplier: Multiplier applied with the noise term.
    """
    id: str
    name: str
    productivity_rate: float
    complexity_factor: float
    variance_level: float
    min_headcount_rule: int
    min_headcount_base: int
    risk_multiplier: float

    def __post_init__(self):
        for attr in (
            "productivity_rate",
            "complexity_factor",
            "variance_level",
            "min_headcount_rule",
            "min_headcount_base",
            "risk_multiplier",
        ):
            if getattr(self, attr) <= 0:
                raise ConfigurationError(f"{self.id}: {attr} must be positive")

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "productivity_rate": self.productivity_rate,
            "complexity_factor": self.complexity_factor,
            "variance_level": self.variance_level,
            "min_headcount_rule": self.min_headcount_rule,
            "min_headcount_base": self.min_headcount_base,
            "risk_multiplier": self.risk_multiplier,
        }


class WorkTypeCatalog(Mapping):
    """Immutable id -> WorkTypeCoefficients mapping."""

    def __init__(self, entries: Iterable[WorkTypeCoefficients], version: str = "1"):
        self.version = version
        self._entries: Mapping[str, WorkTypeCoefficients] = MappingProxyType({e.id: e for e in entries})

    def __getitem__(self, work_type_id: str) -> WorkTypeCoefficients:
        return self._entries[work_type_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def get_coefficients(self, work_type_id: str) -> WorkTypeCoefficients:
        """Look up coefficients, raising ConfigurationError for unknown ids."""
        try:
            return self._entries[work_type_id]
        except KeyError:
            raise ConfigurationError(f"Unknown work type: {work_type_id!r}") from None

    def sorted_by_name(self) -> List[WorkTypeCoefficients]:
        return sorted(self._entries.values(), key=lambda e: e.name)

    def min_headcount(self, work_type_id: str, operation_size: str) -> int:
        """
        Minimum team size for a work type at a given size of operation.

        Unknown work types fall back to 1. The base is scaled by 1 / 1.5 / 2
        for small / medium / large operations and rounded up.
        """
        entry = self._entries.get(work_type_id)
        if entry is None:
            return 1
        base = entry.min_headcount_base
        adjusted = math.ceil(base * SIZE_MULTIPLIERS.get(operation_size, 1.0))
        return max(base, adjusted)


# id, name, productivity, complexity, variance, min rule, min base, risk
_DEFAULT_ROWS = [
    ("administrative_compliance", "Administrative / Compliance / Documentation", 1.20, 0.60, 0.15, 1, 1, 0.8),
    ("analysis_reporting", "Analysis / Reporting / Planning", 1.00, 0.90, 0.25, 1, 1, 1.0),
    ("business_development", "Business Development / Partnerships", 0.90, 1.10, 0.30, 1, 1, 1.1),
    ("call_centre", "Call Centre / Contact Centre Work", 0.85, 0.85, 0.35, 2, 3, 1.2),
    ("cleaning_hygiene", "Cleaning / Hygiene / Sanitation Work", 0.75, 0.80, 0.30, 2, 3, 1.1),
    ("creative_branding", "Creative / Branding / Communications Work", 0.80, 1.10, 0.35, 1, 1, 1.1),
    ("customer_tenant_support", "Customer / Tenant / Community Support", 0.85, 0.80, 0.30, 1, 2, 1.1),
    ("event_activation", "Event / Activation / On-ground Execution", 0.70, 1.20, 0.45, 2, 2, 1.3),
    ("finance_accounting", "Finance / Accounting / Treasury Work", 1.00, 1.00, 0.20, 1, 2, 1.0),
    ("food_beverage", "Food & Beverage Operations", 0.65, 0.85, 0.40, 2, 3, 1.2),
    ("governance_risk", "Governance / Risk / Compliance Work", 0.90, 1.10, 0.30, 1, 2, 1.2),
    ("hospitality_front_desk", "Hospitality / Front Desk / Guest Services", 0.80, 0.90, 0.30, 2, 2, 1.1),
    ("hr_people_ops", "HR / People Operations", 1.00, 0.80, 0.20, 1, 2, 1.0),
    ("it_digital_systems", "IT / Digital / Systems Work", 0.70, 1.20, 0.40, 1, 2, 1.3),
    ("landscaping_groundkeeping", "Landscaping / Groundkeeping Work", 0.75, 0.95, 0.35, 2, 3, 1.2),
    ("legal_secretarial", "Legal / Company Secretarial Work", 0.90, 1.20, 0.25, 1, 2, 1.2),
    ("logistics_warehouse", "Logistics / Warehouse / Inventory Handling", 0.70, 1.10, 0.45, 2, 2, 1.3),
    ("maintenance_engineering", "Maintenance / Technical / Engineering", 0.55, 1.40, 0.45, 1, 3, 1.4),
    ("marketing_campaigns", "Marketing / Campaign Management", 0.80, 1.00, 0.30, 1, 1, 1.1),
    ("operational_onsite", "Operational / On-Site Work", 0.75, 1.00, 0.35, 2, 3, 1.2),
    ("procurement_vendor", "Procurement / Contract / Vendor Management", 0.95, 0.85, 0.25, 1, 2, 1.0),
    ("project_development", "Project / Development / Delivery Work", 0.65, 1.50, 0.50, 2, 1, 1.3),
    ("retail_store_ops", "Retail / Outlet / Store Operations", 0.85, 0.75, 0.40, 2, 3, 1.2),
    ("sales_leasing", "Sales / Leasing / Revenue Work", 0.85, 0.90, 0.20, 1, 1, 1.1),
    ("security_safety", "Security / Safety / Emergency Response", 0.50, 1.20, 0.55, 3, 3, 1.5),
    ("transportation_fleet", "Transportation / Fleet / Dispatch Operations", 0.75, 0.90, 0.40, 2, 3, 1.2),
]

DEFAULT_CATALOG = WorkTypeCatalog(WorkTypeCoefficients(*row) for row in _DEFAULT_ROWS)


def catalog_from_dicts(rows: Iterable[Dict], version: str = "custom") -> WorkTypeCatalog:
    """Build a catalog from plain dicts (e.g. loaded from a config table)."""
    return WorkTypeCatalog((WorkTypeCoefficients(**row) for row in rows), version=version)
