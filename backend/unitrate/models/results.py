"""
Result records produced by the calculators.

Values are held as Decimal. ``as_dict()`` is the reporting boundary: it widens
every amount to float and uses the camelCase keys the presentation layer
expects.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Tuple

from unitrate.models.entities import Equipment, Labor, Material


@dataclass(frozen=True)
class EquipmentCosts:
    edc: Decimal                   # direct cost per equipment unit (operator + fuel)
    edp: Decimal                   # depreciation per equipment unit
    etc: Decimal                   # edc + edp
    warnings: Tuple[str, ...] = ()

    def as_dict(self) -> Dict[str, Any]:
        return {
            "edc": float(self.edc),
            "edp": float(self.edp),
            "etc": float(self.etc),
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class AnalysisCosts:
    direct_cost: Decimal
    depreciation: Decimal
    total_cost: Decimal
    unit_rate_dc: Decimal
    unit_rate_dp: Decimal
    unit_rate_tc: Decimal
    warnings: Tuple[str, ...] = ()

    def as_dict(self) -> Dict[str, Any]:
        return {
            "directCost": float(self.direct_cost),
            "depreciation": float(self.depreciation),
            "totalCost": float(self.total_cost),
            "unitRateDC": float(self.unit_rate_dc),
            "unitRateDP": float(self.unit_rate_dp),
            "unitRateTC": float(self.unit_rate_tc),
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class BoqCosts:
    unit_rate_dc: Decimal
    unit_rate_dp: Decimal
    unit_rate_tc: Decimal
    total_dc: Decimal
    total_dp: Decimal
    total_tc: Decimal
    warnings: Tuple[str, ...] = ()

    def as_dict(self) -> Dict[str, Any]:
        return {
            "unitRateDC": float(self.unit_rate_dc),
            "unitRateDP": float(self.unit_rate_dp),
            "unitRateTC": float(self.unit_rate_tc),
            "totalDC": float(self.total_dc),
            "totalDP": float(self.total_dp),
            "totalTC": float(self.total_tc),
            "warnings": list(self.warnings),
        }


# ---------------------------------------------------------------------------
# Resource explosion
# ---------------------------------------------------------------------------

def _resource_dict(resource) -> Dict[str, Any]:
    return {
        "id": resource.id,
        "code": resource.code,
        "name": resource.name,
        "unit": resource.unit,
        "rate": float(resource.rate),
    }


@dataclass(frozen=True)
class LaborUsage:
    resource: Labor
    total_qty: Decimal

    @property
    def cost(self) -> Decimal:
        return self.total_qty * self.resource.rate

    def as_dict(self) -> Dict[str, Any]:
        return {"resource": _resource_dict(self.resource), "totalQty": float(self.total_qty)}


@dataclass(frozen=True)
class MaterialUsage:
    resource: Material
    total_qty: Decimal

    @property
    def cost(self) -> Decimal:
        return self.total_qty * self.resource.rate

    def as_dict(self) -> Dict[str, Any]:
        return {"resource": _resource_dict(self.resource), "totalQty": float(self.total_qty)}


@dataclass(frozen=True)
class EquipmentUsage:
    resource: Equipment
    total_hours: Decimal
    depr_per_unit: Decimal

    @property
    def total_depreciation(self) -> Decimal:
        return self.total_hours * self.depr_per_unit

    def as_dict(self) -> Dict[str, Any]:
        return {
            "resource": {
                "id": self.resource.id,
                "code": self.resource.code,
                "name": self.resource.name,
                "unit": self.resource.unit,
            },
            "totalHours": float(self.total_hours),
            "deprPerUnit": float(self.depr_per_unit),
            "totalDepreciation": float(self.total_depreciation),
        }


@dataclass(frozen=True)
class BoqSummaryRow:
    code: str
    name: str
    total_dc: Decimal
    total_dp: Decimal
    total_tc: Decimal

    def as_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "name": self.name,
            "totalDC": float(self.total_dc),
            "totalDP": float(self.total_dp),
            "totalTC": float(self.total_tc),
        }


@dataclass(frozen=True)
class ResourceExplosion:
    labor: Tuple[LaborUsage, ...]
    materials: Tuple[MaterialUsage, ...]
    equipment: Tuple[EquipmentUsage, ...]
    total_labor_cost: Decimal
    total_material_cost: Decimal
    total_direct_cost: Decimal
    total_depreciation: Decimal
    grand_total: Decimal
    boq_summary: Tuple[BoqSummaryRow, ...]
    warnings: Tuple[str, ...] = ()

    def as_dict(self) -> Dict[str, Any]:
        return {
            "labor": [row.as_dict() for row in self.labor],
            "materials": [row.as_dict() for row in self.materials],
            "equipment": [row.as_dict() for row in self.equipment],
            "totalLaborCost": float(self.total_labor_cost),
            "totalMaterialCost": float(self.total_material_cost),
            "totalDirectCost": float(self.total_direct_cost),
            "totalDepreciation": float(self.total_depreciation),
            "grandTotal": float(self.grand_total),
            "boqSummary": [row.as_dict() for row in self.boq_summary],
            "warnings": list(self.warnings),
        }
