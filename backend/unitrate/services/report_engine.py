"""
ReportEngine: presentation-ready views over the calculators.

Covers:
  - Resource report: the full project catalogue (labor, materials, equipment)
    sorted by code, with explosion totals merged in and unused resources at 0
  - Cost sheets: equipment / analysis / BoQ item header fields + costs
  - Consistency check: explosion grand total vs Σ BoQ line totals

All outputs are plain dicts of str / float (the reporting boundary).
"""
import logging
import math
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from unitrate import config
from unitrate.exceptions import ConsistencyError
from unitrate.models.entities import Analysis, BoqItem, Equipment, Labor, Material
from unitrate.models.results import EquipmentUsage, LaborUsage, MaterialUsage, ResourceExplosion
from unitrate.numeric import ONE, ZERO, decimal_context, to_decimal
from unitrate.services.explosion_engine import ExplosionEngine

logger = logging.getLogger("unitrate-report")

# Tolerance for the advisory "coefficients should sum to 1" check on BoQ sheets
_COEFFICIENT_SUM_TOL = Decimal("0.000001")


class ReportEngine:
    """
    Builds report views. Holds an ExplosionEngine (and through it the BoQ,
    analysis and equipment engines) so every sheet prices entities exactly
    the way the explosion does.
    """

    def __init__(
        self,
        divisor_policy: Optional[Any] = None,
        explosion_engine: Optional[ExplosionEngine] = None,
    ) -> None:
        self.explosion_engine = explosion_engine or ExplosionEngine(divisor_policy)
        self.boq_engine = self.explosion_engine.boq_engine
        self.analysis_engine = self.boq_engine.analysis_engine
        self.equipment_engine = self.boq_engine.analysis_engine.equipment_engine

    # -----------------------------------------------------------------------
    # 1. Resource report (every catalogue resource, sorted by code)
    # -----------------------------------------------------------------------

    def build_resource_report(
        self,
        explosion: ResourceExplosion,
        labor: Iterable[Labor],
        materials: Iterable[Material],
        equipment: Iterable[Equipment],
    ) -> Dict[str, Any]:
        """
        Merge explosion totals into the full project catalogue.

        Unused labor / materials appear with totalQty 0. Unused equipment
        appears with 0 hours and its own depreciation rate
        (total_value / depreciation_total, or 0 when that is not positive).
        Explosion entries missing from the catalogue are appended rather than
        dropped, and flagged in ``warnings``. Money totals are carried over
        from the explosion unchanged.
        """
        warnings: List[str] = list(explosion.warnings)

        labor_used = {u.resource.id: u for u in explosion.labor}
        material_used = {u.resource.id: u for u in explosion.materials}
        equipment_used = {u.resource.id: u for u in explosion.equipment}

        labor_rows: List[Dict[str, Any]] = []
        for resource in labor:
            usage = labor_used.pop(resource.id, None)
            labor_rows.append(
                LaborUsage(resource=resource, total_qty=usage.total_qty if usage else ZERO).as_dict()
            )
        for usage in labor_used.values():
            warnings.append(f"Labor {usage.resource.code or usage.resource.id} is used but not in the catalogue")
            labor_rows.append(usage.as_dict())

        material_rows: List[Dict[str, Any]] = []
        for resource in materials:
            usage = material_used.pop(resource.id, None)
            material_rows.append(
                MaterialUsage(resource=resource, total_qty=usage.total_qty if usage else ZERO).as_dict()
            )
        for usage in material_used.values():
            warnings.append(f"Material {usage.resource.code or usage.resource.id} is used but not in the catalogue")
            material_rows.append(usage.as_dict())

        equipment_rows: List[Dict[str, Any]] = []
        for resource in equipment:
            usage = equipment_used.pop(resource.id, None)
            if usage is None:
                usage = EquipmentUsage(
                    resource=resource,
                    total_hours=ZERO,
                    depr_per_unit=self._catalogue_depreciation_rate(resource),
                )
            equipment_rows.append(usage.as_dict())
        for usage in equipment_used.values():
            warnings.append(f"Equipment {usage.resource.code or usage.resource.id} is used but not in the catalogue")
            equipment_rows.append(usage.as_dict())

        for rows in (labor_rows, material_rows, equipment_rows):
            rows.sort(key=lambda r: r["resource"]["code"])

        totals = explosion.as_dict()
        return {
            "labor": labor_rows,
            "materials": material_rows,
            "equipment": equipment_rows,
            "totalLaborCost": totals["totalLaborCost"],
            "totalMaterialCost": totals["totalMaterialCost"],
            "totalDirectCost": totals["totalDirectCost"],
            "totalDepreciation": totals["totalDepreciation"],
            "grandTotal": totals["grandTotal"],
            "boqSummary": totals["boqSummary"],
            "warnings": list(dict.fromkeys(warnings)),
        }

    @staticmethod
    def _catalogue_depreciation_rate(equipment: Equipment) -> Decimal:
        if equipment.depreciation_total > ZERO:
            with decimal_context():
                return equipment.total_value / equipment.depreciation_total
        return ZERO

    # -----------------------------------------------------------------------
    # 2. Cost sheets
    # -----------------------------------------------------------------------

    def equipment_cost_sheet(self, equipment: Equipment) -> Dict[str, Any]:
        costs = self.equipment_engine.equipment_costs(equipment)
        return {
            "id": equipment.id,
            "code": equipment.code,
            "name": equipment.name,
            "unit": equipment.unit,
            "totalValue": float(equipment.total_value),
            "depreciationTotal": float(equipment.depreciation_total),
            "costs": costs.as_dict(),
        }

    def analysis_cost_sheet(self, analysis: Analysis) -> Dict[str, Any]:
        costs = self.analysis_engine.analysis_costs(analysis)
        return {
            "id": analysis.id,
            "code": analysis.code,
            "name": analysis.name,
            "unit": analysis.unit,
            "baseQuantity": float(analysis.base_quantity),
            "costs": costs.as_dict(),
        }

    def boq_cost_sheet(self, item: BoqItem) -> Dict[str, Any]:
        """
        BoQ item with its costs and, per link, the coefficient and the linked
        analysis unit rates. Flags (never corrects) coefficients that do not
        sum to 1.
        """
        costs = self.boq_engine.boq_costs(item)
        warnings = list(costs.warnings)

        links: List[Dict[str, Any]] = []
        coefficient_sum = ZERO
        for link in item.boq_analyses:
            coefficient = to_decimal(link.coefficient)
            coefficient_sum += coefficient
            analysis = link.analysis
            if analysis is None:
                links.append({
                    "analysisId": link.analysis_id,
                    "coefficient": float(coefficient),
                    "analysis": None,
                })
                continue
            rates = self.analysis_engine.analysis_costs(analysis)
            links.append({
                "analysisId": link.analysis_id or analysis.id,
                "coefficient": float(coefficient),
                "analysis": {
                    "id": analysis.id,
                    "code": analysis.code,
                    "name": analysis.name,
                    "unit": analysis.unit,
                    "unitRateDC": float(rates.unit_rate_dc),
                    "unitRateDP": float(rates.unit_rate_dp),
                    "unitRateTC": float(rates.unit_rate_tc),
                },
            })

        if links and abs(coefficient_sum - ONE) > _COEFFICIENT_SUM_TOL:
            warnings.append(
                f"BoQ {item.code or '(unnamed)'}: coefficients sum to {coefficient_sum.normalize()}, not 1"
            )

        costs_dict = costs.as_dict()
        costs_dict["warnings"] = list(dict.fromkeys(warnings))
        return {
            "id": item.id,
            "code": item.code,
            "name": item.name,
            "description": item.description,
            "unit": item.unit,
            "quantity": float(item.quantity),
            "coefficientSum": float(coefficient_sum),
            "costs": costs_dict,
            "boqAnalyses": links,
        }

    # -----------------------------------------------------------------------
    # 3. Project report + reconciliation
    # -----------------------------------------------------------------------

    def project_report(
        self,
        boq_items: Iterable[BoqItem],
        labor: Iterable[Labor],
        materials: Iterable[Material],
        equipment: Iterable[Equipment],
    ) -> Dict[str, Any]:
        """Explode the project, verify it reconciles, and merge with the catalogue."""
        explosion = self.explosion_engine.explode_project(list(boq_items))
        assert_consistent(explosion)
        return self.build_resource_report(explosion, labor, materials, equipment)


def summary_total(explosion: ResourceExplosion) -> Decimal:
    """Σ BoQ summary line totals (independent per-item pricing)."""
    with decimal_context():
        return sum((row.total_tc for row in explosion.boq_summary), ZERO)


def check_consistency(
    explosion: ResourceExplosion, rel_tol: Optional[float] = None
) -> bool:
    """True when grand_total matches Σ boq_summary.total_tc within ``rel_tol``."""
    if rel_tol is None:
        rel_tol = config.CONSISTENCY_REL_TOL
    return math.isclose(
        float(explosion.grand_total),
        float(summary_total(explosion)),
        rel_tol=rel_tol,
        abs_tol=1e-9,
    )


def assert_consistent(
    explosion: ResourceExplosion, rel_tol: Optional[float] = None
) -> None:
    """Raise ConsistencyError if the explosion does not reconcile with the BoQ summary."""
    if rel_tol is None:
        rel_tol = config.CONSISTENCY_REL_TOL
    if not check_consistency(explosion, rel_tol):
        grand, summed = float(explosion.grand_total), float(summary_total(explosion))
        logger.error(f"Explosion does not reconcile: grand total {grand} vs Σ BoQ {summed}")
        raise ConsistencyError(grand, summed, rel_tol)
