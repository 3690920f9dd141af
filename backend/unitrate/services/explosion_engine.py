"""
Resource Explosion Engine: traces every BoQ item back to base resources.

For each BoQ item → linked analysis → analysis resource → equipment
sub-resource, the engine re-derives the PHYSICAL quantity of every labor and
material resource consumed project-wide and the operating hours of every
piece of equipment:

    analysis_base_units = coefficient × boq.quantity / analysis.base_quantity
    resource_qty        = resource.quantity × analysis_base_units
    sub_resource_qty    = sub_resource.quantity × equipment_hours

Equipment operator labor and fuel are merged into the SAME per-resource
totals as directly specified labor and material (no separate "equipment
labor" bucket). Equipment contributes only hours × depreciation rate on top.
Hence:

    total_direct_cost = Σ labor qty × rate + Σ material qty × rate
    grand_total       = total_direct_cost + Σ equipment hours × EDP

which must agree with Σ BoQ line totals (see report_engine.check_consistency).
"""
import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from unitrate.models.entities import (
    Equipment,
    EquipmentResource,
    LaborResource,
    LaborSubResource,
    MaterialResource,
    MaterialSubResource,
)
from unitrate.models.results import (
    BoqSummaryRow,
    EquipmentUsage,
    LaborUsage,
    MaterialUsage,
    ResourceExplosion,
)
from unitrate.numeric import ZERO, base_divisor, decimal_context, to_decimal
from unitrate.services.boq_engine import BoqEngine
from unitrate.services.perf_monitor import timed

logger = logging.getLogger("unitrate-explosion")


class ExplosionEngine:

    def __init__(
        self,
        divisor_policy: Optional[Any] = None,
        boq_engine: Optional[BoqEngine] = None,
    ) -> None:
        self.boq_engine = boq_engine or BoqEngine(divisor_policy)
        self.equipment_engine = self.boq_engine.analysis_engine.equipment_engine

    @timed
    def explode_project(self, boq_items: Iterable[Any]) -> ResourceExplosion:
        """
        Explode all BoQ items of a project into base resource consumption.

        Args:
            boq_items: hydrated BoqItem entities, in report order

        Returns a ResourceExplosion with per-resource totals keyed by resource
        id (one entry per id however many paths reach it), cost totals and
        the per-item BoQ summary in input order.
        """
        labor_totals: Dict[str, Dict[str, Any]] = {}
        material_totals: Dict[str, Dict[str, Any]] = {}
        equipment_totals: Dict[str, Dict[str, Any]] = {}
        depr_rates: Dict[str, Decimal] = {}
        boq_summary: List[BoqSummaryRow] = []
        warnings: List[str] = []

        with decimal_context():
            for item in boq_items:
                # Independent pricing of the line for the summary table.
                # Missing references surface here as warnings; the quantity
                # trace below skips them silently.
                costs = self.boq_engine.boq_costs(item)
                warnings.extend(costs.warnings)
                boq_summary.append(BoqSummaryRow(
                    code=item.code,
                    name=item.name,
                    total_dc=costs.total_dc,
                    total_dp=costs.total_dp,
                    total_tc=costs.total_tc,
                ))

                boq_qty = to_decimal(item.quantity)
                for link in item.boq_analyses:
                    analysis = link.analysis
                    if analysis is None:
                        continue
                    base_units = (
                        to_decimal(link.coefficient) * boq_qty
                        / base_divisor(analysis.base_quantity)
                    )
                    for row in analysis.resources:
                        resource_qty = to_decimal(row.quantity) * base_units

                        if isinstance(row, LaborResource):
                            if row.labor is not None:
                                _add_usage(labor_totals, row.labor, resource_qty)

                        elif isinstance(row, MaterialResource):
                            if row.material is not None:
                                _add_usage(material_totals, row.material, resource_qty)

                        elif isinstance(row, EquipmentResource):
                            if row.equipment is not None:
                                self._explode_equipment(
                                    row.equipment,
                                    resource_qty,
                                    labor_totals,
                                    material_totals,
                                    equipment_totals,
                                    depr_rates,
                                )

            labor = tuple(
                LaborUsage(resource=entry["resource"], total_qty=entry["total_qty"])
                for entry in labor_totals.values()
            )
            materials = tuple(
                MaterialUsage(resource=entry["resource"], total_qty=entry["total_qty"])
                for entry in material_totals.values()
            )
            equipment = tuple(
                EquipmentUsage(
                    resource=entry["resource"],
                    total_hours=entry["total_hours"],
                    depr_per_unit=entry["depr_per_unit"],
                )
                for entry in equipment_totals.values()
            )

            total_labor_cost = sum((u.cost for u in labor), ZERO)
            total_material_cost = sum((u.cost for u in materials), ZERO)
            # Equipment operating cost is already inside labor + material.
            total_direct_cost = total_labor_cost + total_material_cost
            total_depreciation = sum((u.total_depreciation for u in equipment), ZERO)
            grand_total = total_direct_cost + total_depreciation

        unique_warnings = tuple(dict.fromkeys(warnings))
        logger.info(
            f"Resource explosion: {len(boq_summary)} BoQ items → "
            f"{len(labor)} labor, {len(materials)} materials, {len(equipment)} equipment; "
            f"grand total {float(grand_total):,.2f}"
            + (f" ({len(unique_warnings)} warnings)" if unique_warnings else "")
        )

        return ResourceExplosion(
            labor=labor,
            materials=materials,
            equipment=equipment,
            total_labor_cost=total_labor_cost,
            total_material_cost=total_material_cost,
            total_direct_cost=total_direct_cost,
            total_depreciation=total_depreciation,
            grand_total=grand_total,
            boq_summary=tuple(boq_summary),
            warnings=unique_warnings,
        )

    def _explode_equipment(
        self,
        equipment: Equipment,
        hours: Decimal,
        labor_totals: Dict[str, Dict[str, Any]],
        material_totals: Dict[str, Dict[str, Any]],
        equipment_totals: Dict[str, Dict[str, Any]],
        depr_rates: Dict[str, Decimal],
    ) -> None:
        """Book equipment hours, then push operator labor / fuel into the shared totals."""
        if equipment.id not in depr_rates:
            # boq_costs has already logged and warned for a degenerate divisor
            depr_rates[equipment.id] = self.equipment_engine.depreciation_per_unit(
                equipment.total_value,
                equipment.depreciation_total,
                equipment.code,
                log_degenerate=False,
            )

        entry = equipment_totals.get(equipment.id)
        if entry is None:
            equipment_totals[equipment.id] = {
                "resource": equipment,
                "total_hours": hours,
                "depr_per_unit": depr_rates[equipment.id],
            }
        else:
            entry["total_hours"] += hours

        for sub in equipment.sub_resources:
            sub_qty = to_decimal(sub.quantity) * hours
            if isinstance(sub, LaborSubResource):
                if sub.labor is not None:
                    _add_usage(labor_totals, sub.labor, sub_qty)
            elif isinstance(sub, MaterialSubResource):
                if sub.material is not None:
                    _add_usage(material_totals, sub.material, sub_qty)


def _add_usage(totals: Dict[str, Dict[str, Any]], resource: Any, qty: Decimal) -> None:
    entry = totals.get(resource.id)
    if entry is None:
        totals[resource.id] = {"resource": resource, "total_qty": qty}
    else:
        entry["total_qty"] += qty
