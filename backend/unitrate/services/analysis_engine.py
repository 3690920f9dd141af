"""
AnalysisEngine: unit-cost analysis (ADC / ADP / ATC).

Rule #1: equipment direct cost (EDC) is folded into the analysis DIRECT cost
together with labor and material. Only equipment depreciation (EDP) lands in
the depreciation bucket. Every downstream report relies on this split.

Unit rates divide by the analysis base quantity; a zero or missing base
quantity is treated as 1 (the analysis is read as "per one unit").
"""
import logging
from typing import Any, Iterable, List, Optional

from unitrate.models.entities import Analysis, EquipmentResource, LaborResource, MaterialResource
from unitrate.models.results import AnalysisCosts
from unitrate.numeric import ZERO, base_divisor, decimal_context, to_decimal
from unitrate.services.equipment_engine import EquipmentEngine

logger = logging.getLogger("unitrate-analysis")


class AnalysisEngine:

    def __init__(
        self,
        divisor_policy: Optional[Any] = None,
        equipment_engine: Optional[EquipmentEngine] = None,
    ) -> None:
        self.equipment_engine = equipment_engine or EquipmentEngine(divisor_policy)

    def analysis_costs(self, analysis: Analysis) -> AnalysisCosts:
        return self.compute_costs(
            analysis.base_quantity, analysis.resources, analysis_code=analysis.code
        )

    def compute_costs(
        self,
        base_quantity: Any,
        resources: Iterable[Any],
        analysis_code: str = "",
    ) -> AnalysisCosts:
        """
        Dispatch each resource row on its type:

            labor     → direct_cost  += quantity × labor.rate
            material  → direct_cost  += quantity × material.rate
            equipment → direct_cost  += quantity × EDC
                        depreciation += quantity × EDP

        ``quantity`` on an equipment row is operating hours consumed to
        produce ``base_quantity`` units of the analysis.
        """
        label = analysis_code or "(unnamed)"
        warnings: List[str] = []

        with decimal_context():
            direct_cost = ZERO
            depreciation = ZERO

            for row in resources:
                qty = to_decimal(getattr(row, "quantity", None))

                if isinstance(row, LaborResource):
                    if row.labor is None:
                        self._missing(warnings, analysis_code, "labor", row.labor_id)
                        continue
                    direct_cost += qty * row.labor.rate

                elif isinstance(row, MaterialResource):
                    if row.material is None:
                        self._missing(warnings, analysis_code, "material", row.material_id)
                        continue
                    direct_cost += qty * row.material.rate

                elif isinstance(row, EquipmentResource):
                    if row.equipment is None:
                        self._missing(warnings, analysis_code, "equipment", row.equipment_id)
                        continue
                    eq = self.equipment_engine.equipment_costs(row.equipment)
                    warnings.extend(eq.warnings)
                    direct_cost += qty * eq.edc
                    depreciation += qty * eq.edp

                else:
                    message = (
                        f"Analysis {label}: resource type "
                        f"{getattr(row, 'resource_type', None)!r} ignored"
                    )
                    logger.warning(message, extra={"entity_code": analysis_code})
                    warnings.append(message)

            total_cost = direct_cost + depreciation
            base = base_divisor(base_quantity)

            return AnalysisCosts(
                direct_cost=direct_cost,
                depreciation=depreciation,
                total_cost=total_cost,
                unit_rate_dc=direct_cost / base,
                unit_rate_dp=depreciation / base,
                unit_rate_tc=total_cost / base,
                warnings=tuple(warnings),
            )

    @staticmethod
    def _missing(warnings: List[str], analysis_code: str, kind: str, ref_id: Optional[str]) -> None:
        message = f"Analysis {analysis_code or '(unnamed)'}: {kind} {ref_id or '(no id)'} is missing, counted as zero cost"
        logger.warning(message, extra={"entity_code": analysis_code})
        warnings.append(message)
