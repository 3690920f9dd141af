"""
EquipmentEngine: per-unit cost of operating one piece of equipment.

  EDC  = Σ sub-resource quantity × rate   (operator labor + fuel/consumables)
  EDP  = total_value / depreciation_total (wear per operating unit)
  ETC  = EDC + EDP

All figures are per one equipment unit (usually one hour).
"""
import logging
from decimal import Decimal
from typing import Any, Iterable, List, Optional

from unitrate.exceptions import DegenerateDivisorError
from unitrate.models.entities import Equipment, LaborSubResource, MaterialSubResource
from unitrate.models.results import EquipmentCosts
from unitrate.numeric import ZERO, DivisorPolicy, decimal_context, resolve_policy, to_decimal

logger = logging.getLogger("unitrate-equipment")


class EquipmentEngine:
    """
    Computes EDC / EDP / ETC for a single equipment item.

    ``divisor_policy`` decides what happens when ``depreciation_total`` is 0:
    ZERO gives EDP = 0 with a warning on the result, RAISE raises
    DegenerateDivisorError. Defaults to config.DEFAULT_DIVISOR_POLICY.
    """

    def __init__(self, divisor_policy: Optional[Any] = None) -> None:
        self.divisor_policy: DivisorPolicy = resolve_policy(divisor_policy)

    def equipment_costs(self, equipment: Equipment) -> EquipmentCosts:
        """EDC / EDP / ETC for a hydrated Equipment entity."""
        return self.compute_costs(
            equipment.total_value,
            equipment.depreciation_total,
            equipment.sub_resources,
            equipment_code=equipment.code,
        )

    def compute_costs(
        self,
        total_value: Any,
        depreciation_total: Any,
        sub_resources: Iterable[Any],
        equipment_code: str = "",
    ) -> EquipmentCosts:
        """
        Args:
            total_value: acquisition / replacement value
            depreciation_total: lifetime usage units the value depreciates over
            sub_resources: LaborSubResource / MaterialSubResource rows
            equipment_code: used only to label warnings and errors

        Rows whose referenced labor/material is missing contribute zero and
        add a warning to the result.
        """
        warnings: List[str] = []
        with decimal_context():
            edc = ZERO
            for row in sub_resources:
                rate = self._sub_resource_rate(row, equipment_code, warnings)
                if rate is not None:
                    edc += to_decimal(row.quantity) * rate
            edp = self.depreciation_per_unit(
                total_value, depreciation_total, equipment_code, warnings
            )
            etc = edc + edp
        return EquipmentCosts(edc=edc, edp=edp, etc=etc, warnings=tuple(warnings))

    def depreciation_per_unit(
        self,
        total_value: Any,
        depreciation_total: Any,
        equipment_code: str = "",
        warnings: Optional[List[str]] = None,
        log_degenerate: bool = True,
    ) -> Decimal:
        """
        total_value / depreciation_total, subject to the divisor policy.

        A depreciation_total of zero or below is degenerate. ``log_degenerate``
        turns off the WARNING line for callers that have already reported
        the same equipment.
        """
        divisor = to_decimal(depreciation_total)
        if divisor <= ZERO:
            if self.divisor_policy is DivisorPolicy.RAISE:
                raise DegenerateDivisorError("depreciation_total", equipment_code, divisor)
            message = (
                f"Equipment {equipment_code or '(unnamed)'}: depreciation_total is "
                f"{divisor}, depreciation per unit taken as 0"
            )
            if log_degenerate:
                logger.warning(message, extra={"entity_code": equipment_code})
            if warnings is not None:
                warnings.append(message)
            return ZERO
        with decimal_context():
            return to_decimal(total_value) / divisor

    def _sub_resource_rate(
        self, row: Any, equipment_code: str, warnings: List[str]
    ) -> Optional[Decimal]:
        if isinstance(row, LaborSubResource):
            entity, ref_id = row.labor, row.labor_id
        elif isinstance(row, MaterialSubResource):
            entity, ref_id = row.material, row.material_id
        else:
            message = (
                f"Equipment {equipment_code or '(unnamed)'}: sub-resource type "
                f"{getattr(row, 'resource_type', None)!r} ignored"
            )
            logger.warning(message, extra={"entity_code": equipment_code})
            warnings.append(message)
            return None

        if entity is None:
            message = (
                f"Equipment {equipment_code or '(unnamed)'}: {row.resource_type} "
                f"{ref_id or '(no id)'} is missing, counted as zero cost"
            )
            logger.warning(message, extra={"entity_code": equipment_code})
            warnings.append(message)
            return None
        return entity.rate
