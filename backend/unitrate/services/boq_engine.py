"""
BoqEngine: Bill of Quantities line item pricing (BDC / BDP / BTC).

The line's unit rate is the coefficient-weighted sum of its linked analyses'
unit rates. Coefficients are NOT normalised: a line whose coefficients sum to
0.8 or 1.5 is priced exactly as entered.
"""
import logging
from typing import Any, Iterable, List, Optional

from unitrate.models.entities import BoqItem
from unitrate.models.results import AnalysisCosts, BoqCosts
from unitrate.numeric import ZERO, decimal_context, to_decimal
from unitrate.services.analysis_engine import AnalysisEngine

logger = logging.getLogger("unitrate-boq")


class BoqEngine:

    def __init__(
        self,
        divisor_policy: Optional[Any] = None,
        analysis_engine: Optional[AnalysisEngine] = None,
    ) -> None:
        self.analysis_engine = analysis_engine or AnalysisEngine(divisor_policy)

    def boq_costs(self, item: BoqItem) -> BoqCosts:
        return self.compute_costs(item.quantity, item.boq_analyses, boq_code=item.code)

    def compute_costs(
        self,
        quantity: Any,
        boq_analyses: Iterable[Any],
        boq_code: str = "",
    ) -> BoqCosts:
        """
        Args:
            quantity: contracted quantity of the line item
            boq_analyses: BoqAnalysis links (coefficient + hydrated analysis)

        Returns unit rates and line totals (unit rate × quantity).
        """
        warnings: List[str] = []
        with decimal_context():
            unit_rate_dc = ZERO
            unit_rate_dp = ZERO

            for link in boq_analyses:
                costs = self.linked_analysis_costs(link, boq_code, warnings)
                if costs is None:
                    continue
                coefficient = to_decimal(link.coefficient)
                unit_rate_dc += coefficient * costs.unit_rate_dc
                unit_rate_dp += coefficient * costs.unit_rate_dp

            unit_rate_tc = unit_rate_dc + unit_rate_dp
            qty = to_decimal(quantity)

            return BoqCosts(
                unit_rate_dc=unit_rate_dc,
                unit_rate_dp=unit_rate_dp,
                unit_rate_tc=unit_rate_tc,
                total_dc=unit_rate_dc * qty,
                total_dp=unit_rate_dp * qty,
                total_tc=unit_rate_tc * qty,
                warnings=tuple(warnings),
            )

    def linked_analysis_costs(
        self, link: Any, boq_code: str, warnings: List[str]
    ) -> Optional[AnalysisCosts]:
        """Analysis costs for one link, or None (with a warning) if the analysis is missing."""
        if link.analysis is None:
            message = (
                f"BoQ {boq_code or '(unnamed)'}: analysis "
                f"{link.analysis_id or '(no id)'} is missing, counted as zero cost"
            )
            logger.warning(message, extra={"entity_code": boq_code})
            warnings.append(message)
            return None
        costs = self.analysis_engine.analysis_costs(link.analysis)
        warnings.extend(costs.warnings)
        return costs
