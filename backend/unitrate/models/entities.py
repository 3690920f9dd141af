"""
Input entities for the cost aggregation engine.

The storage layer hands over fully-hydrated graphs in camelCase
(``baseQuantity``, ``subResources``, ``boqAnalyses`` ...); every model accepts
those names as aliases as well as the snake_case field names. Models are
frozen: the engine reads them and never writes back.

Resource rows are tagged unions keyed by ``resource_type``. The variant fixes
which reference a row carries; the referenced entity itself may still be
``None`` when the storage layer reports a dangling id.
"""
from decimal import Decimal
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _null_as_zero(value):
    return Decimal(0) if value is None else value


# Rate / quantity / value columns (Numeric in storage). NULL reads as 0;
# everything else goes through pydantic's own Decimal validation.
Amount = Annotated[Decimal, BeforeValidator(_null_as_zero)]


class _Entity(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# ---------------------------------------------------------------------------
# Base resources (leaf nodes)
# ---------------------------------------------------------------------------

class Labor(_Entity):
    id: str
    code: str = ""
    name: str = ""
    unit: str = ""
    rate: Amount = Field(Decimal(0), description="Cost per unit, already in the project's main currency")


class Material(_Entity):
    id: str
    code: str = ""
    name: str = ""
    unit: str = ""
    rate: Amount = Field(Decimal(0), description="Cost per unit, already in the project's main currency")


# ---------------------------------------------------------------------------
# Equipment
# ---------------------------------------------------------------------------

class LaborSubResource(_Entity):
    """Operator labor consumed per one unit of equipment operation."""
    resource_type: Literal["labor"] = "labor"
    labor_id: Optional[str] = None
    labor: Optional[Labor] = None
    quantity: Amount = Decimal(0)


class MaterialSubResource(_Entity):
    """Fuel / consumables consumed per one unit of equipment operation."""
    resource_type: Literal["material"] = "material"
    material_id: Optional[str] = None
    material: Optional[Material] = None
    quantity: Amount = Decimal(0)


SubResource = Annotated[
    Union[LaborSubResource, MaterialSubResource],
    Field(discriminator="resource_type"),
]


class Equipment(_Entity):
    id: str
    code: str = ""
    name: str = ""
    unit: str = ""
    total_value: Amount = Field(Decimal(0), description="Acquisition / replacement value")
    depreciation_total: Amount = Field(
        Decimal(0), description="Lifetime usage units (e.g. hours) the value depreciates over"
    )
    sub_resources: List[SubResource] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------

class LaborResource(_Entity):
    resource_type: Literal["labor"] = "labor"
    labor_id: Optional[str] = None
    labor: Optional[Labor] = None
    quantity: Amount = Decimal(0)


class MaterialResource(_Entity):
    resource_type: Literal["material"] = "material"
    material_id: Optional[str] = None
    material: Optional[Material] = None
    quantity: Amount = Decimal(0)


class EquipmentResource(_Entity):
    """Equipment usage; ``quantity`` is operating hours (or equipment units)."""
    resource_type: Literal["equipment"] = "equipment"
    equipment_id: Optional[str] = None
    equipment: Optional[Equipment] = None
    quantity: Amount = Decimal(0)


AnalysisResourceRow = Annotated[
    Union[LaborResource, MaterialResource, EquipmentResource],
    Field(discriminator="resource_type"),
]


class Analysis(_Entity):
    id: str
    code: str = ""
    name: str = ""
    unit: str = ""
    base_quantity: Amount = Field(
        Decimal(1), description="Production volume the resource list is calibrated against"
    )
    resources: List[AnalysisResourceRow] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Bill of Quantities
# ---------------------------------------------------------------------------

class BoqAnalysis(_Entity):
    analysis_id: Optional[str] = None
    coefficient: Amount = Decimal(1)
    analysis: Optional[Analysis] = None


class BoqItem(_Entity):
    id: str
    code: str = ""
    name: str = ""
    description: Optional[str] = None
    unit: str = ""
    quantity: Amount = Decimal(0)
    boq_analyses: List[BoqAnalysis] = Field(default_factory=list)
