"""
conftest.py: Shared pytest fixtures for the Unit-Rate Estimator test suite.

No database or external service fixtures are defined here. All tests are pure
unit tests over in-memory entity graphs.

Seed data:
    ``fixtures/seed_project.json`` holds the reference project as flat,
    storage-shaped tables (camelCase keys, decimals as strings, ids as foreign
    keys). ``hydrate`` joins them into the nested graph the storage layer
    would hand to the engine, then validates it through the pydantic models.

Import-path bootstrapping:
    The ``backend/`` directory is inserted into sys.path so that all
    ``unitrate.*`` imports resolve correctly regardless of where pytest is
    invoked.
"""

import copy
import json
import os
import sys

import pytest

# ---------------------------------------------------------------------------
# Ensure ``backend/`` is on the import path before any unitrate imports occur.
# ---------------------------------------------------------------------------
_BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)

_SEED_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "fixtures", "seed_project.json")


def _hydrate(tables):
    """
    Join flat seed tables into hydrated entities.

    Dangling foreign keys (ids with no row) hydrate to ``None``, which is
    exactly what the storage layer returns for a deleted reference.
    """
    from unitrate.models.entities import Analysis, BoqItem, Equipment, Labor, Material

    labor = {row["id"]: row for row in tables["labor"]}
    materials = {row["id"]: row for row in tables["materials"]}

    def _join(row):
        joined = dict(row)
        joined["labor"] = labor.get(row.get("laborId"))
        joined["material"] = materials.get(row.get("materialId"))
        return joined

    equipment = {}
    for row in tables["equipment"]:
        equipment[row["id"]] = {**row, "subResources": [_join(s) for s in row["subResources"]]}

    analyses = {}
    for row in tables["analyses"]:
        resources = []
        for res in row["resources"]:
            joined = _join(res)
            joined["equipment"] = equipment.get(res.get("equipmentId"))
            resources.append(joined)
        analyses[row["id"]] = {**row, "resources": resources}

    boq_items = []
    for row in tables["boqItems"]:
        links = [{**link, "analysis": analyses.get(link["analysisId"])} for link in row["boqAnalyses"]]
        boq_items.append({**row, "boqAnalyses": links})

    return {
        "labor": [Labor.model_validate(r) for r in tables["labor"]],
        "materials": [Material.model_validate(r) for r in tables["materials"]],
        "equipment": [Equipment.model_validate(r) for r in equipment.values()],
        "analyses": [Analysis.model_validate(r) for r in analyses.values()],
        "boq_items": [BoqItem.model_validate(r) for r in boq_items],
    }


# ---------------------------------------------------------------------------
# Seed data fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def seed_tables():
    """Raw seed tables as loaded from JSON. Copy before mutating."""
    with open(_SEED_PATH, encoding="utf-8") as fh:
        return json.load(fh)


@pytest.fixture
def tables(seed_tables):
    """A private deep copy of the seed tables, safe to mutate per test."""
    return copy.deepcopy(seed_tables)


@pytest.fixture(scope="session")
def hydrate():
    """The table → entity graph hydrator, for tests that edit the tables first."""
    return _hydrate


@pytest.fixture(scope="session")
def seed_project(seed_tables):
    """
    The hydrated reference project.

      Labor     1001 @ 6, 1002 @ 8, 1003 @ 10 (per hr)
      Material  2001 Diesel @ 4.55/lt, 2002 Benzine @ 5/lt, 2003 Cement @ 100/ton
      Equipment 6001 Bulldozer 500 000 / 20 000 hr, subs: 1003 × 1, 2001 × 40
                6002 Roller    250 000 / 25 000 hr, subs: 1003 × 1, 2001 × 20
      Analysis  7001 Excavation (base 1000): 1002 × 2, 6001 × 10
                7002 Soft Excavation (base 10000): 1003 × 20, 6002 × 200, 2003 × 100
      BoQ       9001 qty 1 000 000: 7001 × 0.5 + 7002 × 0.5
                9002 qty    50 000: 7001 × 1
    """
    return _hydrate(copy.deepcopy(seed_tables))


@pytest.fixture(scope="session")
def by_code(seed_project):
    """Seed entities indexed by kind then code, e.g. by_code["equipment"]["6001"]."""
    return {
        kind: {entity.code: entity for entity in entities}
        for kind, entities in seed_project.items()
    }


# ---------------------------------------------------------------------------
# Engine fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def equipment_engine():
    """EquipmentEngine with the lenient (zero + warning) divisor policy."""
    from unitrate.numeric import DivisorPolicy
    from unitrate.services.equipment_engine import EquipmentEngine
    return EquipmentEngine(divisor_policy=DivisorPolicy.ZERO)


@pytest.fixture(scope="session")
def analysis_engine():
    from unitrate.numeric import DivisorPolicy
    from unitrate.services.analysis_engine import AnalysisEngine
    return AnalysisEngine(divisor_policy=DivisorPolicy.ZERO)


@pytest.fixture(scope="session")
def boq_engine():
    from unitrate.numeric import DivisorPolicy
    from unitrate.services.boq_engine import BoqEngine
    return BoqEngine(divisor_policy=DivisorPolicy.ZERO)


@pytest.fixture(scope="session")
def explosion_engine():
    from unitrate.numeric import DivisorPolicy
    from unitrate.services.explosion_engine import ExplosionEngine
    return ExplosionEngine(divisor_policy=DivisorPolicy.ZERO)


@pytest.fixture(scope="session")
def report_engine():
    from unitrate.numeric import DivisorPolicy
    from unitrate.services.report_engine import ReportEngine
    return ReportEngine(divisor_policy=DivisorPolicy.ZERO)


@pytest.fixture(scope="session")
def seed_explosion(explosion_engine, seed_project):
    """Resource explosion of the reference project."""
    return explosion_engine.explode_project(seed_project["boq_items"])
