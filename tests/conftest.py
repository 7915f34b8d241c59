"""Pytest configuration and fixtures."""
from __future__ import annotations

import pytest

from ifc_flow.application.nodes import NodeInputs
from ifc_flow.domain.models.element import Element
from ifc_flow.domain.models.model import Model
from ifc_flow.domain.models.result import ElementsResult
from ifc_flow.infrastructure.ifc.registry import ModelRegistry
from ifc_flow.shared.config import Settings


@pytest.fixture
def test_settings() -> Settings:
    """Execution settings for tests."""
    return Settings(
        max_concurrency=4,
        node_timeout_seconds=None,
        log_level="DEBUG",
    )


@pytest.fixture
def wall() -> Element:
    return Element.create(
        101,
        "IfcWall",
        properties={
            "GlobalId": "0aBcDeFgHiJkLmNoPqRs01",
            "Name": "Wall A",
            "Material": "Concrete",
            "BuildingStorey": "L1",
            "IsExternal": True,
        },
        psets={"Pset_WallCommon": {"IsExternal": True, "FireRating": "F90"}},
        qtos={"Qto_WallBaseQuantities": {"Length": 5.0, "NetArea": 12.5, "NetVolume": 2.5}},
    )


@pytest.fixture
def slab() -> Element:
    return Element.create(
        102,
        "IfcSlab",
        properties={
            "GlobalId": "0aBcDeFgHiJkLmNoPqRs02",
            "Name": "Slab B",
            "Material": "Concrete",
            "BuildingStorey": "L1",
        },
        psets={"Pset_SlabCommon": {"LoadBearing": True}},
        qtos={"Qto_SlabBaseQuantities": {"NetArea": 30.0, "NetVolume": 6.0}},
    )


@pytest.fixture
def column() -> Element:
    return Element.create(
        103,
        "IfcColumn",
        properties={
            "GlobalId": "0aBcDeFgHiJkLmNoPqRs03",
            "Name": "Column C",
            "Material": "Steel",
            "BuildingStorey": "L1",
        },
        psets={"Pset_ColumnCommon": {"LoadBearing": True}},
        qtos={"Qto_ColumnBaseQuantities": {"Length": 3.0}},
    )


@pytest.fixture
def storey() -> Element:
    return Element.create(10, "IfcBuildingStorey", properties={"Name": "L1"})


@pytest.fixture
def elements(wall: Element, slab: Element, column: Element) -> tuple[Element, ...]:
    """Wall A (Concrete), Slab B (Concrete), Column C (Steel), all on L1."""
    return (wall, slab, column)


@pytest.fixture
def sample_model(elements: tuple[Element, ...]) -> Model:
    return Model(id="sample", name="sample.ifc", elements=elements)


@pytest.fixture
def registry(sample_model: Model) -> ModelRegistry:
    return ModelRegistry([sample_model])


@pytest.fixture
def collection(sample_model: Model) -> ElementsResult:
    return ElementsResult(elements=sample_model.elements, model=sample_model)


@pytest.fixture
def inputs(collection: ElementsResult) -> NodeInputs:
    """The sample collection on the ``input`` port."""
    return NodeInputs.of(input=collection)
