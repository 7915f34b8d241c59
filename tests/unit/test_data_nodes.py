"""Tests for quantity, property, classification, analysis and export nodes."""
from __future__ import annotations

import json

import pytest

from ifc_flow.application.nodes import (
    NodeInputs,
    run_analysis,
    run_classification,
    run_native_export,
    run_property,
    run_quantity,
    run_text_export,
)
from ifc_flow.domain.exceptions import ExportError, InvalidNodeInputError, NodeExecutionError
from ifc_flow.domain.interfaces import ExportRequest
from ifc_flow.domain.models.element import Element
from ifc_flow.domain.models.node_config import (
    AnalysisConfig,
    ClassificationConfig,
    ExportConfig,
    PropertyConfig,
    QuantityConfig,
)
from ifc_flow.domain.models.result import (
    AggregateResult,
    BinaryResult,
    ElementsResult,
    TextResult,
    ValueResult,
)


class RecordingWriter:
    """Model writer double that records requests."""

    def __init__(self, payload: bytes = b"PK", error: Exception | None = None) -> None:
        self.payload = payload
        self.error = error
        self.requests: list[ExportRequest] = []

    async def write(self, request: ExportRequest) -> bytes:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.payload


class TestQuantityNode:
    """Tests for quantity takeoff."""

    def test_count_by_material(self, inputs: NodeInputs) -> None:
        """Test counting elements grouped by material."""
        result = run_quantity(inputs, QuantityConfig(quantity_type="count", group_by="material"))
        assert dict(result.values) == {"Concrete": 2, "Steel": 1}
        assert result.unit == ""

    def test_area_total_uses_defaults_for_missing_quantities(self, inputs: NodeInputs) -> None:
        """Test area total falls back to the default for elements without areas."""
        result = run_quantity(inputs, QuantityConfig(quantity_type="area"))
        assert dict(result.values) == {"Total": 52.5}
        assert result.unit == "m²"

    def test_volume_by_type(self, inputs: NodeInputs) -> None:
        """Test volume totals grouped by type label."""
        result = run_quantity(inputs, QuantityConfig(quantity_type="volume", group_by="type"))
        assert dict(result.values) == {"Wall": 2.5, "Slab": 6, "Column": 8}

    def test_length_by_level(self, inputs: NodeInputs) -> None:
        """Test length totals grouped by storey with a custom unit."""
        result = run_quantity(inputs, QuantityConfig(quantity_type="length", group_by="level", unit="mm"))
        assert dict(result.values) == {"L1": 11}
        assert result.unit == "mm"

    def test_unknown_group(self) -> None:
        """Test elements without a group key land in "Unknown"."""
        beam = Element.create(9, "IfcBeam")
        result = run_quantity(NodeInputs.of(input=ElementsResult(elements=(beam,))), QuantityConfig(
            quantity_type="count",
            group_by="material",
        ))
        assert dict(result.values) == {"Unknown": 1}

    def test_empty_input(self) -> None:
        """Test an empty collection totals zero."""
        result = run_quantity(NodeInputs.of(input=ElementsResult()), QuantityConfig())
        assert dict(result.values) == {"Total": 0}

    def test_idempotent(self, inputs: NodeInputs) -> None:
        """Test repeated takeoffs give equal results."""
        config = QuantityConfig(quantity_type="area", group_by="material")
        assert run_quantity(inputs, config) == run_quantity(inputs, config)

    def test_rejects_non_collection(self) -> None:
        """Test a non-element input is rejected."""
        with pytest.raises(InvalidNodeInputError):
            run_quantity(NodeInputs.of(input=ValueResult(value=1)), QuantityConfig())


class TestPropertyNode:
    """Tests for property get/set/remove."""

    def test_get_existing(self, inputs: NodeInputs) -> None:
        """Test reading a property records where it was found."""
        result = run_property(inputs, PropertyConfig(property_name="FireRating"))
        info = result.elements[0].property_info
        assert info is not None
        assert info.exists
        assert info.value == "F90"
        assert info.pset_name == "Pset_WallCommon"
        assert result.elements[1].property_info.exists is False

    def test_set_then_get(self, inputs: NodeInputs) -> None:
        """Test a written property reads back."""
        written = run_property(inputs, PropertyConfig(
            property_name="FireRating",
            action="set",
            property_value="F120",
            target_pset="Pset_WallCommon",
        ))
        read = run_property(NodeInputs.of(input=written), PropertyConfig(property_name="FireRating"))
        for element in read.elements:
            assert element.property_info.exists
            assert element.property_info.value == "F120"

    def test_set_without_target_uses_custom_pset(self, inputs: NodeInputs) -> None:
        """Test writing without a target set uses CustomProperties."""
        written = run_property(inputs, PropertyConfig(property_name="Cost", action="add", property_value=10))
        element = written.elements[2]
        assert element.psets["CustomProperties"]["Cost"] == 10
        assert element.properties["Cost"] == 10

    def test_pset_prefix_syntax(self, inputs: NodeInputs) -> None:
        """Test the "Pset:Prop" name selects the target set."""
        written = run_property(inputs, PropertyConfig(property_name="Pset_Cost:Price", action="set", property_value="5"))
        assert written.elements[0].psets["Pset_Cost"]["Price"] == "5"

    def test_remove_then_get(self, inputs: NodeInputs) -> None:
        """Test a removed property no longer exists."""
        removed = run_property(inputs, PropertyConfig(property_name="LoadBearing", action="remove"))
        read = run_property(NodeInputs.of(input=removed), PropertyConfig(property_name="LoadBearing"))
        assert all(not element.property_info.exists for element in read.elements)

    def test_upstream_elements_are_untouched(self, inputs: NodeInputs, wall: Element) -> None:
        """Test editing copies elements instead of mutating them."""
        run_property(inputs, PropertyConfig(property_name="FireRating", action="set", property_value="F30"))
        assert wall.psets["Pset_WallCommon"]["FireRating"] == "F90"

    def test_value_from_value_port(self, collection: ElementsResult) -> None:
        """Test the value port overrides the configured value."""
        inputs = NodeInputs.of(input=collection, value=ValueResult(value=42))
        written = run_property(inputs, PropertyConfig(
            property_name="Rating",
            action="set",
            property_value="ignored",
            use_value_input=True,
        ))
        assert written.elements[0].properties["Rating"] == 42

    def test_value_from_single_aggregate(self, collection: ElementsResult) -> None:
        """Test a single-entry aggregate supplies its value."""
        inputs = NodeInputs.of(input=collection, value=AggregateResult(values={"Total": 52.5}))
        written = run_property(inputs, PropertyConfig(property_name="Area", action="set", use_value_input=True))
        assert written.elements[0].properties["Area"] == 52.5

    def test_empty_name_passes_through(self, inputs: NodeInputs, collection: ElementsResult) -> None:
        """Test an empty property name leaves elements unchanged."""
        result = run_property(inputs, PropertyConfig(property_name=" ", action="set", property_value=1))
        assert result.elements == collection.elements


class TestClassificationNode:
    """Tests for classification get/set."""

    def test_set_then_get(self, inputs: NodeInputs) -> None:
        """Test an assigned classification reads back."""
        written = run_classification(inputs, ClassificationConfig(action="set", system="uniclass", code="Ss_20"))
        assigned = written.elements[0].classifications[0]
        assert assigned.system == "Uniclass 2015"
        assert written.elements[0].psets["Pset_ClassificationReference"]["Code"] == "Ss_20"

        read = run_classification(NodeInputs.of(input=written), ClassificationConfig(action="get"))
        found = read.elements[0].classifications[0]
        assert (found.system, found.code) == ("Uniclass 2015", "Ss_20")

    def test_get_without_classification(self, inputs: NodeInputs) -> None:
        """Test elements without a classification get an empty list."""
        read = run_classification(inputs, ClassificationConfig(action="get"))
        assert all(element.classifications == () for element in read.elements)

    def test_custom_system_name_is_kept(self, inputs: NodeInputs) -> None:
        """Test unknown system names pass through unchanged."""
        written = run_classification(inputs, ClassificationConfig(action="set", system="NL-SfB", code="21"))
        assert written.elements[0].classifications[0].system == "NL-SfB"


class TestAnalysisNode:
    """Tests for analysis reports."""

    def test_clash_is_deterministic(self, inputs: NodeInputs, collection: ElementsResult) -> None:
        """Test clash sampling repeats for the same elements."""
        inputs = NodeInputs.of(input=collection, reference=collection)
        first = run_analysis(inputs, AnalysisConfig(analysis_type="clash"))
        second = run_analysis(inputs, AnalysisConfig(analysis_type="clash"))
        assert first == second
        assert first.values["analysisType"] == "clash"
        assert first.values["clashCount"] == len(first.values["clashes"])

    def test_clash_needs_reference(self, inputs: NodeInputs) -> None:
        """Test clash analysis without references fails."""
        with pytest.raises(NodeExecutionError):
            run_analysis(inputs, AnalysisConfig(analysis_type="clash"))

    def test_no_elements(self) -> None:
        """Test analysis of an empty collection fails."""
        with pytest.raises(NodeExecutionError):
            run_analysis(NodeInputs.of(input=ElementsResult()), AnalysisConfig(analysis_type="space"))

    @pytest.mark.parametrize(
        "metric,expected",
        [
            ("area", {"totalArea": 42.5, "areaPerElement": 14.17}),
            ("volume", {"totalVolume": 8.5, "volumePerElement": 2.83}),
            ("occupancy", {"occupancy": 4, "density": 0.0941}),
            ("circulation", {"circulation": 12.75, "program": 29.75}),
        ],
    )
    def test_space_metrics(self, inputs: NodeInputs, metric: str, expected: dict[str, float]) -> None:
        """Space metrics sum quantity sets; elements without them add nothing."""
        result = run_analysis(inputs, AnalysisConfig(analysis_type="space", metric=metric))
        assert dict(result.values) == {"analysisType": "space", **expected}

    @pytest.mark.parametrize(
        "metric,expected",
        [
            ("area", {"totalArea": 55.0, "areaPerElement": 27.5}),
            ("volume", {"totalVolume": 105.0, "volumePerElement": 52.5}),
            ("occupancy", {"occupancy": 5, "density": 0.0909}),
            ("circulation", {"circulation": 16.5, "program": 38.5}),
        ],
    )
    def test_space_defaults(self, metric: str, expected: dict[str, float]) -> None:
        """Spaces without quantities count as 20 m² and 60 m³."""
        measured = Element.create(
            501,
            "IfcSpace",
            properties={"Name": "Office"},
            qtos={"Qto_SpaceBaseQuantities": {"NetFloorArea": 35.0, "NetVolume": 45.0}},
        )
        bare = Element.create(502, "IfcSpace", properties={"Name": "Store"})
        inputs = NodeInputs.of(input=ElementsResult(elements=(measured, bare)))
        result = run_analysis(inputs, AnalysisConfig(analysis_type="space", metric=metric))
        assert dict(result.values) == {"analysisType": "space", **expected}

    def test_adjacency(self, inputs: NodeInputs, wall: Element) -> None:
        """Test the adjacency report shape."""
        result = run_analysis(inputs, AnalysisConfig(analysis_type="adjacency"))
        assert result.values["adjacentElements"] == 1
        assert result.values["details"] == [{"id": wall.id, "adjacentTo": 1}]

    def test_path(self, inputs: NodeInputs) -> None:
        """Test the fixed path report."""
        result = run_analysis(inputs, AnalysisConfig(analysis_type="path"))
        assert result.values["pathLength"] == 42.5
        assert len(result.values["waypoints"]) == 6

    def test_visibility(self, inputs: NodeInputs) -> None:
        """Test visible counts per viewpoint."""
        result = run_analysis(inputs, AnalysisConfig(analysis_type="visibility"))
        assert result.values["visibleElements"] == 1
        assert [vp["visibleCount"] for vp in result.values["viewpoints"]] == [1, 2, 1]


class TestExportNode:
    """Tests for text and native exports."""

    def test_csv(self, inputs: NodeInputs) -> None:
        """Test CSV export with quoting."""
        result = run_text_export(inputs, ExportConfig(format="csv", file_name="walls"))
        assert isinstance(result, TextResult)
        assert result.file_name == "walls.csv"
        assert result.text == (
            "Name,Type,Material\n"
            "Wall A,IfcWall,Concrete\n"
            "Slab B,IfcSlab,Concrete\n"
            "Column C,IfcColumn,Steel\n"
        )

    def test_json(self, inputs: NodeInputs) -> None:
        """Test JSON export rows."""
        result = run_text_export(inputs, ExportConfig(format="json", properties="Name,Pset_WallCommon.FireRating"))
        rows = json.loads(result.text)
        assert rows[0] == {"Name": "Wall A", "Pset_WallCommon.FireRating": "F90"}
        assert rows[1]["Pset_WallCommon.FireRating"] is None

    def test_columns_default_to_first_element(self, inputs: NodeInputs) -> None:
        """Test blank column lists use the first element's fields."""
        result = run_text_export(inputs, ExportConfig(format="csv", properties=""))
        assert result.text.splitlines()[0] == "GlobalId,Name,Material,BuildingStorey,IsExternal"

    @pytest.mark.parametrize("export_format,expected", [("csv", ""), ("json", "[]")])
    def test_empty_input(self, export_format: str, expected: str) -> None:
        """Test empty exports per text format."""
        result = run_text_export(NodeInputs.of(input=ElementsResult()), ExportConfig(format=export_format))
        assert result.text == expected

    async def test_native_export(self, inputs: NodeInputs) -> None:
        """Test native formats are handed to the writer."""
        writer = RecordingWriter(payload=b"xlsx-bytes")
        result = await run_native_export(inputs, ExportConfig(format="excel", file_name="takeoff"), writer)
        assert isinstance(result, BinaryResult)
        assert result.file_name == "takeoff.xlsx"
        assert result.payload == b"xlsx-bytes"
        assert len(writer.requests[0].elements) == 3
        assert writer.requests[0].model is not None

    async def test_native_export_without_writer(self, inputs: NodeInputs) -> None:
        """Test native export without a writer fails."""
        with pytest.raises(ExportError):
            await run_native_export(inputs, ExportConfig(format="ifc"), None)

    async def test_writer_errors_become_export_errors(self, inputs: NodeInputs) -> None:
        """Test writer failures surface as export errors."""
        writer = RecordingWriter(error=RuntimeError("disk full"))
        with pytest.raises(ExportError, match="disk full"):
            await run_native_export(inputs, ExportConfig(format="excel"), writer)
