"""Tests for source, selection and observation nodes."""
from __future__ import annotations

import pytest

from ifc_flow.application.nodes import (
    NodeInputs,
    pass_through,
    run_filter,
    run_geometry,
    run_parameter,
    run_relationship,
    run_source,
    run_spatial,
    run_transform,
)
from ifc_flow.application.nodes.source import coerce_parameter
from ifc_flow.domain.exceptions import (
    InvalidNodeInputError,
    ModelNotFoundError,
    NodeExecutionError,
    UnsupportedOperatorError,
)
from ifc_flow.domain.models.element import Element
from ifc_flow.domain.models.node_config import (
    FilterConfig,
    FilterOperator,
    FilterType,
    GeometryConfig,
    ParameterConfig,
    RelationshipConfig,
    SourceConfig,
    SpatialConfig,
    TransformConfig,
)
from ifc_flow.domain.models.result import AggregateResult, ElementsResult, ValueResult
from ifc_flow.infrastructure.ifc.registry import ModelRegistry


def names(result: ElementsResult) -> list[str]:
    return [element.name for element in result.elements]


class TestSourceNodes:
    """Tests for source and parameter nodes."""

    async def test_source_uses_latest_model(self, registry: ModelRegistry) -> None:
        """Test the source defaults to the latest model."""
        result = await run_source(SourceConfig(), registry)
        assert len(result) == 3
        assert result.model is not None
        assert result.model.id == "sample"

    async def test_source_unknown_model(self, registry: ModelRegistry) -> None:
        """Test an unknown model id raises."""
        with pytest.raises(ModelNotFoundError):
            await run_source(SourceConfig(model_id="missing"), registry)

    @pytest.mark.parametrize(
        "value,param_type,expected",
        [
            ("3", "number", 3),
            ("2.5", "number", 2.5),
            ("yes", "boolean", True),
            ("off", "boolean", False),
            ("a, b,,c", "list", ["a", "b", "c"]),
            (None, "text", ""),
            (12, "text", "12"),
        ],
    )
    def test_coerce_parameter(self, value: object, param_type: str, expected: object) -> None:
        """Test parameter coercion per type."""
        assert coerce_parameter(value, param_type) == expected

    def test_bad_number_parameter(self) -> None:
        """Test unparseable numbers fail."""
        with pytest.raises(NodeExecutionError):
            run_parameter(ParameterConfig(value="abc", param_type="number"))

    def test_parameter_result(self) -> None:
        """Number parameters come back as numbers."""
        assert run_parameter(ParameterConfig(value="7", param_type="number")) == ValueResult(value=7)

    def test_list_parameter_reads_list_items(self) -> None:
        """Canvas list widgets keep the items apart from the selected value."""
        config = ParameterConfig.model_validate({"paramType": "list", "listItems": "a, b, c", "value": "a"})
        assert run_parameter(config) == ValueResult(value=["a", "b", "c"])

    def test_list_parameter_falls_back_to_value(self) -> None:
        """Without list items the value itself is split."""
        assert run_parameter(ParameterConfig(value="x,y", param_type="list")) == ValueResult(value=["x", "y"])

    def test_number_range_is_accepted(self) -> None:
        """Slider bounds are kept on the configuration."""
        config = ParameterConfig.model_validate(
            {"paramType": "number", "value": "4", "range": {"min": 0, "max": 10}}
        )
        assert config.range is not None
        assert config.range.max == 10.0
        assert run_parameter(config) == ValueResult(value=4)


class TestGeometryNode:
    """Tests for category selection."""

    @pytest.mark.parametrize(
        "category,expected",
        [
            ("walls", ["Wall A"]),
            ("Columns", ["Column C"]),
            ("all", ["Wall A", "Slab B", "Column C"]),
            ("pipes", []),
        ],
    )
    def test_categories(self, inputs: NodeInputs, category: str, expected: list[str]) -> None:
        """Test category selection."""
        assert names(run_geometry(inputs, GeometryConfig(element_type=category))) == expected

    def test_openings_can_be_dropped(self, wall: Element) -> None:
        """Test excluding openings."""
        opening = Element.create(200, "IfcOpeningElement", properties={"Name": "Hole"})
        inputs = NodeInputs.of(input=ElementsResult(elements=(wall, opening)))
        assert names(run_geometry(inputs, GeometryConfig(include_openings=False))) == ["Wall A"]
        assert len(run_geometry(inputs, GeometryConfig())) == 2

    def test_model_is_kept(self, inputs: NodeInputs) -> None:
        """Test the source model travels with the selection."""
        assert run_geometry(inputs, GeometryConfig(element_type="walls")).model is not None

    def test_transform_replaces_previous(self, inputs: NodeInputs) -> None:
        """Test a new transform replaces the old one."""
        first = run_transform(inputs, TransformConfig(translate_x=1.0))
        second = run_transform(NodeInputs.of(input=first), TransformConfig(scale_z=2.0))
        transform = second.elements[0].transform
        assert transform is not None
        assert transform.translation == (0.0, 0.0, 0.0)
        assert transform.scale == (1.0, 1.0, 2.0)


class TestFilterNode:
    """Tests for filter predicates."""

    def _run(self, inputs: NodeInputs, **options: object) -> list[str]:
        return names(run_filter(inputs, FilterConfig(**options)))

    def test_equals_ignores_case(self, inputs: NodeInputs) -> None:
        """Test equals ignores case."""
        assert self._run(inputs, property="Material", value="steel") == ["Column C"]
        assert self._run(inputs, property="Material", value="STEEL") == ["Column C"]

    def test_element_type(self, inputs: NodeInputs) -> None:
        """Test filtering by element type."""
        assert self._run(inputs, filter_type=FilterType.ELEMENT_TYPE, value="ifcwall") == ["Wall A"]

    def test_name_starts_with(self, inputs: NodeInputs) -> None:
        """Test startsWith on names."""
        assert self._run(
            inputs,
            filter_type=FilterType.NAME,
            operator=FilterOperator.STARTS_WITH,
            value="slab",
        ) == ["Slab B"]

    def test_level(self, inputs: NodeInputs) -> None:
        """Test filtering by storey."""
        assert len(self._run(inputs, filter_type=FilterType.LEVEL, value="l1")) == 3

    def test_numeric_comparison_on_dotted_path(self, inputs: NodeInputs) -> None:
        """Test greaterThan on a dotted path."""
        assert self._run(
            inputs,
            property="Qto_WallBaseQuantities.Length",
            operator=FilterOperator.GREATER_THAN,
            value="4",
        ) == ["Wall A"]

    def test_equals_matches_numerically(self, inputs: NodeInputs) -> None:
        """Numeric element values compare by number."""
        assert self._run(inputs, property="Qto_SlabBaseQuantities.NetArea", value="30") == ["Slab B"]

    @pytest.mark.parametrize(
        "mark,operator,expected",
        [
            ("01", FilterOperator.EQUALS, []),
            ("01", FilterOperator.NOT_EQUALS, ["Door D"]),
            ("D-01", FilterOperator.EQUALS, []),
            ("1", FilterOperator.EQUALS, ["Door D"]),
        ],
    )
    def test_text_values_compare_as_text(self, mark: str, operator: FilterOperator, expected: list[str]) -> None:
        """A numeric-looking text value is not equal to a differently written number."""
        door = Element.create(104, "IfcDoor", properties={"Name": "Door D", "Mark": mark})
        inputs = NodeInputs.of(input=ElementsResult(elements=(door,)))
        assert self._run(inputs, property="Mark", operator=operator, value="1") == expected

    def test_missing_value_only_passes_negative_operators(self, inputs: NodeInputs) -> None:
        """Test missing values pass only negative operators."""
        assert self._run(inputs, property="FireRating", operator=FilterOperator.NOT_EQUALS, value="F90") == [
            "Slab B",
            "Column C",
        ]
        assert self._run(inputs, property="FireRating", operator=FilterOperator.CONTAINS, value="F") == ["Wall A"]

    def test_pset_exists(self, inputs: NodeInputs) -> None:
        """Test exists and notExists on property sets."""
        assert self._run(
            inputs,
            filter_type=FilterType.PSET_EXISTS,
            operator=FilterOperator.EXISTS,
            pset_name="Pset_ColumnCommon",
        ) == ["Column C"]
        assert self._run(
            inputs,
            filter_type=FilterType.PSET_EXISTS,
            operator=FilterOperator.NOT_EXISTS,
            pset_name="Pset_ColumnCommon",
        ) == ["Wall A", "Slab B"]

    def test_explicit_pset(self, inputs: NodeInputs) -> None:
        """Test filtering within a named set."""
        assert self._run(inputs, property="LoadBearing", value="true", pset_name="Pset_SlabCommon") == ["Slab B"]

    def test_unsupported_operator(self, inputs: NodeInputs) -> None:
        """Test operators outside the type's set raise."""
        with pytest.raises(UnsupportedOperatorError):
            run_filter(
                inputs,
                FilterConfig(filter_type=FilterType.ELEMENT_TYPE, operator=FilterOperator.GREATER_THAN),
            )

    def test_property_name_required(self, inputs: NodeInputs) -> None:
        """Test a blank property name raises."""
        with pytest.raises(NodeExecutionError):
            run_filter(inputs, FilterConfig(property=" ", value="x"))

    def test_deterministic(self, inputs: NodeInputs) -> None:
        """Test repeated filters agree."""
        config = FilterConfig(property="Material", value="concrete")
        assert run_filter(inputs, config) == run_filter(inputs, config)


class TestSpatialNodes:
    """Tests for spatial and relationship queries."""

    def test_contained_in_storey(self, inputs: NodeInputs, storey: Element) -> None:
        """Elements on the reference storey are contained in it."""
        inputs = NodeInputs.of(input=inputs.single(), reference=ElementsResult(elements=(storey,)))
        assert len(run_spatial(inputs, SpatialConfig(query_type="contained"))) == 3

    def test_other_storey(self, inputs: NodeInputs) -> None:
        """No element sits on an unrelated storey."""
        other = Element.create(11, "IfcBuildingStorey", properties={"Name": "L2"})
        inputs = NodeInputs.of(input=inputs.single(), reference=ElementsResult(elements=(other,)))
        assert len(run_spatial(inputs, SpatialConfig(query_type="contained"))) == 0

    @pytest.mark.parametrize(
        "query,reference_type,reference_name,expected",
        [
            ("contained", "IfcBuilding", "Main", ["Wall A", "Slab B", "Column C"]),
            ("containing", "IfcBuilding", "Main", []),
            ("containing", "IfcBuildingStorey", "L1", ["Wall A", "Slab B", "Column C"]),
            ("containing", "IfcBuildingStorey", "L2", []),
        ],
    )
    def test_spatial_structure_reference(
        self,
        elements: tuple[Element, ...],
        query: str,
        reference_type: str,
        reference_name: str,
        expected: list[str],
    ) -> None:
        """Spatial-structure references match by storey; unplaced elements never match."""
        loose = Element.create(300, "IfcFurniture", properties={"Name": "Desk"})
        reference = Element.create(12, reference_type, properties={"Name": reference_name})
        inputs = NodeInputs.of(
            input=ElementsResult(elements=(*elements, loose)),
            reference=ElementsResult(elements=(reference,)),
        )
        assert names(run_spatial(inputs, SpatialConfig(query_type=query))) == expected

    @pytest.mark.parametrize(
        "query,distance,expected",
        [
            ("contained", 1.0, 2),
            ("containing", 1.0, 0),
            ("intersecting", 1.0, 1),
            ("touching", 1.0, 0),
            ("within-distance", 2.5, 1),
            ("within-distance", 10.0, 3),
        ],
    )
    def test_leading_share(
        self,
        inputs: NodeInputs,
        column: Element,
        query: str,
        distance: float,
        expected: int,
    ) -> None:
        """Non-structural references keep a fixed leading share of the input."""
        inputs = NodeInputs.of(input=inputs.single(), reference=ElementsResult(elements=(column,)))
        assert len(run_spatial(inputs, SpatialConfig(query_type=query, distance=distance))) == expected

    def test_no_reference(self, inputs: NodeInputs) -> None:
        """Without a reference collection nothing is selected."""
        assert len(run_spatial(inputs, SpatialConfig())) == 0

    @pytest.mark.parametrize("relation,expected", [("material", 2), ("containment", 1), ("voiding", 0)])
    def test_relationship(self, inputs: NodeInputs, relation: str, expected: int) -> None:
        """Each relationship type keeps its own share."""
        assert len(run_relationship(inputs, RelationshipConfig(relation_type=relation))) == expected

    def test_direction_does_not_change_result(self, inputs: NodeInputs) -> None:
        """Direction is recorded only."""
        outgoing = run_relationship(inputs, RelationshipConfig(direction="outgoing"))
        incoming = run_relationship(inputs, RelationshipConfig(direction="incoming"))
        assert outgoing == incoming


class TestObserveNodes:
    """Tests for watch/viewer pass-through."""

    def test_single_input_is_returned_as_is(self) -> None:
        """Test a single input passes through."""
        aggregate = AggregateResult(values={"Total": 3})
        assert pass_through(NodeInputs.of(input=aggregate)) is aggregate

    def test_collections_are_concatenated(self, wall: Element, slab: Element) -> None:
        """Test several collections are concatenated."""
        inputs = NodeInputs.of(input=[ElementsResult(elements=(wall,)), ElementsResult(elements=(slab,))])
        assert names(pass_through(inputs)) == ["Wall A", "Slab B"]

    def test_mixed_inputs_are_rejected(self, wall: Element) -> None:
        """Test mixing collections with values fails."""
        inputs = NodeInputs.of(input=[ElementsResult(elements=(wall,)), ValueResult(value=1)])
        with pytest.raises(InvalidNodeInputError):
            pass_through(inputs)

    def test_no_input(self) -> None:
        """Test no input gives an empty collection."""
        assert len(pass_through(NodeInputs())) == 0
