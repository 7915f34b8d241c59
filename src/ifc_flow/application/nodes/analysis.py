"""Analysis node.

Produces schematic reports over the element collection. Clash detection is a
seeded sampling, not a geometric intersection test.
"""
from __future__ import annotations

import hashlib
import math
import random
from typing import Any

from ifc_flow.application.nodes.base import NodeInputs
from ifc_flow.application.nodes.lookup import measure_from_qtos
from ifc_flow.domain.exceptions import NodeExecutionError
from ifc_flow.domain.models.element import Element
from ifc_flow.domain.models.node_config import AnalysisConfig
from ifc_flow.domain.models.node_kind import REFERENCE_PORT
from ifc_flow.domain.models.result import AggregateResult

MAX_CLASH_CANDIDATES = 20
CLASH_PROBABILITY = 0.3

SPACE_DEFAULT_AREA = 20.0
SPACE_DEFAULT_VOLUME = 60.0
AREA_PER_PERSON = 10.0
CIRCULATION_SHARE = 0.3

ADJACENCY_SHARE = 0.4
VISIBLE_SHARE = 0.6
VISIBILITY_SCORE = 0.75

PATH_LENGTH = 42.5
PATH_WAYPOINTS = (
    (0, 0, 0),
    (10, 0, 0),
    (10, 20, 0),
    (30, 20, 0),
    (30, 0, 0),
    (40, 0, 0),
)

# (x, y, z, share of elements visible)
VIEWPOINTS = (
    (0, 0, 1.7, 0.5),
    (10, 10, 1.7, 0.7),
    (20, 0, 1.7, 0.6),
)


def _seed_for(elements: tuple[Element, ...], references: tuple[Element, ...]) -> int:
    digest = hashlib.sha256()
    for element in (*elements, *references):
        digest.update(element.id.encode("utf-8"))
        digest.update(b"\0")
    return int.from_bytes(digest.digest()[:8], "big")


def _summary(element: Element) -> dict[str, Any]:
    return {"id": element.id, "type": element.type, "name": element.name}


def clash_report(
    elements: tuple[Element, ...],
    references: tuple[Element, ...],
    tolerance: float,
    seed: int | None = None,
) -> dict[str, Any]:
    """Sample clashes between the primary and reference collections.

    The same inputs and seed always give the same report.
    """
    rng = random.Random(seed if seed is not None else _seed_for(elements, references))
    clashes = []
    for index, element in enumerate(elements[:MAX_CLASH_CANDIDATES]):
        partner = references[rng.randrange(len(references))]
        if rng.random() < CLASH_PROBABILITY:
            clashes.append({
                "id": f"clash-{index}",
                "element1": _summary(element),
                "element2": _summary(partner),
                "distance": round(rng.random() * tolerance / 2, 3),
                "point": {
                    "x": round(rng.random() * 10, 3),
                    "y": round(rng.random() * 10, 3),
                    "z": round(rng.random() * 3, 3),
                },
            })
    return {"clashCount": len(clashes), "clashes": clashes, "tolerance": tolerance}


def _space_total(elements: tuple[Element, ...], measure: str, default: float) -> float:
    total = 0.0
    for element in elements:
        value = measure_from_qtos(element, measure)
        if value is not None:
            total += value
        elif element.is_type("IfcSpace"):
            total += default
    return total


def space_report(elements: tuple[Element, ...], metric: str) -> dict[str, Any]:
    count = len(elements)
    if metric == "volume":
        volume = _space_total(elements, "volume", SPACE_DEFAULT_VOLUME)
        return {"totalVolume": round(volume, 2), "volumePerElement": round(volume / count, 2)}

    area = _space_total(elements, "area", SPACE_DEFAULT_AREA)
    if metric == "occupancy":
        occupancy = math.floor(area / AREA_PER_PERSON)
        density = round(occupancy / area, 4) if area else 0.0
        return {"occupancy": occupancy, "density": density}
    if metric == "circulation":
        return {
            "circulation": round(area * CIRCULATION_SHARE, 2),
            "program": round(area * (1 - CIRCULATION_SHARE), 2),
        }
    return {"totalArea": round(area, 2), "areaPerElement": round(area / count, 2)}


def adjacency_report(elements: tuple[Element, ...]) -> dict[str, Any]:
    adjacent = elements[: math.floor(len(elements) * ADJACENCY_SHARE)]
    return {
        "adjacentElements": len(adjacent),
        "details": [
            {"id": element.id, "adjacentTo": 1 + index % 3}
            for index, element in enumerate(adjacent)
        ],
    }


def path_report() -> dict[str, Any]:
    return {
        "pathLength": PATH_LENGTH,
        "waypoints": [{"x": x, "y": y, "z": z} for x, y, z in PATH_WAYPOINTS],
    }


def visibility_report(elements: tuple[Element, ...]) -> dict[str, Any]:
    count = len(elements)
    return {
        "visibleElements": math.floor(count * VISIBLE_SHARE),
        "visibilityScore": VISIBILITY_SCORE,
        "viewpoints": [
            {"x": x, "y": y, "z": z, "visibleCount": math.floor(count * share)}
            for x, y, z, share in VIEWPOINTS
        ],
    }


def run_analysis(inputs: NodeInputs, config: AnalysisConfig) -> AggregateResult:
    """Run one analysis over the input collection.

    Raises:
        NodeExecutionError: If there is nothing to analyze, or a clash
            analysis has no reference collection
    """
    elements = inputs.element_list()
    if not elements:
        raise NodeExecutionError("No elements to analyze", {"analysis_type": config.analysis_type})

    analysis = config.analysis_type
    if analysis == "clash":
        references = inputs.element_list(REFERENCE_PORT)
        if not references:
            raise NodeExecutionError("No reference elements for clash detection")
        report = clash_report(elements, references, config.tolerance, config.seed)
    elif analysis == "space":
        report = space_report(elements, config.metric)
    elif analysis == "adjacency":
        report = adjacency_report(elements)
    elif analysis == "path":
        report = path_report()
    else:
        report = visibility_report(elements)

    return AggregateResult(values={"analysisType": analysis, **report})
