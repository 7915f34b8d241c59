"""Node semantic library.

One function per node kind, ``f(inputs, config) -> result``. Source and native
export reach external collaborators and are coroutines; everything else is
synchronous and free of side effects.
"""
from __future__ import annotations

from ifc_flow.application.nodes.analysis import run_analysis
from ifc_flow.application.nodes.base import NodeInputs
from ifc_flow.application.nodes.export import run_native_export, run_text_export
from ifc_flow.application.nodes.filtering import run_filter
from ifc_flow.application.nodes.geometry import run_geometry, run_transform
from ifc_flow.application.nodes.observe import pass_through
from ifc_flow.application.nodes.properties import run_classification, run_property
from ifc_flow.application.nodes.quantity import run_quantity
from ifc_flow.application.nodes.source import run_parameter, run_source
from ifc_flow.application.nodes.spatial import run_relationship, run_spatial

__all__ = [
    "NodeInputs",
    "run_source",
    "run_parameter",
    "run_geometry",
    "run_filter",
    "run_transform",
    "run_quantity",
    "run_property",
    "run_classification",
    "run_spatial",
    "run_relationship",
    "run_analysis",
    "run_text_export",
    "run_native_export",
    "pass_through",
]
