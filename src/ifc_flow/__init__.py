"""IFC Flow.

Executes node-graph workflows over IFC building models: source, filter,
quantity, property, spatial, analysis and export nodes evaluated in
dependency order against models loaded with IfcOpenShell.
"""
from __future__ import annotations

__version__ = "0.1.0"
__author__ = "IFC-Flow Team"

# Re-export main entry point
from ifc_flow.presentation import main

__all__ = ["main", "__version__"]
