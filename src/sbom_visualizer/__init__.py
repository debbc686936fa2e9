"""
SBOM Visualizer

Merges CycloneDX Software Bill of Materials documents into a single
dependency model for table, graph and tree views.
"""

__version__ = "0.1.0"
__author__ = "SBOM Visualizer Team"
__description__ = "Merge CycloneDX SBOMs into a unified, filterable dependency model"
