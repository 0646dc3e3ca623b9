# CropPlanRecords - Source Package
"""
CropPlanRecords: crop planning records with per-field provenance.

This package provides:
- Datums tracking whether a value was set, inherited or calculated
- Crop and planting record kinds
- Record diff, inheritance and merge
- Batch (multi-record) editing
- Table import/export through pandas
"""

__version__ = "0.1.0"
