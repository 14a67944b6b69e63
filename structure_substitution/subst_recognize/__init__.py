"""
Structure recognition: locate concrete instances of a classified structure.

- regions.py: flood-fill regions, optionally qualified by landmark
  adjacency or path distance
- paths.py: landmark resolution and multi-source BFS distances
- configurations.py: column runs, row runs and solid blocks
- dispatch.py: structure type → recognizer priority policy
"""

from .configurations import SpatialConfig, recognize_spatial_configurations
from .dispatch import RecognitionDefaults, dispatch_recognition
from .regions import RegionCondition, recognize_connected_regions, recognize_value_regions

__all__ = [
    "RecognitionDefaults",
    "RegionCondition",
    "SpatialConfig",
    "dispatch_recognition",
    "recognize_connected_regions",
    "recognize_spatial_configurations",
    "recognize_value_regions",
]
