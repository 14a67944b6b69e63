"""
subst_core: Core primitives for the structure substitution engine.

Provides:
- types: Grid, Pixel, StructureType, RecognizedStructure, SubstitutionRule,
  ResolutionParams and the per-stage result types
- grid: validation, copies, bounds and 4/8 neighborhoods
- components: flood fill and connected component extraction
- order_hash: deterministic hashing and constraint signatures
"""

__all__ = [
    "components",
    "grid",
    "order_hash",
    "types",
]
