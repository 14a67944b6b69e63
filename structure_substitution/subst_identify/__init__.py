"""
Identification: classify structure descriptions into descriptors.

- signals.py: keyword/number signal extraction from free-form text
- structure_type.py: input description → StructureType (rule table)
- substitution_rule.py: output description + input type → SubstitutionRule

Both identifiers always succeed; ambiguity becomes low confidence or the
generic rule, never an exception.
"""

from .signals import DescriptionSignals, extract_signals
from .structure_type import STRUCTURE_RULES, identify_structure_type
from .substitution_rule import SUBSTITUTION_RULES, identify_substitution_rule

__all__ = [
    "DescriptionSignals",
    "STRUCTURE_RULES",
    "SUBSTITUTION_RULES",
    "extract_signals",
    "identify_structure_type",
    "identify_substitution_rule",
]
