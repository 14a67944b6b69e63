"""
Unit tests for subst_core/order_hash.py.

- hash64 stable across calls and independent of dict key order
- constraint_signature groups equal constraints, ignores confidence
"""

from subst_core.order_hash import constraint_signature, hash64
from subst_core.types import StructureParams, StructureType, SubstitutionRule


class TestHash64:

    def test_determinism(self):
        obj = {"a": [1, 2, {"b": 3}], "c": (4, 5)}
        assert hash64(obj) == hash64(obj)

    def test_dict_order_irrelevance(self):
        assert hash64({"a": 1, "b": 2}) == hash64({"b": 2, "a": 1})

    def test_different_inputs(self):
        assert hash64([1, 2, 3]) != hash64([1, 2, 4])

    def test_returns_64bit_int(self):
        h = hash64("test")
        assert 0 <= h < 2**64


class TestConstraintSignature:

    def _type(self, confidence=0.5, target=3):
        return StructureType("connectedRegions", confidence, StructureParams(target_value=target, connectivity=4))

    def test_confidence_ignored(self):
        assert constraint_signature(self._type(0.2)) == constraint_signature(self._type(0.9))

    def test_params_matter(self):
        assert constraint_signature(self._type(target=3)) != constraint_signature(self._type(target=4))

    def test_rule_matters(self):
        recolor = SubstitutionRule("recolor", frozenset({"position"}), frozenset({"color"}), {"value": 2})
        clear = SubstitutionRule("clear", frozenset({"position"}), frozenset({"presence"}))
        assert constraint_signature(self._type(), recolor) != constraint_signature(self._type(), clear)

    def test_tag_order_irrelevant(self):
        a = SubstitutionRule("keep", frozenset({"position", "topology"}))
        b = SubstitutionRule("keep", frozenset({"topology", "position"}))
        assert constraint_signature(self._type(), a) == constraint_signature(self._type(), b)
