"""Tests for translation tree models."""

from types import MappingProxyType

import pytest
from pydantic import TypeAdapter, ValidationError

from src.locale_registry.models.translation import (
    LocaleDiff,
    TranslationGroup,
    TranslationLeaf,
    TranslationNode,
)


class TestTranslationLeaf:
    """Test suite for TranslationLeaf."""

    def test_create_leaf(self):
        leaf = TranslationLeaf(text="堡垒机")
        assert leaf.kind == "leaf"
        assert leaf.text == "堡垒机"

    def test_leaf_requires_text(self):
        with pytest.raises(ValidationError):
            TranslationLeaf()

    def test_leaf_is_frozen(self):
        leaf = TranslationLeaf(text="堡垒机")
        with pytest.raises(ValidationError):
            leaf.text = "changed"


class TestTranslationGroup:
    """Test suite for TranslationGroup."""

    def test_empty_group(self):
        group = TranslationGroup()
        assert group.kind == "group"
        assert group.children == {}

    def test_child_lookup(self):
        leaf = TranslationLeaf(text="时间")
        group = TranslationGroup(children={"time": leaf})
        assert group.child("time") is leaf
        assert group.child("missing") is None

    def test_nested_groups(self):
        inner = TranslationGroup(children={"oneterm": TranslationLeaf(text="堡垒机")})
        outer = TranslationGroup(children={"menu": inner})
        assert outer.child("menu").child("oneterm").text == "堡垒机"

    def test_children_are_read_only(self):
        group = TranslationGroup(children={"time": TranslationLeaf(text="时间")})
        assert isinstance(group.children, MappingProxyType)

        with pytest.raises(TypeError):
            group.children["time"] = TranslationLeaf(text="changed")
        with pytest.raises(AttributeError):
            group.children.clear()
        assert group.child("time").text == "时间"

    def test_default_children_are_read_only(self):
        with pytest.raises(TypeError):
            TranslationGroup().children["time"] = TranslationLeaf(text="时间")

    def test_source_dict_is_copied(self):
        source = {"time": TranslationLeaf(text="时间")}
        group = TranslationGroup(children=source)
        source.clear()
        assert group.child("time") is not None

    def test_discriminated_union_from_dict(self):
        """Test that plain data picks the node type by 'kind'."""
        adapter = TypeAdapter(TranslationNode)
        node = adapter.validate_python(
            {"kind": "group", "children": {"time": {"kind": "leaf", "text": "时间"}}}
        )
        assert isinstance(node, TranslationGroup)
        assert isinstance(node.child("time"), TranslationLeaf)

    def test_unknown_kind_rejected(self):
        adapter = TypeAdapter(TranslationNode)
        with pytest.raises(ValidationError):
            adapter.validate_python({"kind": "list", "items": []})

    def test_group_dump_round_trips(self):
        group = TranslationGroup(children={"log": TranslationGroup(children={"time": TranslationLeaf(text="时间")})})
        assert TranslationGroup.model_validate(group.model_dump()) == group


class TestLocaleDiff:
    """Test suite for LocaleDiff."""

    def test_compatible_when_empty(self):
        diff = LocaleDiff(reference="zh", candidate="en")
        assert diff.is_compatible

    def test_missing_makes_incompatible(self):
        diff = LocaleDiff(reference="zh", candidate="en", missing=("log.time",))
        assert not diff.is_compatible

    def test_extra_makes_incompatible(self):
        diff = LocaleDiff(reference="zh", candidate="en", extra=("log.extra",))
        assert not diff.is_compatible
