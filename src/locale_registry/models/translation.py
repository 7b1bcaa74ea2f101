"""
Translation tree models.

A locale bundle is a tree whose internal nodes are named groups and whose
leaves are display strings. The two node kinds form a discriminated union on
the ``kind`` field, so a node is always exactly one of:

- TranslationLeaf: a single display string, stored verbatim
- TranslationGroup: named children (leaves or nested groups)
"""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class TranslationLeaf(BaseModel):
    """
    A single translated string.

    The text is kept exactly as authored, including embedded newlines and
    interpolation markers.

    Examples:
        >>> TranslationLeaf(text="堡垒机").text
        '堡垒机'
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["leaf"] = Field(default="leaf", description="Node discriminator")
    text: str = Field(..., description="Display string")


class TranslationGroup(BaseModel):
    """
    A named group of translation nodes (e.g. ``menu``, ``sessionTable``).

    Children keep their declaration order. Segment names are unique within a
    group because they are mapping keys. The children mapping is read-only,
    so a built tree cannot be edited through any of its groups.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["group"] = Field(default="group", description="Node discriminator")
    children: Mapping[str, "TranslationNode"] = Field(
        default_factory=dict,
        validate_default=True,
        description="Child nodes keyed by segment name",
    )

    @field_validator("children", mode="after")
    @classmethod
    def freeze_children(cls, v: Mapping[str, Any]) -> Mapping[str, Any]:
        return MappingProxyType(dict(v))

    @field_serializer("children")
    def serialize_children(self, v: Mapping[str, Any]) -> dict[str, Any]:
        return dict(v)

    def child(self, name: str) -> "TranslationNode | None":
        """Return the direct child called ``name``, or None."""
        return self.children.get(name)


TranslationNode = Annotated[
    Union[TranslationLeaf, TranslationGroup], Field(discriminator="kind")
]

TranslationGroup.model_rebuild()


class LocaleDiff(BaseModel):
    """
    Key-set difference between a reference locale and a candidate locale.

    Attributes:
        reference: Locale tag used as the source of truth
        candidate: Locale tag compared against the reference
        missing: Leaf paths present in the reference but not the candidate
        extra: Leaf paths present in the candidate but not the reference
    """

    model_config = ConfigDict(frozen=True)

    reference: str = Field(..., description="Reference locale tag")
    candidate: str = Field(..., description="Compared locale tag")
    missing: tuple[str, ...] = Field(default=(), description="Keys the candidate lacks")
    extra: tuple[str, ...] = Field(default=(), description="Keys only the candidate has")

    @property
    def is_compatible(self) -> bool:
        """True when both locales expose the same leaf paths."""
        return not self.missing and not self.extra
