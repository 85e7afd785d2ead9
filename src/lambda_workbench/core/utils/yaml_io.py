"""YAML parsing and serialization for SAM/CloudFormation manifests.

PyYAML's safe loader rejects the short-form intrinsic functions that
CloudFormation templates commonly contain (``!Ref``, ``!GetAtt``, ``!Sub``...).
The loader here keeps them as :class:`IntrinsicTag` values and the dumper
writes them back with the same tag, so a read-modify-write cycle never drops
or rewrites parts of a template this tool does not interpret.
"""

from typing import Any

import yaml

TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class IntrinsicTag:
    """A tagged YAML node such as ``!GetAtt Queue.Arn``."""

    __slots__ = ("tag", "value")

    def __init__(self, tag: str, value: Any):
        self.tag = tag
        self.value = value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IntrinsicTag):
            return NotImplemented
        return self.tag == other.tag and self.value == other.value

    def __repr__(self) -> str:
        return f"IntrinsicTag({self.tag!r}, {self.value!r})"


class ManifestLoader(yaml.SafeLoader):
    """Safe loader that keeps intrinsic tags and leaves dates as strings."""


# Dates such as AWSTemplateFormatVersion must stay strings after a round trip
ManifestLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


class ManifestDumper(yaml.SafeDumper):
    """Safe dumper that writes intrinsic tags back and never emits anchors."""

    def ignore_aliases(self, data: Any) -> bool:
        return True

    def choose_scalar_style(self) -> str:
        # A local tag such as !Ref resolves the scalar on its own; keep it unquoted
        event = self.event
        if event.tag and event.tag.startswith("!") and not event.style:
            if self.analysis is None:
                self.analysis = self.analyze_scalar(event.value)
            analysis = self.analysis
            plain_allowed = (
                analysis.allow_flow_plain if self.flow_level else analysis.allow_block_plain
            )
            if plain_allowed and not analysis.empty and not analysis.multiline:
                return ""
        return super().choose_scalar_style()


def _construct_intrinsic(
    loader: ManifestLoader, tag_suffix: str, node: yaml.Node
) -> IntrinsicTag:
    tag = "!" + tag_suffix
    if isinstance(node, yaml.ScalarNode):
        value: Any = loader.construct_scalar(node)
    elif isinstance(node, yaml.SequenceNode):
        value = loader.construct_sequence(node, deep=True)
    else:
        value = loader.construct_mapping(node, deep=True)
    return IntrinsicTag(tag, value)


def _represent_intrinsic(dumper: ManifestDumper, data: IntrinsicTag) -> yaml.Node:
    if isinstance(data.value, list):
        return dumper.represent_sequence(data.tag, data.value)
    if isinstance(data.value, dict):
        return dumper.represent_mapping(data.tag, data.value)
    return dumper.represent_scalar(data.tag, str(data.value))


ManifestLoader.add_multi_constructor("!", _construct_intrinsic)
ManifestDumper.add_multi_representer(IntrinsicTag, _represent_intrinsic)


def load_yaml(content: str) -> Any:
    """Parse a YAML document. Raises ``yaml.YAMLError`` on malformed input."""
    return yaml.load(content, Loader=ManifestLoader)


def dump_yaml(data: Any) -> str:
    """Serialize a document, preserving key order."""
    return yaml.dump(
        data,
        Dumper=ManifestDumper,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
        indent=2,
        width=120,
    )
