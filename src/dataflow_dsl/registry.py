"""Snapshots of the external registries consumed by the engine.

The engine reads two registries owned by the surrounding editor:

- the label type registry (type name to ordered value names);
- the available inputs of the node being edited.

Both are captured as immutable snapshots and passed explicitly to grammar
builders and validators through a `DslContext`. A grammar built from a
snapshot does not notice later registry changes; callers rebuild it.
"""

from typing import TYPE_CHECKING, Any

from pydantic import Field, RootModel, ValidationError, model_validator
from yaml import safe_load
from yaml.error import MarkedYAMLError

from dataflow_dsl.errors import ContextError
from dataflow_dsl.models import DescribedMixin, SchemaModel
from dataflow_dsl.names import INPUT_SEPARATOR, InputName, LabelName

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from io import TextIOBase


class LabelValue(SchemaModel):
    """A single permitted value of a label type."""

    id: str | None = Field(
        default=None,
        title='Value identifier',
        description=(
            'Stable identifier of the value. '
            'Used to detect renames between two registry snapshots.'
        ),
    )

    text: LabelName = Field(
        title='Value name',
    )

    @model_validator(mode='before')
    @classmethod
    def from_name(cls, data: Any) -> Any:  # noqa: ANN401
        """Accept a bare value name as shorthand."""
        if isinstance(data, str):
            return {'text': data}

        return data


class LabelType(SchemaModel):
    """A named categorical attribute with its permitted values."""

    id: str | None = Field(
        default=None,
        title='Type identifier',
        description=(
            'Stable identifier of the label type. '
            'Used to detect renames between two registry snapshots.'
        ),
    )

    name: LabelName = Field(
        title='Type name',
    )

    values: tuple[LabelValue, ...] = Field(
        default=(),
        title='Type values',
        description='Ordered list of values permitted for this label type.',
    )

    def get_value(self, text: str) -> LabelValue | None:
        """Find a value by its name."""
        for value in self.values:
            if value.text == text:
                return value

        return None

    def get_value_by_id(self, value_id: str) -> LabelValue | None:
        """Find a value by its identifier."""
        for value in self.values:
            if value.id is not None and value.id == value_id:
                return value

        return None

    @property
    def value_names(self) -> list[str]:
        """Names of all values in registry order."""
        return [value.text for value in self.values]


class LabelTypeRegistry(RootModel[tuple[LabelType, ...]]):
    """Ordered snapshot of all label types.

    Besides the canonical list form, the mapping shorthand
    `{TypeName: [value, ...]}` is accepted as input.
    """

    root: tuple[LabelType, ...] = Field(
        default=(),
        title='Label types',
    )

    model_config = {'frozen': True}

    @model_validator(mode='before')
    @classmethod
    def from_mapping(cls, data: Any) -> Any:  # noqa: ANN401
        """Expand the `{TypeName: [value, ...]}` shorthand."""
        if isinstance(data, dict):
            return [
                {'name': name, 'values': values or []}
                for name, values in data.items()
            ]

        return data

    def __iter__(self) -> 'Iterator[LabelType]':  # type: ignore[override]
        """Iterate over label types in registry order."""
        return iter(self.root)

    def __len__(self) -> int:
        """Number of label types."""
        return len(self.root)

    def get(self, name: str) -> LabelType | None:
        """Find a label type by its name."""
        for label_type in self.root:
            if label_type.name == name:
                return label_type

        return None

    def get_by_id(self, type_id: str) -> LabelType | None:
        """Find a label type by its identifier."""
        for label_type in self.root:
            if label_type.id is not None and label_type.id == type_id:
                return label_type

        return None

    def names(self) -> list[str]:
        """Names of all label types in registry order."""
        return [label_type.name for label_type in self.root]

    def values_of(self, name: str) -> list[str]:
        """Value names of a label type, or an empty list if it is unknown."""
        if label_type := self.get(name):
            return label_type.value_names

        return []


class DslContext(DescribedMixin, SchemaModel):
    """Registry snapshots a grammar or a validator is evaluated against."""

    labels: LabelTypeRegistry = Field(
        default_factory=LabelTypeRegistry,
        title='Label types',
        description='Label types and their values known to the diagram.',
    )

    inputs: tuple[InputName, ...] = Field(
        default=(),
        title='Available inputs',
        description='Names of the inputs available to the node being edited.',
    )

    def with_inputs(self, inputs: 'Iterable[str]') -> 'DslContext':
        """Return a copy of the context with other available inputs."""
        return DslContext(labels=self.labels, inputs=tuple(inputs))

    def with_labels(self, labels: LabelTypeRegistry) -> 'DslContext':
        """Return a copy of the context with another label registry."""
        return DslContext(labels=labels, inputs=self.inputs)


class Rename(SchemaModel):
    """A single `Type.Value` rename detected between two registries."""

    old: str
    new: str


def input_name(edge_labels: 'Iterable[str | None]') -> str | None:
    """Build the name of an input from the labels of its incoming edges.

    Args:
        edge_labels: Labels of the edges pointing to an input port.
            Unlabeled edges are ignored.

    Returns:
        The sorted labels joined with `|`, or `None` when no incoming
        edge is labeled.
    """
    names = sorted(label for label in edge_labels if label)
    if not names:
        return None

    return INPUT_SEPARATOR.join(names)


def diff_label_types(previous: LabelTypeRegistry,
                     current: LabelTypeRegistry) -> list[Rename]:
    """Detect label renames between two registry snapshots.

    Types and values are matched by their identifiers; elements without
    identifiers, added elements and removed elements are ignored.

    A renamed type renames every `Type.Value` pair of that type. A renamed
    value renames its pair, expressed with the current type name, so the
    result can be applied in order.

    Args:
        previous: Snapshot before the change.
        current: Snapshot after the change.

    Returns:
        Renames as `Type.Value` pairs, in registry order.
    """
    renames = []

    for new_type in current:
        if new_type.id is None or not (old_type := previous.get_by_id(new_type.id)):
            continue

        pairs = [
            (old_value, new_value)
            for new_value in new_type.values
            if new_value.id is not None
            and (old_value := old_type.get_value_by_id(new_value.id))
        ]

        if old_type.name != new_type.name:
            renames.extend(
                Rename(
                    old=f'{old_type.name}.{old_value.text}',
                    new=f'{new_type.name}.{new_value.text}',
                )
                for old_value, new_value in pairs
            )

        renames.extend(
            Rename(
                old=f'{new_type.name}.{old_value.text}',
                new=f'{new_type.name}.{new_value.text}',
            )
            for old_value, new_value in pairs
            if old_value.text != new_value.text
        )

    return renames


def load_context(content: 'TextIOBase | str', *,
                 filename: str | None = None) -> DslContext:
    """Load a context document from YAML.

    Example document:

        labels:
          Sensitivity: [Personal, Public]
        inputs: [request, data]

    Args:
        content: YAML content as a string or file-like object.
        filename: Optional name of the source used in error messages.

    Returns:
        The validated context snapshot.

    Raises:
        ContextError: If the YAML is malformed or does not describe a context.
    """
    try:
        data = safe_load(content)

    except MarkedYAMLError as base:
        raise ContextError.from_yaml_error(base) from base

    if data is None:
        data = {}

    try:
        return DslContext.model_validate(data)

    except ValidationError as base:
        raise ContextError.from_pydantic_error(
            base,
            data=data,
            filename=filename,
        ) from base
