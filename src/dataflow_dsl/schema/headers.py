"""Header documents of conformance specifications."""

from typing import Literal

from dataflow_dsl.registry import DslContext


class ContextSpec(DslContext):
    """Registry snapshots all steps of a specification run against.

    The header is optional. Without it, steps run against an empty
    context: no label types and no available inputs.
    """

    #: Internal specification marker. Always `context` for the header.
    spec: Literal['context']

    def to_context(self) -> DslContext:
        """Strip the specification marker."""
        return DslContext(
            title=self.title,
            description=self.description,
            labels=self.labels,
            inputs=self.inputs,
        )
