"""Propagation of external renames into behavior texts.

Label types, label values and inputs are named outside of behaviors:
in the label registry and on incoming edges. When such a name changes,
every behavior referencing it is rewritten with the grammar-aware
replace, which never touches tokens the name is only a substring of.
"""

from typing import TYPE_CHECKING

from dataflow_dsl.languages import BehaviorLanguage
from dataflow_dsl.registry import DslContext, Rename, diff_label_types, input_name
from dataflow_dsl.results import ReplacementKind
from dataflow_dsl.settings import EngineSettings, get_settings

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from dataflow_dsl.registry import LabelTypeRegistry


class BehaviorRefactorer:
    """Applies registry and input renames to behavior texts."""

    def __init__(self, settings: EngineSettings | None = None) -> None:
        """Initialize a refactorer.

        Args:
            settings: Engine settings. Resolved from the environment if omitted.
        """
        self.settings = settings or get_settings()

    def language(self, context: DslContext) -> BehaviorLanguage:
        """Behavior language used to apply renames."""
        return BehaviorLanguage(context, settings=self.settings)

    def apply(self, behavior: str, renames: 'Iterable[Rename]',
              context: DslContext, kind: ReplacementKind | None = None) -> str:
        """Apply renames in order to a behavior.

        Args:
            behavior: Behavior text.
            renames: Renames to apply.
            context: Registry snapshots the grammar is built from.
            kind: Restricts the renames to labels or inputs.

        Returns:
            The rewritten behavior.
        """
        language = self.language(context)
        for rename in renames:
            behavior = language.replace_text(behavior, rename.old, rename.new, kind)

        return behavior

    def rename_labels(self, behavior: str, previous: 'LabelTypeRegistry',
                      current: 'LabelTypeRegistry', inputs: 'Iterable[str]' = ()) -> str:
        """Rewrite a behavior after a label registry change.

        Renames are detected by type and value identifiers and applied
        with a grammar built from the current registry.

        Args:
            behavior: Behavior text.
            previous: Registry before the change.
            current: Registry after the change.
            inputs: Available inputs of the node.

        Returns:
            The rewritten behavior.
        """
        renames = diff_label_types(previous, current)
        if not renames:
            return behavior

        context = DslContext(labels=current, inputs=tuple(inputs))
        return self.apply(behavior, renames, context, ReplacementKind.LABEL)

    def rename_labels_in(self, behaviors: 'Mapping[str, str]',
                         previous: 'LabelTypeRegistry', current: 'LabelTypeRegistry',
                         inputs: 'Iterable[str]' = ()) -> dict[str, str]:
        """Rewrite several behaviors, keyed by their port, after a registry change."""
        inputs = tuple(inputs)
        return {
            port: self.rename_labels(behavior, previous, current, inputs)
            for port, behavior in behaviors.items()
        }

    def rename_input(self, behavior: str, old: str, new: str,
                     context: DslContext | None = None) -> str:
        """Rewrite a behavior after an input was renamed.

        Args:
            behavior: Behavior text.
            old: Previous input name.
            new: New input name.
            context: Registry snapshots of the node.

        Returns:
            The rewritten behavior.
        """
        rename = Rename(old=old, new=new)
        return self.apply(behavior, [rename], context or DslContext(), ReplacementKind.INPUT)

    def rename_edge_label(self, behavior: str, edge_labels: 'Iterable[str | None]',
                          old: str, new: str, context: DslContext | None = None) -> str:
        """Rewrite a behavior after an incoming edge label changed.

        The input fed by the edge is named after the labels of all its
        incoming edges, so the input name is recomputed before and after
        the change.

        Args:
            behavior: Behavior text.
            edge_labels: Current labels of all edges of the input, containing `old`.
            old: Previous label of the renamed edge.
            new: New label of the renamed edge.
            context: Registry snapshots of the node.

        Returns:
            The rewritten behavior. Unchanged if the input had no name
            before or after the change.
        """
        labels = list(edge_labels)
        old_name = input_name(labels)
        new_name = input_name(new if label == old else label for label in labels)

        if not old_name or not new_name:
            return behavior

        return self.rename_input(behavior, old_name, new_name, context)
