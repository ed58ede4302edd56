"""Surface languages of the engine.

A language ties a grammar builder to the registry snapshot it was built
from and exposes the editor-facing operations: verification, completion,
renaming and, for behaviors, line-oriented validation.

Languages are immutable. When the label registry or the available
inputs change, callers create a new language with `with_context`.
"""

from typing import TYPE_CHECKING, ClassVar

from dataflow_dsl.core import LINE_SEPARATOR, Evaluator, split_lines
from dataflow_dsl.languages.behavior import BehaviorGrammarBuilder
from dataflow_dsl.languages.constraints import ConstraintGrammarBuilder
from dataflow_dsl.registry import DslContext
from dataflow_dsl.settings import EngineSettings, get_settings
from dataflow_dsl.validator import BehaviorValidator

if TYPE_CHECKING:
    from collections.abc import Sequence
    from typing import Self

if TYPE_CHECKING:
    from dataflow_dsl.core import Grammar
    from dataflow_dsl.results import Diagnostic, ReplacementKind, Suggestion


class Language:
    """Editor-facing operations of a single surface language."""

    #: Short name of the language used by the CLI and conformance specs.
    name: ClassVar[str] = ''

    def __init__(self, context: DslContext | None = None,
                 settings: EngineSettings | None = None) -> None:
        """Initialize a language.

        Args:
            context: Registry snapshots. An empty context if omitted.
            settings: Engine settings. Resolved from the environment if omitted.

        Raises:
            GrammarBuildError: If the grammar is malformed on strict mode.
        """
        self.context = context or DslContext()
        self.settings = settings or get_settings()

        self.grammar = self.build_grammar()
        self.evaluator = Evaluator(self.grammar, self.settings)

    def __repr__(self) -> str:
        """Debug representation."""
        return f'{type(self).__name__}({self.context!r})'

    def build_grammar(self) -> 'Grammar':
        """Build the grammar of the language from the current context."""
        raise NotImplementedError

    def with_context(self, context: DslContext) -> 'Self':
        """Return the same language rebuilt for other registry snapshots."""
        return type(self)(context, settings=self.settings)

    def verify(self, text: str) -> bool:
        """Check whether the text consists of complete statements."""
        return self.evaluator.is_valid(split_lines(text))

    def diagnostics(self, text: str) -> list['Diagnostic']:
        """Diagnostics of the grammar tree for the text."""
        return self.evaluator.verify(split_lines(text))

    def validate(self, text: str) -> list['Diagnostic']:
        """Diagnostics shown to the user for the text.

        Args:
            text: DSL text.

        Returns:
            Diagnostics with both columns set.
        """
        lines = split_lines(text)
        return [
            diagnostic.spanning(lines[diagnostic.line])
            for diagnostic in self.diagnostics(text)
        ]

    def get_completion(self, text: str, cursor: int | None = None) -> list['Suggestion']:
        """Suggestions for the token under the cursor.

        Args:
            text: DSL text.
            cursor: 0-based character offset of the cursor.
                The end of the text if omitted.

        Returns:
            Suggestions positioned relative to the cursor line.
        """
        if cursor is None:
            cursor = len(text)

        cursor = max(0, min(cursor, len(text)))
        return self.evaluator.complete(split_lines(text[:cursor]))

    def replace(self, lines: 'Sequence[str]', old: str, new: str,
                kind: 'ReplacementKind | None' = None) -> list[str]:
        """Rename an identifier in lines of DSL text."""
        return self.evaluator.replace(lines, old, new, kind)

    def replace_text(self, text: str, old: str, new: str,
                     kind: 'ReplacementKind | None' = None) -> str:
        """Rename an identifier in DSL text."""
        return LINE_SEPARATOR.join(self.replace(split_lines(text), old, new, kind))


class BehaviorLanguage(Language):
    """Node behavior language: `forward`, `set`, `unset` and `assign`."""

    name = 'behavior'

    def build_grammar(self) -> 'Grammar':
        return BehaviorGrammarBuilder(self.settings).build(self.context)

    def validate(self, text: str) -> list['Diagnostic']:
        """Diagnostics of the statement validator for the text.

        The validator reports every problem of every line, which is more
        precise than the first failing derivation of the grammar tree.
        """
        return BehaviorValidator(self.settings).validate(text, self.context)


class ConstraintLanguage(Language):
    """Constraint selection language: `data`/`node` ... `neverFlows`."""

    name = 'constraint'

    def build_grammar(self) -> 'Grammar':
        return ConstraintGrammarBuilder(self.settings).build(self.context.labels)


#: Languages by their short names.
LANGUAGES: dict[str, type[Language]] = {
    BehaviorLanguage.name: BehaviorLanguage,
    ConstraintLanguage.name: ConstraintLanguage,
}


def get_language(name: str, context: DslContext | None = None,
                 settings: EngineSettings | None = None) -> Language:
    """Create a language by its short name.

    Raises:
        KeyError: If the language is unknown.
    """
    return LANGUAGES[name](context, settings=settings)


__all__ = (
    'LANGUAGES',
    'BehaviorLanguage',
    'ConstraintLanguage',
    'Language',
    'get_language',
)
