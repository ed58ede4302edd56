"""Result models exchanged with the hosting editor.

Completions are produced by grammar words, suggestions by evaluators,
and diagnostics by evaluators and the statement validator. All positions
are 0-based; column ranges are half-open `[col_start, col_end)`.
"""

from enum import StrEnum
from typing import TYPE_CHECKING

from pydantic import AliasChoices, Field

from dataflow_dsl.models import SchemaModel

if TYPE_CHECKING:
    from typing import Self


class CompletionKind(StrEnum):
    """Kind of a completion, used by editors to pick an icon."""

    KEYWORD = 'keyword'
    CLASS = 'class'
    ENUM = 'enum'
    VARIABLE = 'variable'
    SNIPPET = 'snippet'
    TEXT = 'text'


class ReplacementKind(StrEnum):
    """Kind of identifier affected by a rename."""

    LABEL = 'label'
    INPUT = 'input'


class Completion(SchemaModel):
    """Completion option produced by a single grammar word."""

    insert_text: str = Field(
        title='Insert text',
        description='Text inserted when the completion is accepted.',
    )

    kind: CompletionKind = Field(
        default=CompletionKind.TEXT,
        title='Completion kind',
    )

    start_offset: int = Field(
        default=0,
        ge=0,
        title='Start offset',
        description=(
            'Offset inside the in-progress token where the insert text '
            'starts. Lets a completion replace only a suffix of the token, '
            'for example the value half of `Type.Value`.'
        ),
    )

    snippet: bool = Field(
        default=False,
        title='Snippet flag',
        description='Whether the insert text contains snippet placeholders such as `$0`.',
    )

    def shift(self, offset: int) -> 'Self':
        """Return a copy with the start offset moved right by `offset`."""
        if not offset:
            return self

        return self.model_copy(update={'start_offset': self.start_offset + offset})


class Suggestion(SchemaModel):
    """Completion option positioned inside the edited text."""

    insert_text: str = Field(
        serialization_alias='insertText',
        validation_alias=AliasChoices('insert_text', 'insertText'),
    )
    kind: CompletionKind
    label: str
    snippet: bool = False

    line: int = Field(ge=0, title='Line of the in-progress token')
    col_start: int = Field(
        ge=0,
        serialization_alias='colStart',
        validation_alias=AliasChoices('col_start', 'colStart'),
        title='First column replaced by the suggestion',
    )
    col_end: int = Field(
        ge=0,
        serialization_alias='colEnd',
        validation_alias=AliasChoices('col_end', 'colEnd'),
        title='Column after the last character replaced by the suggestion',
    )


class Diagnostic(SchemaModel):
    """A problem found in DSL text.

    Columns may be left unset when a rule cannot localize the problem
    more precisely than the whole line.
    """

    line: int = Field(
        ge=0,
        title='Line number',
        description='0-based number of the offending line.',
    )

    col_start: int | None = Field(
        default=None,
        ge=0,
        serialization_alias='colStart',
        validation_alias=AliasChoices('col_start', 'colStart'),
        title='Start column',
    )

    col_end: int | None = Field(
        default=None,
        ge=0,
        serialization_alias='colEnd',
        validation_alias=AliasChoices('col_end', 'colEnd'),
        title='End column',
    )

    message: str = Field(
        title='Message',
        description='Human-readable description of the problem.',
    )

    def spanning(self, source: str) -> 'Self':
        """Default unset columns to the full span of the line.

        Args:
            source: Text of the offending line.

        Returns:
            A diagnostic with both columns set.
        """
        if self.col_start is not None and self.col_end is not None:
            return self

        return self.model_copy(update={
            'col_start': 0 if self.col_start is None else self.col_start,
            'col_end': len(source) if self.col_end is None else self.col_end,
        })

    def __str__(self) -> str:
        """Compact `line:column: message` representation (1-based)."""
        column = 1 if self.col_start is None else self.col_start + 1
        return f'{self.line + 1}:{column}: {self.message}'
