"""Step documents of conformance specifications.

A step runs one editor-facing operation of a language against the
specification context and compares the outcome with its expectation:

- `validate` compares diagnostics;
- `verify` compares the verification verdict;
- `complete` compares the suggested insert texts;
- `rename` compares the rewritten text.
"""

from typing import TYPE_CHECKING, Annotated, Any, Literal

from pydantic import AliasChoices, Field

from dataflow_dsl.models import DescribedMixin, SchemaModel
from dataflow_dsl.results import ReplacementKind  # noqa: TC001

if TYPE_CHECKING:
    from dataflow_dsl.languages import Language
    from dataflow_dsl.results import Diagnostic

#: Short name of a surface language.
type LanguageName = Literal['behavior', 'constraint']


class BaseStep(DescribedMixin, SchemaModel):
    """Base class of specification steps."""

    #: Internal specification marker. Always `step` for steps.
    spec: Literal['step'] = 'step'

    action: str

    language: LanguageName = Field(
        default='behavior',
        title='Language',
        description='Surface language the text is written in.',
    )

    text: str = Field(
        title='DSL text',
        description='Text the operation is applied to.',
    )

    def run(self, language: 'Language') -> Any:  # noqa: ANN401
        """Apply the operation of the step.

        Args:
            language: Language built from the specification context.

        Returns:
            Outcome comparable with the expectation.
        """
        raise NotImplementedError

    def expected(self) -> Any:  # noqa: ANN401
        """Expected outcome of the step."""
        raise NotImplementedError

    def check(self, outcome: Any) -> bool:  # noqa: ANN401
        """Compare an outcome with the expectation."""
        return bool(outcome == self.expected())


class ExpectedDiagnostic(SchemaModel):
    """Expected diagnostic; unset fields match anything."""

    line: int | None = Field(default=None, ge=0)

    col_start: int | None = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices('col_start', 'colStart'),
    )

    col_end: int | None = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices('col_end', 'colEnd'),
    )

    message: str | None = None

    def matches(self, diagnostic: 'Diagnostic') -> bool:
        """Check whether a diagnostic has every expected field."""
        return all(
            expected is None or expected == getattr(diagnostic, name)
            for name, expected in (
                ('line', self.line),
                ('col_start', self.col_start),
                ('col_end', self.col_end),
                ('message', self.message),
            )
        )


class ValidateStep(BaseStep):
    """Expect the diagnostics of a text."""

    action: Literal['validate']

    expect: list[ExpectedDiagnostic] = Field(
        default_factory=list,
        title='Expected diagnostics',
        description='Diagnostics in reporting order. Empty for a valid text.',
    )

    def run(self, language: 'Language') -> list['Diagnostic']:
        return language.validate(self.text)

    def expected(self) -> list[ExpectedDiagnostic]:
        return self.expect

    def check(self, outcome: list['Diagnostic']) -> bool:
        if len(outcome) != len(self.expect):
            return False

        return all(
            expected.matches(diagnostic)
            for expected, diagnostic in zip(self.expect, outcome, strict=True)
        )


class VerifyStep(BaseStep):
    """Expect the verdict of the grammar tree for a text."""

    action: Literal['verify']

    expect: bool = Field(
        default=True,
        title='Expected verdict',
    )

    def run(self, language: 'Language') -> bool:
        return language.verify(self.text)

    def expected(self) -> bool:
        return self.expect


class CompleteStep(BaseStep):
    """Expect the suggestions offered at a cursor position."""

    action: Literal['complete']

    cursor: int | None = Field(
        default=None,
        ge=0,
        title='Cursor offset',
        description='0-based character offset of the cursor. End of the text if omitted.',
    )

    expect: list[str] = Field(
        default_factory=list,
        title='Expected insert texts',
        description='Insert texts of all suggestions, in any order.',
    )

    def run(self, language: 'Language') -> list[str]:
        return sorted(
            suggestion.insert_text
            for suggestion in language.get_completion(self.text, self.cursor)
        )

    def expected(self) -> list[str]:
        return sorted(self.expect)


class RenameStep(BaseStep):
    """Expect the text after renaming an identifier."""

    action: Literal['rename']

    old: str = Field(title='Old identifier')
    new: str = Field(title='New identifier')

    kind: ReplacementKind | None = Field(
        default=None,
        title='Identifier kind',
    )

    expect: str = Field(
        title='Expected text',
    )

    def run(self, language: 'Language') -> str:
        return language.replace_text(self.text, self.old, self.new, self.kind)

    def expected(self) -> str:
        return self.expect


#: Any specification step, discriminated by its `action`.
Step = Annotated[
    ValidateStep | VerifyStep | CompleteStep | RenameStep,
    Field(discriminator='action'),
]
