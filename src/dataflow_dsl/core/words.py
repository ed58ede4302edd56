"""Grammar words: the atoms of a surface language grammar.

A word decides whether a single whitespace-delimited token matches, which
completions apply to a partially typed token, and how a token changes when
an identifier it references is renamed.

Words form a closed, tagged union discriminated by the `kind` field. All
words are immutable; registry-backed words close over the registry
snapshot they were built with.
"""

from re import ASCII
from re import compile as regexp
from typing import Annotated, Literal

from pydantic import Field

from dataflow_dsl.models import SchemaModel
from dataflow_dsl.names import VARIABLE_PREFIX
from dataflow_dsl.registry import LabelTypeRegistry
from dataflow_dsl.results import Completion, CompletionKind, ReplacementKind

NEGATION = '!'
LIST_SEPARATOR = ','
PART_SEPARATOR = '.'
GROUP_OPEN = '('
GROUP_CLOSE = ')'

INTERSECTION_PREFIX = 'intersection('
INTERSECTION_SNIPPET = 'intersection($0)'
INTERSECTION_PATTERN = regexp(r'^intersection\((.*),(.*)\)$', flags=ASCII)


class Replacement(SchemaModel):
    """Rename request applied to tokens referencing an identifier."""

    old: str = Field(
        title='Old identifier',
        description='Exact identifier to replace, e.g. `Type.Value` or an input name.',
    )

    new: str = Field(
        title='New identifier',
    )

    kind: ReplacementKind | None = Field(
        default=None,
        title='Identifier kind',
        description='Restricts the rename to labels or inputs. Both when omitted.',
    )

    def applies_to(self, kind: ReplacementKind) -> bool:
        """Check whether the rename targets identifiers of a given kind."""
        return self.kind is None or self.kind == kind


class BaseWord(SchemaModel):
    """Capability set shared by all words."""

    kind: str

    def verify(self, word: str) -> list[str]:
        """Verify a token against this word.

        Args:
            word: The token to verify.

        Returns:
            Error messages; an empty list means the token matches.
        """
        raise NotImplementedError

    def matches(self, word: str) -> bool:
        """Check whether a token matches this word."""
        return not self.verify(word)

    def complete(self, word: str) -> list[Completion]:  # noqa: ARG002
        """Calculate completion options for a partially typed token.

        Args:
            word: The partial token typed so far.

        Returns:
            Completion options; offsets are relative to the token start.
        """
        return []

    def replace(self, word: str, replacement: Replacement) -> str:  # noqa: ARG002
        """Rename identifiers referenced by a token.

        Args:
            word: The token.
            replacement: The rename to apply.

        Returns:
            The token with the identifier replaced, or the token unchanged.
        """
        return word


class ConstantWord(BaseWord):
    """Exact keyword."""

    kind: Literal['constant'] = 'constant'

    word: str = Field(title='Keyword')

    completion_kind: CompletionKind = Field(default=CompletionKind.KEYWORD)

    def verify(self, word: str) -> list[str]:
        if word == self.word:
            return []

        return [f'Expected keyword "{self.word}"']

    def complete(self, word: str) -> list[Completion]:
        if not self.word.startswith(word):
            return []

        return [Completion(insert_text=self.word, kind=self.completion_kind)]


class AnyWord(BaseWord):
    """Wildcard accepting any non-empty token."""

    kind: Literal['any'] = 'any'

    def verify(self, word: str) -> list[str]:
        if word:
            return []

        return ['Expected a word']


class NegatableWord(BaseWord):
    """Wrapper accepting an optional leading `!`."""

    kind: Literal['negatable'] = 'negatable'

    word: 'Word'

    def verify(self, word: str) -> list[str]:
        return self.word.verify(word.removeprefix(NEGATION))

    def complete(self, word: str) -> list[Completion]:
        if word.startswith(NEGATION):
            return [
                option.shift(len(NEGATION))
                for option in self.word.complete(word[len(NEGATION):])
            ]

        return self.word.complete(word)

    def replace(self, word: str, replacement: Replacement) -> str:
        if word.startswith(NEGATION):
            return NEGATION + self.word.replace(word[len(NEGATION):], replacement)

        return self.word.replace(word, replacement)


class ParenthesesWord(BaseWord):
    """Wrapper accepting opening parentheses before and closing ones after a token."""

    kind: Literal['parentheses'] = 'parentheses'

    word: 'Word'

    @staticmethod
    def split(word: str) -> tuple[str, str, str]:
        """Split a token into opening parentheses, core and closing parentheses."""
        core = word.lstrip(GROUP_OPEN)
        opening = word[:len(word) - len(core)]

        stripped = core.rstrip(GROUP_CLOSE)
        closing = core[len(stripped):]

        return opening, stripped, closing

    def verify(self, word: str) -> list[str]:
        _, core, _ = self.split(word)
        return self.word.verify(core)

    def complete(self, word: str) -> list[Completion]:
        core = word.lstrip(GROUP_OPEN)
        offset = len(word) - len(core)

        return [
            option.shift(offset)
            for option in self.word.complete(core)
        ]

    def replace(self, word: str, replacement: Replacement) -> str:
        opening, core, closing = self.split(word)
        return opening + self.word.replace(core, replacement) + closing


class BracketWord(BaseWord):
    """Token made only of parentheses of one direction, e.g. `((` or `)`.

    Lets a term group its operands with parentheses separated by spaces.
    """

    kind: Literal['bracket'] = 'bracket'

    bracket: Literal['(', ')'] = Field(title='Parenthesis')

    def verify(self, word: str) -> list[str]:
        if word and not word.strip(self.bracket):
            return []

        return [f'Expected "{self.bracket}"']


class ListWord(BaseWord):
    """Comma separated repetition of a word without spaces."""

    kind: Literal['list'] = 'list'

    word: 'Word'

    unique: bool = Field(
        default=False,
        title='Hide listed items',
        description='Do not suggest items that are already part of the list.',
    )

    def verify(self, word: str) -> list[str]:
        errors = []
        for part in word.split(LIST_SEPARATOR):
            errors.extend(self.word.verify(part))

        return errors

    def complete(self, word: str) -> list[Completion]:
        *listed, last = word.split(LIST_SEPARATOR)
        offset = sum(len(part) + len(LIST_SEPARATOR) for part in listed)

        return [
            option.shift(offset)
            for option in self.word.complete(last)
            if not self.unique or option.insert_text not in listed
        ]

    def replace(self, word: str, replacement: Replacement) -> str:
        return LIST_SEPARATOR.join(
            self.word.replace(part, replacement)
            for part in word.split(LIST_SEPARATOR)
        )


class LabelWord(BaseWord):
    """Dotted `Type.Value` pair resolved against a label type registry.

    The value may also be the variable `$Type` referencing the type of
    the pair when variables are enabled.
    """

    kind: Literal['label'] = 'label'

    labels: LabelTypeRegistry = Field(default_factory=LabelTypeRegistry)

    variables: bool = Field(
        default=True,
        title='Allow label variables',
    )

    def verify(self, word: str) -> list[str]:
        parts = word.split(PART_SEPARATOR)
        if len(parts) > 2:  # noqa: PLR2004
            return ['Expected at most 2 parts in characteristic selector']

        label_type = self.labels.get(parts[0])
        if not label_type:
            return [f'Unknown label type "{parts[0]}"']

        if len(parts) < 2:  # noqa: PLR2004
            return ['Expected characteristic to have value']

        value = parts[1]
        if self.variables and value.startswith(VARIABLE_PREFIX):
            if value == f'{VARIABLE_PREFIX}{label_type.name}':
                return []
            return [f'Variable "{value}" does not reference label type "{label_type.name}"']

        if not label_type.get_value(value):
            return [f'Unknown label value "{value}" for type "{label_type.name}"']

        return []

    def complete(self, word: str) -> list[Completion]:
        parts = word.split(PART_SEPARATOR)

        if len(parts) == 1:
            return [
                Completion(insert_text=name, kind=CompletionKind.CLASS)
                for name in self.labels.names()
            ]

        label_type = self.labels.get(parts[0])
        if len(parts) > 2 or not label_type:  # noqa: PLR2004
            return []

        offset = len(parts[0]) + len(PART_SEPARATOR)
        options = [
            Completion(insert_text=name, kind=CompletionKind.ENUM, start_offset=offset)
            for name in self.labels.values_of(label_type.name)
        ]
        if self.variables:
            options.append(Completion(
                insert_text=f'{VARIABLE_PREFIX}{label_type.name}',
                kind=CompletionKind.ENUM,
                start_offset=offset,
            ))

        return options

    def replace(self, word: str, replacement: Replacement) -> str:
        if replacement.applies_to(ReplacementKind.LABEL) and word == replacement.old:
            return replacement.new

        return word


class InputWord(BaseWord):
    """Identifier resolved against the available inputs."""

    kind: Literal['input'] = 'input'

    inputs: tuple[str, ...] = ()

    def verify(self, word: str) -> list[str]:
        if word in self.inputs:
            return []

        return [f'Unknown input "{word}"']

    def complete(self, word: str) -> list[Completion]:  # noqa: ARG002
        return [
            Completion(insert_text=name, kind=CompletionKind.VARIABLE)
            for name in self.inputs
        ]

    def replace(self, word: str, replacement: Replacement) -> str:
        if replacement.applies_to(ReplacementKind.INPUT) and word == replacement.old:
            return replacement.new

        return word


class InputLabelWord(BaseWord):
    """Label reference inside a boolean term.

    Accepts `input.Type.Value`, a label carried by a given input, and the
    short form `Type.Value`. The number of dotted parts decides the form:
    two parts are a label pair, any other count starts with an input.
    """

    kind: Literal['input_label'] = 'input_label'

    inputs: tuple[str, ...] = ()

    labels: LabelTypeRegistry = Field(default_factory=LabelTypeRegistry)

    variables: bool = True

    @property
    def label(self) -> LabelWord:
        """Word verifying the label part."""
        return LabelWord(labels=self.labels, variables=self.variables)

    @staticmethod
    def split(word: str) -> tuple[str | None, str | None]:
        """Split a reference into its input and label parts."""
        parts = word.split(PART_SEPARATOR)
        if len(parts) == 2:  # noqa: PLR2004
            return None, word

        label = PART_SEPARATOR.join(parts[1:])
        return parts[0], label or None

    def verify(self, word: str) -> list[str]:
        input_, label = self.split(word)
        if input_ is None:
            return self.label.verify(word)

        if input_ not in self.inputs:
            if label is None and self.labels.get(input_):
                return ['Expected characteristic to have value']
            return [f'Unknown input "{input_}"']

        if label is None:
            return ['Expected input and label separated by a dot']

        return self.label.verify(label)

    def complete(self, word: str) -> list[Completion]:
        head, separator, rest = word.partition(PART_SEPARATOR)
        if not separator:
            return [
                Completion(insert_text=name, kind=CompletionKind.VARIABLE)
                for name in self.inputs
            ] + self.label.complete(word)

        options = []
        if head in self.inputs:
            options.extend(
                option.shift(len(head) + len(PART_SEPARATOR))
                for option in self.label.complete(rest)
            )
        if PART_SEPARATOR not in rest and self.labels.get(head):
            options.extend(self.label.complete(word))

        return options

    def replace(self, word: str, replacement: Replacement) -> str:
        input_, label = self.split(word)

        if input_ is None:
            return self.label.replace(word, replacement)

        if replacement.applies_to(ReplacementKind.INPUT) and input_ == replacement.old:
            input_ = replacement.new

        if label is not None:
            label = self.label.replace(label, replacement)
            return f'{input_}{PART_SEPARATOR}{label}'

        return input_


class IntersectionWord(BaseWord):
    """Set intersection of two constraint variables: `intersection(a,b)`."""

    kind: Literal['intersection'] = 'intersection'

    def verify(self, word: str) -> list[str]:
        match = INTERSECTION_PATTERN.match(word)
        if not match or not all(match.groups()):
            return ['Expected "intersection(<variable>,<variable>)"']

        return []

    def complete(self, word: str) -> list[Completion]:
        if word.startswith(INTERSECTION_PREFIX) or not INTERSECTION_PREFIX.startswith(word):
            return []

        return [Completion(
            insert_text=INTERSECTION_SNIPPET,
            kind=CompletionKind.SNIPPET,
            snippet=True,
        )]


#: Any grammar word, discriminated by its `kind`.
Word = Annotated[
    ConstantWord
    | AnyWord
    | NegatableWord
    | ParenthesesWord
    | BracketWord
    | ListWord
    | LabelWord
    | InputWord
    | InputLabelWord
    | IntersectionWord,
    Field(discriminator='kind'),
]

NegatableWord.model_rebuild()
ParenthesesWord.model_rebuild()
ListWord.model_rebuild()
