"""Line-oriented validator of node behaviors.

The validator is a second validation path next to the grammar tree. It
classifies every line by its leading keyword and applies a dedicated rule
per statement kind, reporting every problem with an exact column range:

- `forward <inputs>`;
- `set <labels>` and `unset <labels>`;
- `assign <labels> if <term> [from <inputs>]`.

Blank lines and comment lines are skipped. Problems of one line never
affect other lines; diagnostics of all lines are returned together.
"""

from re import ASCII
from re import compile as regexp
from typing import TYPE_CHECKING, NamedTuple

from dataflow_dsl.core import split_lines
from dataflow_dsl.core.words import LIST_SEPARATOR, PART_SEPARATOR
from dataflow_dsl.names import INPUT_NAME_PATTERN, VARIABLE_PREFIX, is_name_char
from dataflow_dsl.results import Diagnostic
from dataflow_dsl.settings import EngineSettings, get_settings

if TYPE_CHECKING:
    from collections.abc import Iterable

if TYPE_CHECKING:
    from dataflow_dsl.registry import DslContext

FORWARD_PATTERN = regexp(r'^forward(?:\s+(?P<inputs>.*?))?\s*$')
SET_PATTERN = regexp(r'^(?P<keyword>(?:un)?set)\s+(?P<labels>\S.*?)\s*$')
ASSIGN_PATTERN = regexp(
    r'^assign\s+(?P<labels>\S.*?)\s+if\b(?P<term>.*?)'
    r'(?:\s+from\b(?P<inputs>.*?))?\s*$',
)

#: Characters allowed in a `Type.Value` item.
LABEL_ITEM_PATTERN = regexp(r'^[A-Za-z0-9_$.]+$', flags=ASCII)

TERM_TOKEN_PATTERN = regexp(
    r'(?P<space>\s+)'
    r'|(?P<operator>&&|\|\|)'
    r'|(?P<negation>!)'
    r'|(?P<open>\()'
    r'|(?P<close>\))'
    r'|(?P<reference>(?:[A-Za-z0-9_~$.]|\|(?!\|))+)'
    r'|(?P<unknown>.)',
    flags=ASCII,
)

TERM_CONSTANTS = frozenset(('TRUE', 'FALSE'))

#: Characters a negation may be glued to.
NEGATED_PATTERN = regexp(r'[!(]|[A-Za-z0-9_~$.]|\|(?!\|)', flags=ASCII)

FORWARD_TEMPLATE = 'invalid forwarding (template: forward <input_pins>)'
ASSIGN_TEMPLATE = 'invalid assignment (template: assign <out_labels> if <term> from <in_pins>)'

NO_INPUTS = 'forward needs at least one input'
TRAILING_INPUT_COMMA = 'trailing comma without being followed by an input'
TRAILING_LABEL_COMMA = 'trailing comma without being followed by a label'
INVALID_TERM = 'invalid term'
UNBALANCED_TERM = 'unbalanced parentheses in term'
SEPARATED_REFERENCE = 'expected input and label separated by a dot'
UNKNOWN_STATEMENT = 'Unknown statement'


class Item(NamedTuple):
    """Stripped item of a comma separated list with its position.

    Attributes:
        text: Item text without surrounding whitespace.
        start: Column of the first character.
        end: Column after the last character.
        comma: Column of the comma the item is attached to, if any.
    """

    text: str
    start: int
    end: int
    comma: int | None


def split_items(line: str, start: int, end: int) -> list[Item]:
    """Split a slice of a line into comma separated items.

    The comma of an item is the one preceding it; the first item is
    attached to the comma following it.

    Args:
        line: The whole line.
        start: First column of the list.
        end: Column after the list.

    Returns:
        Items in order, including empty ones.
    """
    items = []
    position = start
    comma = None

    while True:
        separator = line.find(LIST_SEPARATOR, position, end)
        stop = end if separator == -1 else separator

        raw = line[position:stop]
        text = raw.strip()
        offset = position + len(raw) - len(raw.lstrip())

        attached = comma
        if attached is None and separator != -1:
            attached = separator

        items.append(Item(text, offset, offset + len(text), attached))

        if separator == -1:
            return items

        comma = separator
        position = separator + len(LIST_SEPARATOR)


def find_occurrences(line: str, text: str, start: int = 0) -> list[int]:
    """Find standalone occurrences of a name in a line.

    An occurrence is standalone when neither the character before nor
    the one after it is a name character, so `te` is not found inside
    `test` or `a|te`.

    Args:
        line: The line to search.
        text: The name to find.
        start: Column to start searching from.

    Returns:
        Columns of all standalone occurrences.
    """
    if not text:
        return []

    occurrences = []
    index = line.find(text, start)
    while index != -1:
        before = line[index - 1] if index > 0 else None
        after = line[index + len(text)] if index + len(text) < len(line) else None
        if not is_name_char(before) and not is_name_char(after):
            occurrences.append(index)

        index = line.find(text, index + 1)

    return occurrences


class LabelScanner:
    """Classifies label references of a line against a context.

    Shared by all statement rules. Each method receives the exact
    position of the reference, so diagnostics never point at another
    occurrence of the same text.
    """

    def __init__(self, context: 'DslContext', line_num: int) -> None:
        """Initialize a scanner for a single line.

        Args:
            context: Label types and available inputs.
            line_num: Number of the scanned line.
        """
        self.context = context
        self.line_num = line_num

    def diagnostic(self, message: str, start: int | None = None,
                   end: int | None = None) -> Diagnostic:
        """Create a diagnostic of the scanned line."""
        return Diagnostic(line=self.line_num, col_start=start, col_end=end, message=message)

    def label(self, text: str, start: int) -> list[Diagnostic]:
        """Classify a `Type.Value` reference.

        The type is resolved first: an unknown type is reported alone,
        never together with its value.

        Args:
            text: The reference.
            start: Column of the reference.

        Returns:
            At most one diagnostic.
        """
        end = start + len(text)
        if not LABEL_ITEM_PATTERN.match(text):
            return [self.diagnostic(f'invalid label definition: {text}', start, end)]

        parts = text.split(PART_SEPARATOR)
        if len(parts) > 2:  # noqa: PLR2004
            return [self.diagnostic(f'invalid label definition: {text}', start, end)]

        type_name = parts[0]
        label_type = self.context.labels.get(type_name)
        if not label_type:
            return [self.diagnostic(
                f'unknown label type: {type_name}',
                start,
                start + len(type_name),
            )]

        value = parts[1] if len(parts) > 1 else ''
        if not value:
            return [self.diagnostic(
                f'expected label value for label type {type_name}',
                start,
                end,
            )]

        value_start = start + len(type_name) + len(PART_SEPARATOR)
        if value.startswith(VARIABLE_PREFIX):
            if value != f'{VARIABLE_PREFIX}{type_name}':
                return [self.diagnostic(f'invalid label variable: {value}', value_start, end)]
            return []

        if not label_type.get_value(value):
            return [self.diagnostic(
                f'unknown label value of label type {type_name}: {value}',
                value_start,
                end,
            )]

        return []

    def input(self, text: str, start: int) -> list[Diagnostic]:
        """Check that an input exists and is available."""
        if INPUT_NAME_PATTERN.match(text) and text in self.context.inputs:
            return []

        return [self.diagnostic(f'invalid/unknown input: {text}', start, start + len(text))]

    def reference(self, text: str, start: int) -> list[Diagnostic]:
        """Classify a label reference of a boolean term.

        Two dotted parts are a `Type.Value` pair; any other count starts
        with the name of an input carrying the label.

        Args:
            text: The reference.
            start: Column of the reference.

        Returns:
            Diagnostics of the input and of the label.
        """
        parts = text.split(PART_SEPARATOR)
        if len(parts) == 2:  # noqa: PLR2004
            return self.label(text, start)

        name = parts[0]
        if len(parts) == 1:
            if self.context.labels.get(name):
                return [self.diagnostic(
                    f'expected label value for label type {name}',
                    start,
                    start + len(text),
                )]
            if unknown := self.input(name, start):
                return unknown
            return [self.diagnostic(SEPARATED_REFERENCE, start, start + len(text))]

        label_start = start + len(name) + len(PART_SEPARATOR)
        return [
            *self.input(name, start),
            *self.label(text[label_start - start:], label_start),
        ]

    def labels(self, items: 'Iterable[Item]') -> list[Diagnostic]:
        """Classify the items of a `Type.Value` list."""
        diagnostics = []
        for item in items:
            if not item.text:
                diagnostics.append(self.trailing_comma(item, TRAILING_LABEL_COMMA))
                continue

            diagnostics.extend(self.label(item.text, item.start))

        return diagnostics

    def inputs(self, items: 'Iterable[Item]') -> list[Diagnostic]:
        """Check the items of an input list for availability."""
        diagnostics = []
        for item in items:
            if not item.text:
                diagnostics.append(self.trailing_comma(item, TRAILING_INPUT_COMMA))
                continue

            diagnostics.extend(self.input(item.text, item.start))

        return diagnostics

    def trailing_comma(self, item: Item, message: str) -> Diagnostic:
        """Diagnostic of an empty list item pointing at its comma."""
        if item.comma is None:
            return self.diagnostic(message)

        return self.diagnostic(message, item.comma, item.comma + len(LIST_SEPARATOR))


class BehaviorValidator:
    """Stateless validator of behavior texts."""

    def __init__(self, settings: EngineSettings | None = None) -> None:
        """Initialize a validator.

        Args:
            settings: Engine settings. Resolved from the environment if omitted.
        """
        self.settings = settings or get_settings()

    def validate(self, text: str, context: 'DslContext') -> list[Diagnostic]:
        """Validate every line of a behavior.

        Args:
            text: The behavior text.
            context: Label types and available inputs of the node.

        Returns:
            Diagnostics of all lines with both columns set.
        """
        diagnostics = []
        for line_num, line in enumerate(split_lines(text)):
            diagnostics.extend(
                diagnostic.spanning(line)
                for diagnostic in self.validate_line(line, LabelScanner(context, line_num))
            )

        return diagnostics

    def validate_line(self, line: str, scanner: LabelScanner) -> list[Diagnostic]:
        """Dispatch a line to the rule of its leading keyword."""
        if not line.strip() or self.settings.is_comment(line):
            return []

        if line.startswith('forward'):
            return self.validate_forward(line, scanner)

        if line.startswith(('set', 'unset')):
            return self.validate_set(line, scanner)

        if line.startswith('assign'):
            return self.validate_assign(line, scanner)

        return [scanner.diagnostic(UNKNOWN_STATEMENT)]

    def validate_forward(self, line: str, scanner: LabelScanner) -> list[Diagnostic]:
        """Validate `forward <inputs>`.

        Checks run in stages and the first failing stage is reported:
        shape, emptiness, trailing commas, duplicates, availability.
        """
        match = FORWARD_PATTERN.match(line)
        if not match:
            return [scanner.diagnostic(FORWARD_TEMPLATE)]

        if match.group('inputs') is None:
            return [scanner.diagnostic(NO_INPUTS)]

        items = split_items(line, match.start('inputs'), match.end('inputs'))
        if any(len(item.text.split()) > 1 for item in items):
            return [scanner.diagnostic(FORWARD_TEMPLATE)]

        names = [item.text for item in items if item.text]
        if not names:
            return [scanner.diagnostic(NO_INPUTS)]

        if len(names) < len(items):
            return [
                scanner.trailing_comma(item, TRAILING_INPUT_COMMA)
                for item in items
                if not item.text
            ]

        duplicates = list(dict.fromkeys(name for name in names if names.count(name) > 1))
        if duplicates:
            return [
                scanner.diagnostic(f'duplicate input: {name}', index, index + len(name))
                for name in duplicates
                for index in find_occurrences(line, name, match.start('inputs'))
            ]

        return scanner.inputs(items)

    def validate_set(self, line: str, scanner: LabelScanner) -> list[Diagnostic]:
        """Validate `set <labels>` and `unset <labels>`."""
        match = SET_PATTERN.match(line)
        if not match:
            keyword = 'unset' if line.startswith('unset') else 'set'
            return [scanner.diagnostic(f'invalid assignment (template: {keyword} <out_labels>)')]

        items = split_items(line, match.start('labels'), match.end('labels'))
        if any(len(item.text.split()) > 1 for item in items):
            keyword = match.group('keyword')
            return [scanner.diagnostic(f'invalid assignment (template: {keyword} <out_labels>)')]

        return scanner.labels(items)

    def validate_assign(self, line: str, scanner: LabelScanner) -> list[Diagnostic]:
        """Validate `assign <labels> if <term> [from <inputs>]`.

        Output labels, the term and the source inputs are checked
        independently and all of them contribute diagnostics.
        """
        match = ASSIGN_PATTERN.match(line)
        if not match:
            return [scanner.diagnostic(ASSIGN_TEMPLATE)]

        labels = split_items(line, match.start('labels'), match.end('labels'))
        inputs = []
        if match.group('inputs') is not None:
            if not match.group('inputs').strip():
                return [scanner.diagnostic(ASSIGN_TEMPLATE)]
            inputs = split_items(line, match.start('inputs'), match.end('inputs'))

        if any(len(item.text.split()) > 1 for item in (*labels, *inputs)):
            return [scanner.diagnostic(ASSIGN_TEMPLATE)]

        return [
            *scanner.labels(labels),
            *self.validate_term(line, match.start('term'), match.end('term'), scanner),
            *scanner.inputs(inputs),
        ]

    @staticmethod
    def validate_term(line: str, start: int, end: int,
                      scanner: LabelScanner) -> list[Diagnostic]:
        """Validate a boolean term.

        The structure check reports the first misplaced token only;
        label references are classified regardless of the structure.

        Args:
            line: The whole line.
            start: First column of the term.
            end: Column after the term.
            scanner: Scanner of the line.

        Returns:
            Diagnostics of the term.
        """
        diagnostics = []
        structure = []

        expects_operand = True
        depth = 0
        last = None

        for match in TERM_TOKEN_PATTERN.finditer(line, start, end):
            kind = match.lastgroup
            if kind == 'space':
                continue

            last = match
            if kind == 'reference' and match.group() not in TERM_CONSTANTS:
                diagnostics.extend(scanner.reference(match.group(), match.start()))

            if structure:
                continue

            if kind == 'unknown':
                misplaced = True
            elif kind == 'negation':
                misplaced = not expects_operand or not NEGATED_PATTERN.match(line, match.end(), end)
            elif kind == 'open':
                misplaced = not expects_operand
                depth += 1
            elif kind == 'reference':
                misplaced = not expects_operand
                expects_operand = False
            elif kind == 'operator':
                misplaced = expects_operand
                expects_operand = True
            else:
                misplaced = expects_operand
                if not misplaced and depth == 0:
                    structure.append(scanner.diagnostic(UNBALANCED_TERM, match.start(), match.end()))
                    continue
                depth -= 1

            if misplaced:
                structure.append(scanner.diagnostic(INVALID_TERM, match.start(), match.end()))

        if last is None:
            structure.append(scanner.diagnostic(INVALID_TERM))

        elif not structure:
            if expects_operand:
                structure.append(scanner.diagnostic(INVALID_TERM, last.start(), last.end()))
            elif depth:
                term = line[start:end]
                term_start = start + len(term) - len(term.lstrip())
                structure.append(scanner.diagnostic(UNBALANCED_TERM, term_start, last.end()))

        return structure + diagnostics
