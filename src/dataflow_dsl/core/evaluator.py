"""Evaluation of DSL text against a grammar.

The evaluator walks a grammar tree alongside the tokens of the text and
provides three operations:

- verification, an existential search over all derivations of an
  ambiguous grammar;
- completion of the token under the cursor;
- grammar-aware renaming of identifiers that leaves the rest of the text
  byte-identical.

Statements are line oriented: a token that starts a line and matches a
root word starts a new statement. In a multi-line grammar, a line that does
not start with a root word continues the statement of the previous line;
otherwise every line holds a statement of its own.
"""

from re import compile as regexp
from typing import TYPE_CHECKING, NamedTuple

from dataflow_dsl.core.words import Replacement
from dataflow_dsl.results import Diagnostic, ReplacementKind, Suggestion
from dataflow_dsl.settings import EngineSettings, get_settings

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

if TYPE_CHECKING:
    from dataflow_dsl.core.grammar import Grammar, GrammarNode
    from dataflow_dsl.results import Completion

TOKEN_PATTERN = regexp(r'\S+')

END_OF_LINE_MESSAGE = 'Unexpected end of line'
EXTRA_TOKEN_MESSAGE = 'Expected end of statement'

LINE_SEPARATOR = '\n'


def split_lines(text: str) -> list[str]:
    """Split DSL text into lines, keeping a trailing empty line."""
    return text.replace('\r\n', LINE_SEPARATOR).split(LINE_SEPARATOR)


class Token(NamedTuple):
    """Whitespace-delimited token with its 0-based position."""

    text: str
    line: int
    column: int

    @property
    def end(self) -> int:
        """Column after the last character of the token."""
        return self.column + len(self.text)


class Evaluator:
    """Stateless evaluator of a single grammar.

    The evaluator holds no state besides its grammar and settings, so it is
    recreated together with the grammar whenever registries change.
    """

    def __init__(self, grammar: 'Grammar',
                 settings: EngineSettings | None = None) -> None:
        """Initialize an evaluator.

        Args:
            grammar: The grammar of the surface language.
            settings: Engine settings. Resolved from the environment if omitted.
        """
        self.grammar = grammar
        self.settings = settings or get_settings()

    def tokenize(self, lines: 'Sequence[str]') -> list[Token]:
        """Split lines into tokens, skipping comment lines.

        Args:
            lines: Lines of DSL text.

        Returns:
            Tokens in reading order.
        """
        return [
            Token(match.group(), line_num, match.start())
            for line_num, line in enumerate(lines)
            if not self.settings.is_comment(line)
            for match in TOKEN_PATTERN.finditer(line)
        ]

    @staticmethod
    def starts_line(tokens: 'Sequence[Token]', index: int) -> bool:
        """Check whether a token is the first one of its line."""
        return index > 0 and tokens[index - 1].line != tokens[index].line

    def is_valid(self, lines: 'Sequence[str]') -> bool:
        """Check whether the text is a sequence of complete statements."""
        return not self.verify(lines)

    def verify(self, lines: 'Sequence[str]') -> list[Diagnostic]:
        """Verify the text against the grammar.

        Args:
            lines: Lines of DSL text.

        Returns:
            Diagnostics of the failing derivations. An empty list means
            that at least one derivation accepts the text.
        """
        tokens = self.tokenize(lines)
        if not tokens:
            return []

        return self._verify(self.grammar.roots, tokens, 0, False, at_root=True)

    def _verify(self, nodes: 'Sequence[GrammarNode]', tokens: 'Sequence[Token]',
                index: int, comes_from_final: bool, *,
                at_root: bool = False) -> list[Diagnostic]:
        """Verify tokens from a position against a frontier of nodes.

        Args:
            nodes: Nodes the token at `index` may match.
            tokens: All tokens.
            index: Position of the current token.
            comes_from_final: Whether the previous node may end a statement.
            at_root: Whether the frontier was just reset to the roots.

        Returns:
            Diagnostics, or an empty list if any derivation accepts.
        """
        if index >= len(tokens):
            if not nodes or comes_from_final:
                return []
            return [self.end_of_line(tokens[index - 1])]

        token = tokens[index]
        if (
            not at_root
            and self.starts_line(tokens, index)
            and self.grammar.restarts_at(token.text)
        ):
            if nodes and not comes_from_final:
                return [self.end_of_line(tokens[index - 1])]
            return self._verify(self.grammar.roots, tokens, index, False, at_root=True)

        if not nodes:
            return [Diagnostic(
                line=token.line,
                col_start=token.column,
                col_end=token.end,
                message=EXTRA_TOKEN_MESSAGE,
            )]

        found_errors = []
        child_errors = []
        for node in nodes:
            if errors := node.word.verify(token.text):
                found_errors.append(Diagnostic(
                    line=token.line,
                    col_start=token.column,
                    col_end=token.end,
                    message=errors[0],
                ))
                continue

            result = self._verify(node.children, tokens, index + 1, node.can_be_final)
            if not result:
                return []

            child_errors.extend(result)

        return deduplicate(child_errors or found_errors)

    @staticmethod
    def end_of_line(token: Token) -> Diagnostic:
        """Diagnostic for a statement that ends too early after a token."""
        return Diagnostic(
            line=token.line,
            col_start=max(token.end - 1, 0),
            col_end=token.end,
            message=END_OF_LINE_MESSAGE,
        )

    def complete(self, lines: 'Sequence[str]') -> list[Suggestion]:
        """Calculate completion options at the end of the text.

        Args:
            lines: Lines of DSL text up to the cursor. The last line is the
                cursor line cut at the cursor column.

        Returns:
            Suggestions replacing the in-progress token.
        """
        lines = list(lines) or ['']
        last_line = lines[-1]
        if self.settings.is_comment(last_line):
            return []

        tokens = self.tokenize(lines)
        if not last_line or last_line[-1].isspace():
            tokens.append(Token('', len(lines) - 1, len(last_line)))

        options = self._complete(self.grammar.roots, tokens, 0, False, at_root=True)

        return self.position(deduplicate(options), tokens[-1])

    def _complete(self, nodes: 'Sequence[GrammarNode]', tokens: 'Sequence[Token]',
                  index: int, comes_from_final: bool, *,
                  at_root: bool = False) -> list['Completion']:
        """Collect completion options of the last token.

        Args:
            nodes: Nodes the token at `index` may match.
            tokens: All tokens; the last one is in progress.
            index: Position of the current token.
            comes_from_final: Whether the previous node may end a statement.
            at_root: Whether the frontier was just reset to the roots.

        Returns:
            Completion options of every derivation reaching the last token.
        """
        token = tokens[index]
        is_last = index == len(tokens) - 1

        if not at_root and self.starts_line(tokens, index) and not self.grammar.multiline:
            return self._complete(self.grammar.roots, tokens, index, False, at_root=True)

        if not at_root and self.starts_line(tokens, index) and (not nodes or comes_from_final):
            if is_last:
                return [
                    *self._complete(self.grammar.roots, tokens, index, False, at_root=True),
                    *self._complete(nodes, tokens, index, comes_from_final, at_root=True),
                ]
            if self.grammar.starts_statement(token.text):
                return self._complete(self.grammar.roots, tokens, index, False, at_root=True)

        if is_last:
            return [
                option
                for node in nodes
                for option in node.word.complete(token.text)
            ]

        options = []
        for node in nodes:
            if node.word.matches(token.text):
                options.extend(self._complete(node.children, tokens, index + 1, node.can_be_final))

        return options

    @staticmethod
    def position(options: 'Iterable[Completion]', token: Token) -> list[Suggestion]:
        """Attach the replace range of the in-progress token to completions.

        Args:
            options: Word-level completions.
            token: The in-progress token.

        Returns:
            Suggestions positioned in the text.
        """
        suggestions = []
        for option in options:
            col_start = token.column + option.start_offset
            suggestions.append(Suggestion(
                insert_text=option.insert_text,
                kind=option.kind,
                label=option.insert_text,
                snippet=option.snippet,
                line=token.line,
                col_start=col_start,
                col_end=max(token.end, col_start),
            ))

        return suggestions

    def replace(self, lines: 'Sequence[str]', old: str, new: str,
                kind: ReplacementKind | None = None) -> list[str]:
        """Rename an identifier wherever the grammar references it.

        The frontier is the union of the children of all nodes visited so
        far, without filtering by matches: the renamed identifier usually
        no longer exists in the registries the grammar was built from.
        Only changed tokens are rewritten; whitespace, comments and other
        tokens stay byte-identical.

        Args:
            lines: Lines of DSL text.
            old: Identifier to replace, e.g. an input name or `Type.Value`.
            new: The new identifier.
            kind: Restricts the rename to labels or inputs.

        Returns:
            The renamed lines.
        """
        lines = list(lines)
        if old == new:
            return lines

        replacement = Replacement(old=old, new=new, kind=kind)
        tokens = self.tokenize(lines)

        changes: dict[int, list[tuple[Token, str]]] = {}
        nodes: Sequence[GrammarNode] = self.grammar.roots

        for index, token in enumerate(tokens):
            if self.starts_line(tokens, index) and self.grammar.restarts_at(token.text):
                nodes = self.grammar.roots

            text = self.replace_token(nodes, token.text, replacement)
            if text != token.text:
                changes.setdefault(token.line, []).append((token, text))

            nodes = unique(child for node in nodes for child in node.children)

        for line_num, replaced in changes.items():
            lines[line_num] = splice(lines[line_num], replaced)

        return lines

    @staticmethod
    def replace_token(nodes: 'Iterable[GrammarNode]', text: str,
                      replacement: Replacement) -> str:
        """Apply the first word of a frontier that changes the token."""
        for node in nodes:
            replaced = node.word.replace(text, replacement)
            if replaced != text:
                return replaced

        return text


def splice(line: str, replaced: 'Iterable[tuple[Token, str]]') -> str:
    """Rewrite token spans of a line.

    Args:
        line: The original line.
        replaced: Tokens of the line in order with their new texts.

    Returns:
        The line with the token spans replaced.
    """
    pieces = []
    position = 0
    for token, text in replaced:
        pieces.append(line[position:token.column])
        pieces.append(text)
        position = token.end
    pieces.append(line[position:])

    return ''.join(pieces)


def unique(nodes: 'Iterable[GrammarNode]') -> list['GrammarNode']:
    """Deduplicate nodes by identity, keeping the first occurrence."""
    seen: set[int] = set()
    result = []
    for node in nodes:
        if id(node) not in seen:
            seen.add(id(node))
            result.append(node)

    return result


def deduplicate[T](items: 'Iterable[T]') -> list[T]:
    """Deduplicate equal items, keeping the first occurrence."""
    result: list[T] = []
    for item in items:
        if item not in result:
            result.append(item)

    return result
