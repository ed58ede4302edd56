"""Grammar trees of surface languages.

A grammar is a forest of nodes. Each node pairs a word with the nodes
that may follow it and tells whether a statement may end at the node.
Nodes may be shared and may form cycles (for example, boolean connectors
leading back to term operands), so every traversal here is cycle-safe.
"""

from typing import TYPE_CHECKING
from warnings import warn

from dataflow_dsl.errors import GrammarBuildError, GrammarWarning
from dataflow_dsl.settings import EngineSettings, get_settings

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

if TYPE_CHECKING:
    from dataflow_dsl.core.words import Word


class GrammarNode:
    """Single node of a grammar tree.

    Attributes:
        word: Word a token must match to enter the node.
        children: Nodes allowed after this one.
        can_be_final: Whether a statement may end at this node.
    """

    __slots__ = ('can_be_final', 'children', 'word')

    def __init__(self, word: 'Word',
                 children: 'Iterable[GrammarNode]' = (),
                 can_be_final: bool = False) -> None:
        """Initialize a node.

        Args:
            word: Word a token must match to enter the node.
            children: Nodes allowed after this one.
            can_be_final: Whether a statement may end at this node.
        """
        self.word = word
        self.children = list(children)
        self.can_be_final = can_be_final

    def __repr__(self) -> str:
        """Debug representation without recursing into children."""
        return (
            f'{type(self).__name__}({self.word!r}, '
            f'children={len(self.children)}, can_be_final={self.can_be_final})'
        )

    def leaves(self) -> list['GrammarNode']:
        """Collect the nodes without children reachable from this node.

        Returns:
            Leaf nodes in depth-first order, each listed once.
        """
        return [
            node
            for node in walk([self])
            if not node.children
        ]


class Grammar:
    """Statement grammar of one surface language.

    A grammar is an immutable snapshot in practice: words close over the
    registries the grammar was built from, and the grammar has to be
    rebuilt when those registries change.
    """

    __slots__ = ('language', 'multiline', 'roots')

    def __init__(self, language: str, roots: 'Iterable[GrammarNode]',
                 multiline: bool = True) -> None:
        """Initialize a grammar.

        Args:
            language: Name of the surface language.
            roots: Nodes a statement may start with.
            multiline: Whether a line not starting with a root word
                continues the statement of the previous line.
        """
        self.language = language
        self.roots = tuple(roots)
        self.multiline = multiline

    def __repr__(self) -> str:
        """Debug representation."""
        return f'{type(self).__name__}({self.language!r}, roots={len(self.roots)})'

    def __iter__(self) -> 'Iterator[GrammarNode]':
        """Iterate over all reachable nodes, each once."""
        return walk(self.roots)

    def starts_statement(self, word: str) -> bool:
        """Check whether a token matches any root word."""
        return any(root.word.matches(word) for root in self.roots)

    def restarts_at(self, word: str) -> bool:
        """Check whether a token at the start of a line starts a new statement."""
        return not self.multiline or self.starts_statement(word)


def walk(nodes: 'Iterable[GrammarNode]') -> 'Iterator[GrammarNode]':
    """Iterate depth-first over nodes reachable from the given ones.

    Args:
        nodes: Start nodes.

    Yields:
        Every reachable node exactly once.
    """
    seen: set[int] = set()
    stack = list(reversed(list(nodes)))

    while stack:
        node = stack.pop()
        if id(node) in seen:
            continue
        seen.add(id(node))

        yield node
        stack.extend(reversed(node.children))


class GrammarBuilder:
    """Base class of grammar builders.

    Builders assemble a grammar from registry snapshots and check the
    structural invariant of the result before handing it out.
    """

    #: Name of the surface language produced by the builder.
    language: str = ''

    #: Whether statements may continue on the following lines.
    multiline: bool = True

    def __init__(self, settings: EngineSettings | None = None) -> None:
        """Initialize a builder.

        Args:
            settings: Engine settings. Resolved from the environment if omitted.
        """
        self.settings = settings or get_settings()

    def make(self, roots: 'Iterable[GrammarNode]') -> Grammar:
        """Create and check a grammar from root nodes.

        Args:
            roots: Nodes a statement may start with.

        Returns:
            The checked grammar.

        Raises:
            GrammarBuildError: If the grammar violates its invariant
                on strict mode.
        """
        grammar = Grammar(self.language, roots, multiline=self.multiline)
        self.check(grammar)

        return grammar

    def check(self, grammar: Grammar) -> None:
        """Check that every reachable leaf may end a statement.

        A node without children that is not final can never be part of a
        complete statement, which is a defect of the builder.

        Args:
            grammar: The grammar to check.

        Raises:
            GrammarBuildError: If the invariant is violated on strict mode.
        """
        if not grammar.roots:
            self.emit_build_issue(f'Grammar {grammar.language!r} has no roots')

        for node in grammar:
            if not node.children and not node.can_be_final:
                self.emit_build_issue(
                    f'Grammar {grammar.language!r} has a non-final leaf {node.word!r}',
                )

    def emit_build_issue(self, message: str) -> None:
        """Raise or warn about a builder defect depending on strict mode.

        Args:
            message: Description of the defect.

        Raises:
            GrammarBuildError: On strict mode.
        """
        if self.settings.strict:
            raise GrammarBuildError(message)

        warn(message, category=GrammarWarning, stacklevel=3)
