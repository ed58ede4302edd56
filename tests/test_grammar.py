"""Tests for grammar nodes and the builder invariant."""

import pytest

from dataflow_dsl.core import AnyWord, ConstantWord, Grammar, GrammarBuilder, GrammarNode
from dataflow_dsl.core.grammar import walk
from dataflow_dsl.errors import GrammarBuildError, GrammarWarning
from dataflow_dsl.settings import EngineSettings


def test_walk_cycles() -> None:
    """Visit every node of a cyclic grammar once."""
    first = GrammarNode(ConstantWord(word='first'))
    second = GrammarNode(ConstantWord(word='second'), [first], can_be_final=True)
    first.children.append(second)

    assert list(walk([first, second])) == [first, second]
    assert len(list(Grammar('cyclic', [first]))) == 2


def test_leaves() -> None:
    """Collect nodes without children."""
    leaf = GrammarNode(AnyWord(), can_be_final=True)
    shared = GrammarNode(ConstantWord(word='x'), [leaf])
    root = GrammarNode(ConstantWord(word='root'), [shared, leaf])

    assert root.leaves() == [leaf]


def test_starts_statement() -> None:
    """Match tokens against root words."""
    grammar = Grammar('test', [
        GrammarNode(ConstantWord(word='forward'), [GrammarNode(AnyWord(), can_be_final=True)]),
    ])

    assert grammar.starts_statement('forward')
    assert not grammar.starts_statement('if')


@pytest.mark.parametrize('multiline, restarts', (
    pytest.param(True, False, id='continued statements'),
    pytest.param(False, True, id='single line statements'),
))
def test_restarts_at(multiline: bool, restarts: bool) -> None:  # noqa: FBT001
    """Start a statement on every line unless statements may continue."""
    grammar = Grammar('test', [GrammarNode(ConstantWord(word='forward'), can_be_final=True)],
                      multiline=multiline)

    assert grammar.restarts_at('forward')
    assert grammar.restarts_at('if') is restarts


def test_builder_accepts_final_leaves(settings: EngineSettings) -> None:
    """Build a grammar whose leaves may end a statement."""
    builder = GrammarBuilder(settings)

    grammar = builder.make([
        GrammarNode(ConstantWord(word='x'), [GrammarNode(AnyWord(), can_be_final=True)]),
    ])

    assert len(grammar.roots) == 1


@pytest.mark.parametrize('roots', (
    pytest.param([GrammarNode(ConstantWord(word='x'))], id='non-final leaf'),
    pytest.param([], id='no roots'),
))
def test_builder_strict(settings: EngineSettings, roots: list[GrammarNode]) -> None:
    """Raise on a malformed grammar in strict mode."""
    with pytest.raises(GrammarBuildError, match=r'^Grammar'):
        GrammarBuilder(settings).make(roots)


def test_builder_relaxed(settings: EngineSettings) -> None:
    """Warn on a malformed grammar in relaxed mode."""
    relaxed = settings.model_copy(update={'strict': False})

    with pytest.warns(GrammarWarning, match=r'non-final leaf'):
        grammar = GrammarBuilder(relaxed).make([GrammarNode(ConstantWord(word='x'))])

    assert len(grammar.roots) == 1
