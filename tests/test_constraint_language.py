"""Tests for the constraint language."""

import pytest

from dataflow_dsl.languages import ConstraintLanguage
from dataflow_dsl.results import ReplacementKind


@pytest.mark.parametrize('text', (
    pytest.param('data Sensitivity.Personal neverFlows', id='data characteristic'),
    pytest.param('data !Sensitivity.Public neverFlows', id='negated characteristic'),
    pytest.param('data Sensitivity.Personal,Location.EU neverFlows', id='characteristic list'),
    pytest.param('node type Store neverFlows', id='node type'),
    pytest.param('node named db neverFlows to named cloud', id='named with to'),
    pytest.param(
        'data Sensitivity.Personal neverFlows node Location.nonEU',
        id='node destination',
    ),
    pytest.param(
        'data Sensitivity.Personal node type Process neverFlows node named x where present !$x',
        id='data and node source',
    ),
    pytest.param(
        'node type Process data Sensitivity.$Sensitivity neverFlows to type Store',
        id='node and data source',
    ),
    pytest.param(
        'data Sensitivity.Personal neverFlows where empty intersection(a,b)',
        id='intersection condition',
    ),
    pytest.param(
        'data Sensitivity.Personal neverFlows\nnode type Store neverFlows',
        id='two constraints',
    ),
))
def test_verify_valid(constraint: ConstraintLanguage, text: str) -> None:
    """Accept complete constraints."""
    assert constraint.verify(text)
    assert constraint.validate(text) == []


@pytest.mark.parametrize('text', (
    pytest.param('data', id='missing selector'),
    pytest.param('data Sensitivity.Personal', id='missing neverFlows'),
    pytest.param('data Secrecy.Personal neverFlows', id='unknown type'),
    pytest.param('data Sensitivity.Personal neverFlows where', id='missing condition'),
    pytest.param(
        'data Sensitivity.Personal neverFlows where empty intersection(a)',
        id='single variable intersection',
    ),
    pytest.param('flow Sensitivity.Personal neverFlows', id='unknown source'),
))
def test_verify_invalid(constraint: ConstraintLanguage, text: str) -> None:
    """Reject incomplete constraints."""
    assert not constraint.verify(text)


def test_validate_reports_alternatives(constraint: ConstraintLanguage) -> None:
    """Report every failing selector of the token."""
    diagnostics = constraint.validate('data Secrecy.Personal neverFlows')

    assert [diagnostic.message for diagnostic in diagnostics] == [
        'Expected keyword "type"',
        'Unknown label type "Secrecy"',
        'Expected keyword "named"',
    ]
    assert {(diagnostic.line, diagnostic.col_start, diagnostic.col_end) for diagnostic in diagnostics} == {
        (0, 5, 21),
    }


@pytest.mark.parametrize('text, expected', (
    pytest.param('', ['node', 'data'], id='roots'),
    pytest.param('data ', ['type', 'Sensitivity', 'Location', 'named'], id='selectors'),
    pytest.param('data Sensitivity.Personal ', ['node', 'neverFlows'], id='after data selector'),
    pytest.param(
        'data Sensitivity.Personal neverFlows ',
        ['node', 'to', 'where'],
        id='after neverFlows',
    ),
    pytest.param(
        'data Sensitivity.Personal neverFlows where ',
        ['present', 'empty'],
        id='conditions',
    ),
    pytest.param(
        'data Sensitivity.Personal neverFlows where empty inter',
        ['intersection($0)'],
        id='intersection snippet',
    ),
))
def test_completion(constraint: ConstraintLanguage, text: str, expected: list[str]) -> None:
    """Suggest the words allowed at the end of the text."""
    suggestions = constraint.get_completion(text)

    assert [suggestion.insert_text for suggestion in suggestions] == expected


def test_completion_snippet(constraint: ConstraintLanguage) -> None:
    """Mark snippet suggestions."""
    suggestions = constraint.get_completion('data Sensitivity.Personal neverFlows where empty ')

    assert [suggestion.snippet for suggestion in suggestions] == [True]


def test_replace(constraint: ConstraintLanguage) -> None:
    """Rename characteristics in selectors only."""
    text = 'data !Sensitivity.Personal,Location.EU neverFlows node Sensitivity.Personal'

    renamed = constraint.replace_text(
        text,
        'Sensitivity.Personal',
        'Secrecy.Personal',
        ReplacementKind.LABEL,
    )

    assert renamed == 'data !Secrecy.Personal,Location.EU neverFlows node Secrecy.Personal'
