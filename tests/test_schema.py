"""Tests for specification documents and their parser."""

import pytest

from dataflow_dsl.errors import DSLError, SpecError
from dataflow_dsl.languages import ConstraintLanguage
from dataflow_dsl.registry import DslContext
from dataflow_dsl.results import Diagnostic, ReplacementKind
from dataflow_dsl.schema import (
    CompleteStep,
    ExpectedDiagnostic,
    RenameStep,
    SpecParser,
    ValidateStep,
    VerifyStep,
)
from dataflow_dsl.settings import EngineSettings

SPEC = '''
---
spec: context
title: Two inputs
labels:
  Sensitivity: [Personal, Public]
inputs: [a, b]

---
title: Forward both
action: verify
text: forward a,b

---
action: validate
text: forward a,x
expect:
  - line: 0
    colStart: 10
    colEnd: 11
    message: 'invalid/unknown input: x'

---
action: complete
language: constraint
text: 'data '
expect: [type, named, Sensitivity]

---
action: rename
kind: input
old: a
new: c
text: forward a,b
expect: forward c,b
'''


@pytest.fixture
def parser(settings: EngineSettings) -> SpecParser:
    """Provide a specification parser with test settings."""
    return SpecParser(settings)


def test_parse(parser: SpecParser) -> None:
    """Split a stream into the context header and typed steps."""
    context, steps = parser.parse(SPEC, filename='test_spec.dsl.yaml')

    assert context.title == 'Two inputs'
    assert context.inputs == ('a', 'b')
    assert context.labels.values_of('Sensitivity') == ['Personal', 'Public']

    assert [type(step) for step in steps] == [VerifyStep, ValidateStep, CompleteStep, RenameStep]
    assert steps[0].title == 'Forward both'
    assert steps[1].expect == [ExpectedDiagnostic(line=0, col_start=10, col_end=11,
                                                  message='invalid/unknown input: x')]
    assert steps[3].kind is ReplacementKind.INPUT


def test_parse_steps_pass(parser: SpecParser) -> None:
    """Every step of a consistent specification passes."""
    context, steps = parser.parse(SPEC)

    for step in steps:
        assert step.check(step.run(parser.language(step.language, context)))


def test_parse_without_header(parser: SpecParser) -> None:
    """Run steps against an empty context without a header."""
    context, steps = parser.parse('action: verify\ntext: forward a\nexpect: false\n')

    assert context == DslContext()
    assert len(steps) == 1


@pytest.mark.parametrize('content, message', (
    pytest.param('action: verify\ntext: x\n---\nspec: context\n', r'^Context header must be at first position',
                 id='late header'),
    pytest.param('action: [', r'^Invalid YAML', id='malformed yaml'),
    pytest.param('action: guess\ntext: x\n', r'^Input tag \'guess\'', id='unknown action'),
    pytest.param('action: verify\n', r'^Field required at `verify.text`', id='missing text'),
    pytest.param('spec: context\ninputs: [a.b]\n', r'^String should match pattern', id='invalid context'),
    pytest.param('action: verify\ntext: x\nexpected: true\n', r'^Extra inputs are not permitted',
                 id='misspelled field'),
))
def test_parse_errors(parser: SpecParser, content: str, message: str) -> None:
    """Raise specification errors for invalid documents."""
    with pytest.raises(SpecError, match=message):
        parser.parse(content, filename='test_broken.dsl.yaml')


def test_unknown_language(parser: SpecParser) -> None:
    """Refuse to build an unknown language."""
    with pytest.raises(DSLError, match=r'^Unknown language'):
        parser.language('ladder', DslContext())

    assert isinstance(parser.language('constraint', DslContext()), ConstraintLanguage)


@pytest.mark.parametrize('expected, matches', (
    pytest.param(ExpectedDiagnostic(), True, id='anything'),
    pytest.param(ExpectedDiagnostic(message='boom'), True, id='message'),
    pytest.param(ExpectedDiagnostic(line=0, col_start=1, col_end=3), True, id='range'),
    pytest.param(ExpectedDiagnostic(col_start=2), False, id='other start'),
    pytest.param(ExpectedDiagnostic(message='bang'), False, id='other message'),
))
def test_expected_diagnostic(expected: ExpectedDiagnostic, matches: bool) -> None:  # noqa: FBT001
    """Match only the fields that are set."""
    diagnostic = Diagnostic(line=0, col_start=1, col_end=3, message='boom')

    assert expected.matches(diagnostic) is matches


def test_validate_step_counts() -> None:
    """Require exactly as many diagnostics as expected."""
    step = ValidateStep(action='validate', text='x', expect=[ExpectedDiagnostic()])

    assert not step.check([])
    assert step.check([Diagnostic(line=0, message='any')])
    assert not step.check([Diagnostic(line=0, message='a'), Diagnostic(line=0, message='b')])


def test_complete_step_ignores_order() -> None:
    """Compare insert texts regardless of their order."""
    step = CompleteStep(action='complete', text='', expect=['unset', 'set'])

    assert step.check(['set', 'unset'])
    assert not step.check(['set'])
