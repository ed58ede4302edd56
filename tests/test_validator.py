"""Tests for the line-oriented behavior validator."""

import pytest

from dataflow_dsl.registry import DslContext
from dataflow_dsl.results import Diagnostic
from dataflow_dsl.settings import EngineSettings
from dataflow_dsl.validator import BehaviorValidator, find_occurrences, split_items


@pytest.fixture
def validator(settings: EngineSettings) -> BehaviorValidator:
    """Provide a validator with test settings."""
    return BehaviorValidator(settings)


def diagnostic(start: int, end: int, message: str, line: int = 0) -> Diagnostic:
    """Shorthand of an expected diagnostic."""
    return Diagnostic(line=line, col_start=start, col_end=end, message=message)


@pytest.mark.parametrize('text', (
    pytest.param('', id='empty'),
    pytest.param('   ', id='blank'),
    pytest.param('# forward x', id='hash comment'),
    pytest.param('// forward x', id='slash comment'),
    pytest.param('forward a,b', id='forward'),
    pytest.param('forward a, b', id='forward with space'),
    pytest.param('set Sensitivity.Personal', id='set'),
    pytest.param('unset Sensitivity.Personal,Location.EU', id='unset'),
    pytest.param('set Sensitivity.$Sensitivity', id='label variable'),
    pytest.param('assign Sensitivity.Personal if TRUE from in1', id='assign'),
    pytest.param('assign Sensitivity.Personal if TRUE', id='assign without from'),
    pytest.param(
        'assign Sensitivity.Personal,Location.EU if !(a.Sensitivity.Personal || Location.nonEU) && TRUE from a,b',
        id='assign term',
    ),
    pytest.param(
        'assign Sensitivity.Personal if ( a.Sensitivity.Personal ) from a',
        id='spaced parentheses',
    ),
))
def test_valid(validator: BehaviorValidator, context: DslContext, text: str) -> None:
    """Accept valid lines."""
    assert validator.validate(text, context) == []


def test_unknown_statement(validator: BehaviorValidator, context: DslContext) -> None:
    """Span the whole line of an unknown statement."""
    assert validator.validate('unknown stuff', context) == [
        diagnostic(0, 13, 'Unknown statement'),
    ]


@pytest.mark.parametrize('text, expected', (
    pytest.param(
        'forward a,a',
        [
            diagnostic(8, 9, 'duplicate input: a'),
            diagnostic(10, 11, 'duplicate input: a'),
        ],
        id='duplicate every occurrence',
    ),
    pytest.param(
        'forward ab,a',
        [diagnostic(8, 10, 'invalid/unknown input: ab')],
        id='substring is no duplicate',
    ),
    pytest.param(
        'forward t',
        [diagnostic(8, 9, 'invalid/unknown input: t')],
        id='unknown input',
    ),
    pytest.param(
        'forward a,x,b,y',
        [
            diagnostic(10, 11, 'invalid/unknown input: x'),
            diagnostic(14, 15, 'invalid/unknown input: y'),
        ],
        id='unknown inputs',
    ),
    pytest.param(
        'forward',
        [diagnostic(0, 7, 'forward needs at least one input')],
        id='no inputs',
    ),
    pytest.param(
        'forward ,',
        [diagnostic(0, 9, 'forward needs at least one input')],
        id='only comma',
    ),
    pytest.param(
        'forward a,',
        [diagnostic(9, 10, 'trailing comma without being followed by an input')],
        id='trailing comma',
    ),
    pytest.param(
        'forward a,,b',
        [diagnostic(9, 10, 'trailing comma without being followed by an input')],
        id='double comma',
    ),
    pytest.param(
        'forward a b',
        [diagnostic(0, 11, 'invalid forwarding (template: forward <input_pins>)')],
        id='missing comma',
    ),
    pytest.param(
        'forwarding a',
        [diagnostic(0, 12, 'invalid forwarding (template: forward <input_pins>)')],
        id='misspelled keyword',
    ),
    pytest.param(
        'forward a.b',
        [diagnostic(8, 11, 'invalid/unknown input: a.b')],
        id='invalid input name',
    ),
))
def test_forward(validator: BehaviorValidator, context: DslContext, text: str,
                 expected: list[Diagnostic]) -> None:
    """Validate forwarding statements stage by stage."""
    assert validator.validate(text, context) == expected


def test_forward_combined_input(validator: BehaviorValidator) -> None:
    """Treat `|` as part of input names."""
    context = DslContext(inputs=('a|b', 'b'))

    assert validator.validate('forward a|b,b', context) == []
    assert validator.validate('forward b,a|b,b', context) == [
        diagnostic(8, 9, 'duplicate input: b'),
        diagnostic(14, 15, 'duplicate input: b'),
    ]


@pytest.mark.parametrize('text, expected', (
    pytest.param(
        'set Secrecy.Personal',
        [diagnostic(4, 11, 'unknown label type: Secrecy')],
        id='unknown type',
    ),
    pytest.param(
        'set Sensitivity.Secret',
        [diagnostic(16, 22, 'unknown label value of label type Sensitivity: Secret')],
        id='unknown value',
    ),
    pytest.param(
        'set Secrecy.Secret',
        [diagnostic(4, 11, 'unknown label type: Secrecy')],
        id='type before value',
    ),
    pytest.param(
        'set Sensitivity',
        [diagnostic(4, 15, 'expected label value for label type Sensitivity')],
        id='missing value',
    ),
    pytest.param(
        'set Sensitivity.',
        [diagnostic(4, 16, 'expected label value for label type Sensitivity')],
        id='empty value',
    ),
    pytest.param(
        'set Sensitivity.Personal.Extra',
        [diagnostic(4, 30, 'invalid label definition: Sensitivity.Personal.Extra')],
        id='too many dots',
    ),
    pytest.param(
        'set Sensitivity.$Location',
        [diagnostic(16, 25, 'invalid label variable: $Location')],
        id='foreign variable',
    ),
    pytest.param(
        'unset Sensitivity.Personal,',
        [diagnostic(26, 27, 'trailing comma without being followed by a label')],
        id='trailing comma',
    ),
    pytest.param(
        'set Location.EU,Sensitivity.Secret,Location.US',
        [
            diagnostic(28, 34, 'unknown label value of label type Sensitivity: Secret'),
            diagnostic(44, 46, 'unknown label value of label type Location: US'),
        ],
        id='every item',
    ),
    pytest.param(
        'set',
        [diagnostic(0, 3, 'invalid assignment (template: set <out_labels>)')],
        id='no labels',
    ),
    pytest.param(
        'unset Sensitivity.Personal Location.EU',
        [diagnostic(0, 38, 'invalid assignment (template: unset <out_labels>)')],
        id='missing comma',
    ),
))
def test_set(validator: BehaviorValidator, context: DslContext, text: str,
             expected: list[Diagnostic]) -> None:
    """Validate label statements item by item."""
    assert validator.validate(text, context) == expected


@pytest.mark.parametrize('text, expected', (
    pytest.param(
        'assign Secrecy.Personal if TRUE from in1',
        [diagnostic(7, 14, 'unknown label type: Secrecy')],
        id='unknown output type',
    ),
    pytest.param(
        'assign Sensitivity.Secret if TRUE from in1',
        [diagnostic(19, 25, 'unknown label value of label type Sensitivity: Secret')],
        id='unknown output value',
    ),
    pytest.param(
        'assign Sensitivity.Personal if Secrecy.Personal',
        [diagnostic(31, 38, 'unknown label type: Secrecy')],
        id='unknown term type',
    ),
    pytest.param(
        'assign Sensitivity.Personal if x.Sensitivity.Personal',
        [diagnostic(31, 32, 'invalid/unknown input: x')],
        id='unknown term input',
    ),
    pytest.param(
        'assign Sensitivity.Personal if a',
        [diagnostic(31, 32, 'expected input and label separated by a dot')],
        id='bare term input',
    ),
    pytest.param(
        'assign Sensitivity.Personal if ! TRUE',
        [diagnostic(31, 32, 'invalid term')],
        id='detached negation',
    ),
    pytest.param(
        'assign Sensitivity.Personal if a.Sensitivity.Personal from b,c',
        [diagnostic(61, 62, 'invalid/unknown input: c')],
        id='unknown source input',
    ),
    pytest.param(
        'assign Sensitivity.Personal if TRUE &&',
        [diagnostic(36, 38, 'invalid term')],
        id='dangling operator',
    ),
    pytest.param(
        'assign Sensitivity.Personal if TRUE & FALSE',
        [diagnostic(36, 37, 'invalid term')],
        id='unknown character',
    ),
    pytest.param(
        'assign Sensitivity.Personal if TRUE FALSE',
        [diagnostic(36, 41, 'invalid term')],
        id='missing operator',
    ),
    pytest.param(
        'assign Sensitivity.Personal if (TRUE',
        [diagnostic(31, 36, 'unbalanced parentheses in term')],
        id='unclosed parenthesis',
    ),
    pytest.param(
        'assign Sensitivity.Personal if TRUE)',
        [diagnostic(35, 36, 'unbalanced parentheses in term')],
        id='unopened parenthesis',
    ),
    pytest.param(
        'assign Sensitivity.Personal if',
        [diagnostic(0, 30, 'invalid term')],
        id='empty term',
    ),
    pytest.param(
        'assign Sensitivity.Personal',
        [diagnostic(0, 27, 'invalid assignment (template: assign <out_labels> if <term> from <in_pins>)')],
        id='missing if',
    ),
    pytest.param(
        'assign Sensitivity.Personal if TRUE from',
        [diagnostic(0, 40, 'invalid assignment (template: assign <out_labels> if <term> from <in_pins>)')],
        id='missing source',
    ),
    pytest.param(
        'assign Secrecy.X if (Secrecy.Y from z',
        [
            diagnostic(7, 14, 'unknown label type: Secrecy'),
            diagnostic(20, 30, 'unbalanced parentheses in term'),
            diagnostic(21, 28, 'unknown label type: Secrecy'),
            diagnostic(36, 37, 'invalid/unknown input: z'),
        ],
        id='every check contributes',
    ),
))
def test_assign(validator: BehaviorValidator, context: DslContext, text: str,
                expected: list[Diagnostic]) -> None:
    """Validate assignments: output labels, term and source inputs."""
    assert validator.validate(text, context) == expected


def test_lines_accumulate(validator: BehaviorValidator, context: DslContext) -> None:
    """Validate every line independently."""
    text = 'forward t\n\nset Secrecy.Personal\n# comment\nforward a'

    assert validator.validate(text, context) == [
        diagnostic(8, 9, 'invalid/unknown input: t', line=0),
        diagnostic(4, 11, 'unknown label type: Secrecy', line=2),
    ]


def test_empty_registries(validator: BehaviorValidator) -> None:
    """Report references against empty registries."""
    assert validator.validate('set Sensitivity.Personal\nforward a', DslContext()) == [
        diagnostic(4, 15, 'unknown label type: Sensitivity', line=0),
        diagnostic(8, 9, 'invalid/unknown input: a', line=1),
    ]


@pytest.mark.parametrize('line, name, expected', (
    pytest.param('forward a,a', 'a', [8, 10], id='separate'),
    pytest.param('forward ab,a', 'a', [11], id='prefix of another name'),
    pytest.param('forward ba,a', 'a', [11], id='suffix of another name'),
    pytest.param('forward a|b,a', 'a', [12], id='part of combined name'),
    pytest.param('forward b', 'a', [], id='absent'),
))
def test_find_occurrences(line: str, name: str, expected: list[int]) -> None:
    """Find standalone names only."""
    assert find_occurrences(line, name, len('forward')) == expected


def test_split_items() -> None:
    """Strip items and remember their commas."""
    line = 'forward  a , b,'

    items = split_items(line, 8, len(line))

    assert [(item.text, item.start, item.end, item.comma) for item in items] == [
        ('a', 9, 10, 11),
        ('b', 13, 14, 11),
        ('', 15, 15, 14),
    ]
