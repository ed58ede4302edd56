"""DSL names primitive types and validation rules.

This module defines base name patterns and strongly-typed aliases used by
the grammar engine and the statement validator to recognize label types,
label values and available inputs.

The rules defined here form part of the public DSL contract and are relied
upon by grammar builders, validators, refactoring tools and editor tooling.
"""

from re import ASCII
from re import compile as regexp
from typing import Annotated

from pydantic import Field

#: Base pattern for label type and label value names.
_LABEL_PATTERN = r'[A-Za-z0-9_]+'

#: Base pattern for available input names.
#: Inputs built from several incoming edges are joined with `|`.
_INPUT_PATTERN = r'[A-Za-z0-9_~][A-Za-z0-9_~|]*'

#: Characters that may continue a name. Used by substring-boundary checks.
NAME_CHARS = r'A-Za-z0-9_~|'

#: Separator of incoming edge labels in input names.
INPUT_SEPARATOR = '|'

#: Prefix of label variables (`Type.$Type`).
VARIABLE_PREFIX = '$'

#: Compiled pattern for label type and value names.
LABEL_NAME_PATTERN = regexp(
    rf'^{_LABEL_PATTERN}$',
    flags=ASCII,
)

#: Compiled pattern for available input names.
INPUT_NAME_PATTERN = regexp(
    rf'^{_INPUT_PATTERN}$',
    flags=ASCII,
)

#: Compiled pattern matching a single name character.
NAME_CHAR_PATTERN = regexp(
    rf'[{NAME_CHARS}]',
    flags=ASCII,
)


LabelName = Annotated[
    str, Field(
        pattern=rf'^{_LABEL_PATTERN}$',
        title='Label name',
        description=(
            'Name of a label type or of one of its values. '
            'Label names are limited to ASCII letters, digits, '
            'and underscores.'
        ),
        examples=[
            'Sensitivity',
            'Personal',
        ],
    ),
]

InputName = Annotated[
    str, Field(
        pattern=rf'^{_INPUT_PATTERN}$',
        title='Input name',
        description=(
            'Name of an input available to a node behavior. '
            'The name is derived from the labels of incoming edges; '
            'several labels are sorted and joined with `|`.'
        ),
        examples=[
            'request',
            'data|request',
        ],
    ),
]


def is_name_char(char: str | None) -> bool:
    """Check whether a character may continue a name.

    Args:
        char: A single character or `None` outside of the line.

    Returns:
        True if the character is a name character.
    """
    return bool(char) and NAME_CHAR_PATTERN.fullmatch(char) is not None
