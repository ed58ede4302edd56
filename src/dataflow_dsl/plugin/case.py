"""Pytest items running single specification steps."""

from typing import TYPE_CHECKING

import pytest

from dataflow_dsl.errors import DSLError, ErrorContext

if TYPE_CHECKING:
    from typing import Any

if TYPE_CHECKING:
    from dataflow_dsl.registry import DslContext
    from dataflow_dsl.schema import BaseStep, SpecParser


class TestStep(pytest.Item):
    """Pytest item applying one step to its language.

    The language is built from the specification context when the item
    runs, so grammar builder defects fail the item, not the collection.
    """

    __test__ = False

    def __init__(self, *,
                 step: 'BaseStep',
                 step_num: int,
                 context: 'DslContext',
                 parser: 'SpecParser',
                 **kwargs: 'Any') -> None:
        """Initialize a specification step item.

        Args:
            step: The step to run.
            step_num: Position of the step in the file.
            context: Context of the specification.
            parser: Parser building languages.
            **kwargs: Keyword pytest.Item arguments.
        """
        super().__init__(**kwargs)

        self.step = step
        self.step_num = step_num
        self.context = context
        self.parser = parser

    def runtest(self) -> None:
        """Run the step and compare its outcome.

        Raises:
            AssertionError: If the outcome differs from the expectation.
        """
        language = self.parser.language(self.step.language, self.context)

        outcome = self.step.run(language)
        if not self.step.check(outcome):
            raise self.failure(outcome)

    def failure(self, outcome: 'Any') -> AssertionError:  # noqa: ANN401
        """Create an AssertionError describing the failed step.

        Args:
            outcome: Actual outcome of the step.

        Returns:
            AssertionError with formatted specification context.
        """
        error_context = ErrorContext(
            filename=f'{self.path}',
            step_num=self.step_num,
            element=self.step.model_dump(
                mode='json',
                exclude_none=True,
                exclude_unset=True,
            ),
        )

        message = f'Expectation fail: {self.step.action}'
        if self.step.title:
            message += f': {self.step.title}'

        message += f'\n    expected: {self.step.expected()!r}\n    actual: {outcome!r}'

        return AssertionError(DSLError.format(message, error_context))

    def reportinfo(self) -> tuple['Any', int | None, str]:
        """Location of the item in reports."""
        return self.path, None, f'{self.name} ({self.step.action})'
