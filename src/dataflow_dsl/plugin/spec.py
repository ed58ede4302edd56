"""Pytest file collector of specification files."""

from typing import TYPE_CHECKING

import pytest

from .case import TestStep

if TYPE_CHECKING:
    from collections.abc import Iterable


class TestSpec(pytest.File):
    """Collects every step of a specification file as a test item."""

    __test__ = False

    def collect(self) -> 'Iterable[TestStep]':
        """Parse the file and yield its steps.

        Raises:
            SpecError: If the file is not a valid specification.
        """
        parser = self.config.dsl_parser  # type: ignore[attr-defined]

        with self.path.open('rt', encoding='utf-8') as content:
            context, steps = parser.parse(content, filename=str(self.path))

        for step_num, step in enumerate(steps):
            yield TestStep.from_parent(
                self,
                name=step.title or f'step-{step_num + 1}',
                step=step,
                step_num=step_num,
                context=context,
                parser=parser,
            )
