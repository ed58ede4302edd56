"""Tests configurations and fixtures."""

import pytest

from dataflow_dsl.languages import BehaviorLanguage, ConstraintLanguage
from dataflow_dsl.registry import DslContext, LabelTypeRegistry
from dataflow_dsl.settings import EngineSettings

LABELS = {
    'Sensitivity': ['Personal', 'Public'],
    'Location': ['EU', 'nonEU'],
}

INPUTS = ('a', 'b', 'in1')


@pytest.fixture
def settings() -> EngineSettings:
    """Provide strict settings independent of the environment.

    Returns:
        Settings with defaults, ignoring `DATAFLOW_DSL_*` variables.
    """
    return EngineSettings(
        strict=True,
        comment_prefixes=('#', '//'),
        hide_listed_inputs=True,
    )


@pytest.fixture
def labels() -> LabelTypeRegistry:
    """Provide a label registry with two label types.

    Returns:
        `Sensitivity` with `Personal`/`Public` and `Location`
        with `EU`/`nonEU`.
    """
    return LabelTypeRegistry.model_validate(LABELS)


@pytest.fixture
def context(labels: LabelTypeRegistry) -> DslContext:
    """Provide a node context with the test labels and inputs `a`, `b`, `in1`."""
    return DslContext(labels=labels, inputs=INPUTS)


@pytest.fixture
def behavior(context: DslContext, settings: EngineSettings) -> BehaviorLanguage:
    """Provide the behavior language built for the test context."""
    return BehaviorLanguage(context, settings=settings)


@pytest.fixture
def constraint(context: DslContext, settings: EngineSettings) -> ConstraintLanguage:
    """Provide the constraint language built for the test context."""
    return ConstraintLanguage(context, settings=settings)
