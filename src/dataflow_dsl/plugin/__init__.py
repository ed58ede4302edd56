"""Pytest plugin collecting conformance specifications of the languages.

YAML files matching `test_*.dsl.yml` or `test_*.dsl.yaml` are parsed
into a context header and steps. Every step becomes a pytest item.
"""

from re import match
from typing import TYPE_CHECKING

from .spec import TestSpec

if TYPE_CHECKING:
    from pathlib import Path

if TYPE_CHECKING:
    from _pytest.config import Config
    from _pytest.config.argparsing import Parser
    from _pytest.nodes import Node


def pytest_addoption(parser: 'Parser') -> None:
    """Register pytest command-line options for specifications.

    Args:
        parser: Pytest argument parser.
    """
    parser.addoption(
        '--dsl-relaxed',
        action='store_true',
        dest='dsl_relaxed',
        default=False,
        help=(
            'Disable strict grammar building. '
            'Grammar builder defects are reported as warnings '
            'instead of failing the specification.'
        ),
    )


def pytest_configure(config: 'Config') -> None:
    """Attach a shared specification parser as `config.dsl_parser`.

    Args:
        config: Pytest configuration object.
    """
    from dataflow_dsl.schema import SpecParser  # noqa: PLC0415
    from dataflow_dsl.settings import get_settings  # noqa: PLC0415

    settings = get_settings()
    if config.getoption('--dsl-relaxed', default=False):
        settings = settings.model_copy(update={'strict': False})

    config.dsl_parser = SpecParser(settings)  # type: ignore[attr-defined]


def pytest_collect_file(parent: 'Node', file_path: 'Path') -> TestSpec | None:
    """Collect specification files.

    Args:
        parent: Parent pytest collection node.
        file_path: Path to the file being considered.

    Returns:
        A `TestSpec` collector if the file is a specification, otherwise `None`.
    """
    if match(r'^test_.+\.dsl\.ya?ml$', file_path.name):
        return TestSpec.from_parent(
            parent,
            path=file_path,
        )

    return None
