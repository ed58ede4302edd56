"""Document models of conformance specifications."""

from .headers import ContextSpec
from .parser import SpecParser
from .steps import (
    BaseStep,
    CompleteStep,
    ExpectedDiagnostic,
    RenameStep,
    Step,
    ValidateStep,
    VerifyStep,
)

__all__ = (
    'BaseStep',
    'CompleteStep',
    'ContextSpec',
    'ExpectedDiagnostic',
    'RenameStep',
    'SpecParser',
    'Step',
    'ValidateStep',
    'VerifyStep',
)
