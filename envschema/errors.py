"""Exceptions raised while cleaning the environment.

WHAT:
    EnvError          - a value failed parsing or is not one of the allowed choices
    EnvMissingError   - a required variable has no value and no default
    EnvValidationError - aggregate raised once per clean, keyed by variable name

WHY:
    Configuration is read before anything else starts. Callers either get the
    full cleaned environment or one exception listing every bad variable.
"""

from typing import Dict, List


class EnvError(ValueError):
    """Invalid environment variable value."""


class EnvMissingError(EnvError):
    """Required environment variable is missing."""


class EnvValidationError(EnvError):
    """One or more environment variables failed validation.

    Attributes:
        errors: Variable name -> the EnvError (or EnvMissingError) raised for it
    """

    def __init__(self, errors: Dict[str, EnvError]):
        self.errors = dict(errors)
        lines = [f"{key}: {err}" for key, err in sorted(self.errors.items())]
        super().__init__("Invalid environment variables:\n    " + "\n    ".join(lines))

    @property
    def missing(self) -> List[str]:
        return sorted(key for key, err in self.errors.items() if isinstance(err, EnvMissingError))
