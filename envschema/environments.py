"""
Environment Names
=================

Maps the free-form NODE_ENV value onto the canonical environment used to pick
the environment file.

WHAT:
    - Environment: canonical identifiers (prod, test, dev, local)
    - ENVIRONMENT_MAP: accepted spellings -> canonical identifier
    - normalize_environment / current_environment: pure lookups, None when unknown
    - node_env: field descriptor restricting NODE_ENV to accepted spellings

WHY:
    Deploy tooling sets NODE_ENV with whatever casing it likes ("PRODUCTION",
    "prod", "production"). File selection needs one name per environment;
    validation needs the list of spellings we accept.

Related modules:
- envschema/config.py: uses the canonical name as the environment file name
- envschema/clean.py: derives is_production / is_test from NODE_ENV
"""

import enum
import os
from types import MappingProxyType
from typing import List, Mapping, Optional, Sequence

from .validators import EnvField, str_

ENV_VAR = "NODE_ENV"


class Environment(str, enum.Enum):
    prod = "prod"
    test = "test"
    dev = "dev"
    local = "local"


ENVIRONMENT_MAP: Mapping[str, Environment] = MappingProxyType({
    "prod": Environment.prod,
    "production": Environment.prod,
    "PRODUCTION": Environment.prod,
    "PROD": Environment.prod,
    "test": Environment.test,
    "TEST": Environment.test,
    "dev": Environment.dev,
    "development": Environment.dev,
    "DEVELOPMENT": Environment.dev,
    "local": Environment.local,
    "LOCAL": Environment.local,
})


def environment_names() -> List[str]:
    """Accepted NODE_ENV spellings, in declaration order."""
    return list(ENVIRONMENT_MAP)


def normalize_environment(raw: Optional[str]) -> Optional[Environment]:
    """Canonical environment for a raw name, or None if absent or unknown."""
    if raw is None:
        return None
    return ENVIRONMENT_MAP.get(raw)


def current_environment(environ: Optional[Mapping[str, str]] = None) -> Optional[Environment]:
    if environ is None:
        environ = os.environ
    return normalize_environment(environ.get(ENV_VAR))


def node_env(choices: Optional[Sequence[str]] = None) -> EnvField:
    """NODE_ENV descriptor accepting `choices` (default: every accepted spelling)."""
    if choices is None:
        choices = environment_names()
    return str_(choices=choices, desc="Deployment environment")
