"""
envschema
=========

Environment-file loading and validation for service startup.

Components:
- environments.py: NODE_ENV spellings -> canonical environment (prod, test, dev, local)
- validators.py: field descriptors (str_, num, bool_, url, email, host, port, json_)
- clean.py: validate an environment mapping against a schema
- config.py: configure(), which loads <base_dir>/<env> and <base_dir>/.env first
- errors.py: EnvError, EnvMissingError, EnvValidationError

Usage:
    from envschema import configure, port, str_

    env = configure({
        "PORT": port(default=8080),
        "API_KEY": str_(desc="Upstream API key"),
    })
    env.PORT
"""

from .clean import CleanedEnv, clean_env, merge_schemas
from .config import ConfigOptions, candidate_files, configure, load_env_files, resolve_env_paths
from .environments import (
    ENV_VAR,
    ENVIRONMENT_MAP,
    Environment,
    current_environment,
    environment_names,
    node_env,
    normalize_environment,
)
from .errors import EnvError, EnvMissingError, EnvValidationError
from .validators import (
    EnvField,
    bool_,
    email,
    host,
    json_,
    make_validator,
    num,
    port,
    str_,
    test_only,
    url,
)

__all__ = [
    "configure",
    "ConfigOptions",
    "candidate_files",
    "resolve_env_paths",
    "load_env_files",
    "clean_env",
    "merge_schemas",
    "CleanedEnv",
    "ENV_VAR",
    "ENVIRONMENT_MAP",
    "Environment",
    "current_environment",
    "environment_names",
    "node_env",
    "normalize_environment",
    "EnvError",
    "EnvMissingError",
    "EnvValidationError",
    "EnvField",
    "bool_",
    "email",
    "host",
    "json_",
    "make_validator",
    "num",
    "port",
    "str_",
    "test_only",
    "url",
]
