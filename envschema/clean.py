"""
Environment Cleaning
====================

Validates a mapping of environment variables against a schema of EnvField
descriptors and returns an immutable, typed mapping.

WHAT:
    - merge_schemas: explicit union of two schemas, right-hand side wins
    - clean_env: build a pydantic model from the schema and validate the environment
    - CleanedEnv: read-only mapping of variable name -> cleaned value,
      with attribute access for names that are identifiers

WHY:
    A failing variable must stop startup with every problem listed at once,
    not one per restart. pydantic collects all field errors in a single pass;
    they are translated into the EnvError family keyed by variable name.

DESIGN:
    Model fields get positional names (field_0, field_1, ...) and read their
    variable through an alias, so any variable name works, including
    "_JAVA_OPTIONS" or "environment".

Usage:
    env = clean_env(os.environ, {"PORT": port(), "DEBUG": bool_(default=False)})
    env.PORT        # 8080
    env["DEBUG"]    # False
"""

import logging
from collections.abc import Mapping as MappingABC
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, Tuple, Type

from pydantic import BaseModel, ConfigDict, ValidationError, create_model

from .environments import ENV_VAR, Environment, normalize_environment
from .errors import EnvError, EnvValidationError
from .validators import EnvField, to_env_error

logger = logging.getLogger(__name__)

Schema = Mapping[str, EnvField]
Reporter = Callable[[Dict[str, EnvError]], None]


class _EnvModel(BaseModel):
    model_config = ConfigDict(extra="ignore", protected_namespaces=())


class CleanedEnv(MappingABC):
    """Validated configuration. Keys are the schema keys."""

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, Any]):
        object.__setattr__(self, "_values", dict(values))

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails, so properties below win.
        try:
            return object.__getattribute__(self, "_values")[name]
        except KeyError:
            raise AttributeError(f"{type(self).__name__!r} has no variable {name!r}") from None

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("CleanedEnv is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError("CleanedEnv is immutable")

    def __repr__(self) -> str:
        return f"CleanedEnv({self._values!r})"

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._values)

    @property
    def environment(self) -> Optional[Environment]:
        return normalize_environment(self._values.get(ENV_VAR))

    @property
    def is_production(self) -> bool:
        return self.environment is Environment.prod

    @property
    def is_test(self) -> bool:
        return self.environment is Environment.test

    @property
    def is_dev(self) -> bool:
        return self.environment is Environment.dev

    @property
    def is_local(self) -> bool:
        return self.environment is Environment.local


def merge_schemas(base: Schema, override: Schema) -> Dict[str, EnvField]:
    """Union of two schemas. Keys present in both take the `override` descriptor."""
    merged = dict(base)
    for key, field in override.items():
        if key in merged:
            logger.debug("Schema key %s overridden by caller descriptor", key)
        merged[key] = field
    return merged


def default_reporter(errors: Dict[str, EnvError]) -> None:
    """Log every failing variable, then raise EnvValidationError."""
    if not errors:
        return
    exc = EnvValidationError(errors)
    logger.error("%s", exc)
    raise exc


def _build_model(schema: Schema, environment: Optional[Environment]) -> Tuple[Type[_EnvModel], Dict[str, str]]:
    """Validation model for `schema` plus its field name -> variable name map."""
    # Dev defaults only apply once NODE_ENV names a non-production environment.
    is_production = environment is None or environment is Environment.prod
    is_test = environment is Environment.test
    names = {f"field_{index}": key for index, key in enumerate(schema)}
    fields = {
        name: schema[key].field_definition(is_production=is_production, is_test=is_test, alias=key)
        for name, key in names.items()
    }
    return create_model("EnvModel", __base__=_EnvModel, **fields), names


def clean_env(
    environ: Mapping[str, str],
    schema: Schema,
    *,
    reporter: Optional[Reporter] = None,
) -> CleanedEnv:
    """
    Validate `environ` against `schema`.

    Parameters:
        environ: Raw variables (usually os.environ); keys outside the schema are ignored
        schema: Variable name -> EnvField
        reporter: Called with {name: EnvError} when validation fails.
            Defaults to default_reporter, which raises EnvValidationError.

    Returns:
        CleanedEnv holding only the schema keys.
    """
    reporter = reporter or default_reporter
    environment = normalize_environment(environ.get(ENV_VAR))
    model, names = _build_model(schema, environment)

    try:
        instance = model.model_validate(dict(environ))
    except ValidationError as err:
        errors: Dict[str, EnvError] = {}
        for detail in err.errors():
            # loc carries the alias, i.e. the variable name.
            key = str(detail["loc"][0])
            # First failure per key is enough to report.
            if key not in errors:
                errors[key] = to_env_error(key, schema[key], detail)
        reporter(errors)
        # A reporter that returns instead of raising still gets no partial result.
        raise EnvValidationError(errors) from err

    return CleanedEnv({key: getattr(instance, name) for name, key in names.items()})


__all__ = [
    "CleanedEnv",
    "clean_env",
    "default_reporter",
    "merge_schemas",
]
