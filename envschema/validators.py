"""
Field Descriptors
=================

Declares how each environment variable is parsed and checked.

WHAT:
    Every descriptor is an EnvField: a pydantic annotation plus the metadata
    needed to build a model field (default, dev default, choices, docs).

    Constructors:
    - str_:   plain string
    - num:    int, or a finite float when the value has a fractional part
    - bool_:  true/false, 1/0, yes/no, on/off, t/f, y/n (case-insensitive)
    - url:    absolute URL, returned as the raw string
    - email:  email address (EmailStr rules), returned as the raw string
    - host:   IP address or domain name, returned as the raw string
    - port:   digits only, int in 1..65535
    - json_:  JSON document, returned parsed

    make_validator(parser) builds a constructor for a custom parser.

WHY:
    pydantic does the parsing so every descriptor behaves the same inside a
    cleaned model and when validated on its own.

Usage:
    schema = {
        "PORT": port(default=8080),
        "DATABASE_URL": url(desc="Primary database"),
        "API_KEY": str_(dev_default=test_only("test-key")),
    }
"""

import ipaddress
import re
from dataclasses import dataclass
from typing import Annotated, Any, Callable, Dict, Iterable, Optional, Tuple, Union

from pydantic import (
    AfterValidator,
    AnyUrl,
    BeforeValidator,
    EmailStr,
    Field,
    Json,
    PlainValidator,
    TypeAdapter,
    ValidationError,
    confloat,
    conint,
)
from pydantic.fields import FieldInfo

from .errors import EnvError, EnvMissingError


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


@dataclass(frozen=True)
class _TestOnly:
    value: Any


def test_only(value: Any) -> Any:
    """Dev default that only applies when NODE_ENV resolves to the test environment."""
    return _TestOnly(value)


def _check_choices(choices: Tuple[Any, ...]) -> Callable[[Any], Any]:
    def check(value: Any) -> Any:
        if value not in choices:
            raise EnvError(f"Value {value!r} not in choices {list(choices)}")
        return value

    return check


@dataclass(frozen=True)
class EnvField:
    """
    Descriptor for a single environment variable.

    Attributes:
        kind: Short name of the parser ("str", "port", ...)
        annotation: pydantic annotation that parses the raw string
        default: Value used when the variable is absent
        dev_default: Value used when absent and NODE_ENV is not production
        choices: Allowed parsed values
        desc: What the variable is for
        example: Example value shown in error messages
        docs: Link to further documentation
    """

    kind: str
    annotation: Any
    default: Any = MISSING
    dev_default: Any = MISSING
    choices: Optional[Tuple[Any, ...]] = None
    desc: Optional[str] = None
    example: Optional[str] = None
    docs: Optional[str] = None

    @property
    def full_annotation(self) -> Any:
        if self.choices is None:
            return self.annotation
        return Annotated[self.annotation, AfterValidator(_check_choices(self.choices))]

    def resolve_default(self, is_production: bool = False, is_test: bool = False) -> Any:
        """Effective default for the given environment, or MISSING."""
        if self.default is not MISSING:
            return self.default
        if isinstance(self.dev_default, _TestOnly):
            return self.dev_default.value if is_test else MISSING
        if self.dev_default is not MISSING and not is_production:
            return self.dev_default
        return MISSING

    def is_required(self, is_production: bool = False, is_test: bool = False) -> bool:
        return self.resolve_default(is_production, is_test) is MISSING

    def describe(self) -> str:
        parts = []
        if self.desc:
            parts.append(f" ({self.desc})")
        if self.example:
            parts.append(f' e.g. "{self.example}"')
        if self.docs:
            parts.append(f". See {self.docs}")
        return "".join(parts)

    def field_definition(
        self,
        is_production: bool = False,
        is_test: bool = False,
        alias: Optional[str] = None,
    ) -> Tuple[Any, FieldInfo]:
        """(annotation, FieldInfo) pair for pydantic.create_model.

        alias is the environment variable name read from the input.
        """
        default = self.resolve_default(is_production, is_test)
        info = Field(
            default=... if default is MISSING else default,
            alias=alias,
            description=self.desc,
            examples=[self.example] if self.example is not None else None,
        )
        return self.full_annotation, info

    def validate(self, raw: Any, name: str = "value") -> Any:
        """Parse one raw value, raising EnvError on failure."""
        try:
            return TypeAdapter(self.full_annotation).validate_python(raw)
        except ValidationError as err:
            exc = to_env_error(name, self, err.errors()[0])
            # Keep the parser's own exception as the cause when there is one.
            raise exc from (exc.__cause__ or err)


def to_env_error(name: str, field: EnvField, detail: Dict[str, Any]) -> EnvError:
    """Translate one pydantic error detail into EnvError / EnvMissingError."""
    if detail.get("type") == "missing":
        return EnvMissingError(f'Missing required environment variable "{name}"{field.describe()}')
    original = (detail.get("ctx") or {}).get("error")
    if isinstance(original, EnvError):
        return original
    return EnvError(f'Invalid {field.kind} value for "{name}": {detail.get("msg")}')


def _field_constructor(kind: str, annotation: Any) -> Callable[..., EnvField]:
    def build(
        *,
        default: Any = MISSING,
        dev_default: Any = MISSING,
        choices: Optional[Iterable[Any]] = None,
        desc: Optional[str] = None,
        example: Optional[str] = None,
        docs: Optional[str] = None,
    ) -> EnvField:
        return EnvField(
            kind=kind,
            annotation=annotation,
            default=default,
            dev_default=dev_default,
            choices=tuple(choices) if choices is not None else None,
            desc=desc,
            example=example,
            docs=docs,
        )

    build.__name__ = kind
    build.__qualname__ = kind
    return build


def make_validator(parser: Callable[[Any], Any], kind: str = "custom") -> Callable[..., EnvField]:
    """Build a field constructor around parser(raw) -> value.

    Any exception the parser raises is reported as an EnvError for the
    variable being parsed.
    """

    def parse(raw: Any) -> Any:
        try:
            return parser(raw)
        except EnvError:
            raise
        except Exception as err:
            raise EnvError(f"Invalid {kind} value: {err}") from err

    return _field_constructor(kind, Annotated[Any, PlainValidator(parse)])


# ============================================================================
# Built-in parsers
# ============================================================================

_URL_ADAPTER = TypeAdapter(AnyUrl)
_EMAIL_ADAPTER = TypeAdapter(EmailStr)

_DOMAIN_RE = re.compile(
    r"^(?=.{1,253}\.?$)"
    r"[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
    r"(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)*\.?$"
)
_DIGITS_RE = re.compile(r"[0-9]+")


def _check_url(value: str) -> str:
    try:
        _URL_ADAPTER.validate_python(value)
    except ValidationError as err:
        raise EnvError(f"Invalid url: {value!r}") from err
    return value


def _check_email(value: str) -> str:
    try:
        _EMAIL_ADAPTER.validate_python(value)
    except ValidationError as err:
        raise EnvError(f"Invalid email address: {value!r}") from err
    return value


def _check_host(value: str) -> str:
    try:
        ipaddress.ip_address(value)
        return value
    except ValueError:
        pass
    if not _DOMAIN_RE.match(value):
        raise EnvError(f"Invalid host (domain or ip): {value!r}")
    return value


def _parse_port(value: Any) -> Any:
    # Digits only: "8080.0", "+80" and " 80" are not ports.
    if isinstance(value, str):
        if not _DIGITS_RE.fullmatch(value):
            raise EnvError(f"Invalid port: {value!r}")
        return int(value)
    return value


str_ = _field_constructor("str", str)
num = _field_constructor("num", Union[int, confloat(allow_inf_nan=False)])
bool_ = _field_constructor("bool", bool)
url = _field_constructor("url", Annotated[str, AfterValidator(_check_url)])
email = _field_constructor("email", Annotated[str, AfterValidator(_check_email)])
host = _field_constructor("host", Annotated[str, AfterValidator(_check_host)])
port = _field_constructor("port", Annotated[conint(ge=1, le=65535, strict=True), BeforeValidator(_parse_port)])
json_ = _field_constructor("json", Json[Any])
