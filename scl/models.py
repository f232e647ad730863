"""
Typed configuration objects handed to command handlers.

Each leaf of the tree is bound to one of these classes; the dispatcher builds
the instance from the ParseResult with from_result() and the handler never
sees raw tokens.
"""
import dataclasses
import enum
import re


class BuildType(enum.Enum):
    """Kind of build produced by the build command."""
    Debug = "debug"
    Release = "release"


def _camel(name):
    return re.sub(r"_([a-z])", lambda match: match[1].upper(), name)


def _plain(value):
    if isinstance(value, enum.Enum):
        return value.name
    if isinstance(value, tuple | list):
        return [_plain(item) for item in value]
    return value


@dataclasses.dataclass(frozen=True, kw_only=True)
class AppConfig:
    """Global switches every command receives."""
    dry_run: bool = False
    verbose: bool = False

    @classmethod
    def from_result(cls, result, /):
        """
        Fill every field by name from a ParseResult.

        Fields missing from the result keep their declared default; list
        values are handed over as lists.
        """
        values = {}
        for field in dataclasses.fields(cls):
            if field.name in result:
                value = result[field.name]
                values[field.name] = list(value) if isinstance(value, tuple) else value
        return cls(**values)

    def asdict(self):
        """camelCase, JSON-ready mapping of the configuration."""
        return {_camel(field.name): _plain(getattr(self, field.name)) for field in dataclasses.fields(self)}


@dataclasses.dataclass(frozen=True, kw_only=True)
class UserConfig(AppConfig):
    user: str = ""


@dataclasses.dataclass(frozen=True, kw_only=True)
class BootstrapConfig(AppConfig):
    services: list[str] = dataclasses.field(default_factory=list)
    all: bool = False


@dataclasses.dataclass(frozen=True, kw_only=True)
class BuildConfig(AppConfig):
    build_type: BuildType = BuildType.Debug


@dataclasses.dataclass(frozen=True, kw_only=True)
class AppSetConfig(AppConfig):
    key: str | None = None
    value: list[str] = dataclasses.field(default_factory=list)


__all__ = (
    "BuildType",
    "AppConfig",
    "UserConfig",
    "BootstrapConfig",
    "BuildConfig",
    "AppSetConfig",
)
