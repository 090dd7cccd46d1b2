"""
Generation options and their optional YAML file form.

A config file lets a build keep per-protocol settings next to the XML:

    artifacts: both
    header_path: wayland
    prefix: zwp_
    includes:
      - wayland-client.h

Command line flags override values read from the file. The role always
comes from the command line, so it is not a file key.
"""

import yaml
from dataclasses import dataclass, field, replace
from typing import List, Optional

from .errors import ConfigError
from .types import ROLE_SERVER, ROLES

ARTIFACTS_HEADER = "header"
ARTIFACTS_SOURCE = "source"
ARTIFACTS_BOTH = "both"
ARTIFACTS = (ARTIFACTS_HEADER, ARTIFACTS_SOURCE, ARTIFACTS_BOTH)

_STRING_KEYS = ("artifacts", "header_path", "prefix")
_KNOWN_KEYS = _STRING_KEYS + ("includes",)


@dataclass
class GenerationOptions:
    """Everything the emitters need besides the protocol model."""
    role: str = ROLE_SERVER
    artifacts: str = ARTIFACTS_BOTH
    header_path: str = ""           # set: includes become <header_path/x.h>
    prefix: str = ""                # wire prefix to strip, overrides wl_/qt_
    includes: List[str] = field(default_factory=list)
    source_path: str = ""           # protocol file named in the provenance line

    @property
    def wants_header(self) -> bool:
        return self.artifacts in (ARTIFACTS_HEADER, ARTIFACTS_BOTH)

    @property
    def wants_source(self) -> bool:
        return self.artifacts in (ARTIFACTS_SOURCE, ARTIFACTS_BOTH)


def validate_options(options: GenerationOptions) -> GenerationOptions:
    """Raise ConfigError unless role and artifacts are in range."""
    if options.role not in ROLES:
        raise ConfigError(
            f"Invalid role {options.role!r}, expected one of {', '.join(ROLES)}")
    if options.artifacts not in ARTIFACTS:
        raise ConfigError(
            f"Invalid artifacts {options.artifacts!r}, "
            f"expected one of {', '.join(ARTIFACTS)}")
    return options


def parse_options_yaml(yaml_str: str,
                       base: Optional[GenerationOptions] = None) -> GenerationOptions:
    """Parse a YAML options file on top of ``base`` (defaults if None).

    Raises:
        ConfigError: If the YAML is invalid or holds unknown/mistyped keys.
    """
    base = base or GenerationOptions()
    if not yaml_str or not yaml_str.strip():
        return validate_options(base)

    try:
        data = yaml.safe_load(yaml_str)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML: {e}")

    if data is None:
        return validate_options(base)
    if not isinstance(data, dict):
        raise ConfigError("YAML root must be a mapping")

    unknown = sorted(str(k) for k in data if k not in _KNOWN_KEYS)
    if unknown:
        raise ConfigError(f"Unknown option(s): {', '.join(unknown)}")

    changes = {}
    for key in _STRING_KEYS:
        if data.get(key) is None:
            continue
        if not isinstance(data[key], str):
            raise ConfigError(f"Option '{key}' must be a string")
        changes[key] = data[key]

    if data.get("includes") is not None:
        includes = data["includes"]
        if isinstance(includes, str):
            includes = [includes]
        if not isinstance(includes, list) or not all(isinstance(i, str) for i in includes):
            raise ConfigError("Option 'includes' must be a list of strings")
        changes["includes"] = list(includes)

    return validate_options(replace(base, **changes))
