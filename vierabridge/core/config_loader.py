"""Loading and structural validation of the YAML device configuration."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from vierabridge.core.errors import ConfigLoadError, ConfigValidationError
from vierabridge.core.model import DeviceDeclaration

CONFIG_FILE_NAME = "config.yaml"
LOGGER = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


# Unquoted MACs such as 11:22:33:44:55:66 would otherwise resolve as base-60 ints.
UniqueKeyLoader.yaml_implicit_resolvers = {
    key: list(value) for key, value in yaml.SafeLoader.yaml_implicit_resolvers.items()
}

for first_char, mappings in list(UniqueKeyLoader.yaml_implicit_resolvers.items()):
    UniqueKeyLoader.yaml_implicit_resolvers[first_char] = [
        (tag, regexp)
        for tag, regexp in mappings
        if tag not in {"tag:yaml.org,2002:int", "tag:yaml.org,2002:float"}
    ]


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise ConfigValidationError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


@dataclass(frozen=True)
class LoadedConfig:
    path: Path
    devices: tuple[DeviceDeclaration, ...]


def default_config_path() -> Path:
    override = os.environ.get("VIERABRIDGE_CONFIG")
    if override:
        return Path(override)
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return xdg_config / "vierabridge" / CONFIG_FILE_NAME


def _load_schema_validators() -> tuple[Any, Any]:
    schema_text = resources.files("vierabridge.schemas").joinpath("config.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema), validator_cls(schema["$defs"]["tv"])


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigLoadError(f"Could not read config file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise ConfigValidationError(f"Invalid YAML in {path}: {exc}") from exc

    if loaded is None:
        return {"tvs": []}
    if not isinstance(loaded, dict):
        raise ConfigValidationError(f"Config file {path} must contain a mapping at root")
    return loaded


def _describe(error: ValidationError) -> str:
    path = ".".join(str(p) for p in error.path)
    return f"{path}: {error.message}" if path else error.message


def parse_config(doc: dict[str, Any], source: Path | str = "<config>") -> tuple[DeviceDeclaration, ...]:
    """Turn a config document into device declarations.

    Only the document shape is fatal. A malformed ``tvs`` item becomes a
    declaration carrying its problems, which setup rejects for that device
    alone.
    """
    root_validator, tv_validator = _load_schema_validators()
    try:
        root_validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise ConfigValidationError(f"Schema validation failed for {source}{where}: {exc.message}") from exc

    devices: list[DeviceDeclaration] = []
    for index, entry in enumerate(doc["tvs"]):
        problems = tuple(sorted(_describe(error) for error in tv_validator.iter_errors(entry)))
        if problems:
            LOGGER.debug("tvs.%d in %s is malformed: %s", index, source, "; ".join(problems))
            devices.append(DeviceDeclaration.rejected(entry, problems, f"tvs.{index}"))
        else:
            devices.append(DeviceDeclaration.from_dict(entry))
    return tuple(devices)


def load_config(path: Path | str | None = None) -> LoadedConfig:
    config_path = Path(path) if path is not None else default_config_path()
    devices = parse_config(_read_yaml(config_path), config_path)
    if not devices:
        LOGGER.warning("No TVs declared in %s", config_path)
    return LoadedConfig(path=config_path, devices=devices)
