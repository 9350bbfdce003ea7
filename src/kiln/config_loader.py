"""Load GenerateConfig from kiln.yaml / kiln.toml if present.

Merges file config with keyword overrides.  Overrides take precedence.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from kiln._errors import ConfigError
from kiln._imports import load_object
from kiln.config import GenerateConfig

# Keys accepted in a config file
_CONFIG_KEYS: frozenset[str] = frozenset({
    "output",
    "static_dir",
    "build_dir",
    "public_path",
    "route_params",
    "routes",
    "app",
    "builder",
    "concurrency",
    "minify",
    "fail_fast",
})


def load_config(root: Path, **overrides: object) -> GenerateConfig:
    """Load GenerateConfig from *root*, optionally merging a config file.

    Looks for kiln.yaml, kiln.yml, or kiln.toml in *root*.  Overrides whose
    value is ``None`` are ignored so CLI flags left unset do not mask the file.

    Raises:
        ConfigError: On a malformed file, an unknown key, or a
            ``route_params`` producer that cannot be imported.

    """
    root = root.resolve()
    file_config = _read_kiln_config(root)
    merged = {**file_config, **{k: v for k, v in overrides.items() if v is not None}}

    if "output" in merged and not isinstance(merged["output"], Path):
        merged["output"] = Path(str(merged["output"]))
    if "routes" in merged:
        merged["routes"] = _normalize_routes(merged["routes"])
    if "route_params" in merged:
        merged["route_params"] = _load_route_params(merged["route_params"], root)

    try:
        return GenerateConfig(root=root, **merged)  # type: ignore[arg-type]
    except TypeError as exc:
        msg = f"Invalid configuration: {exc}"
        raise ConfigError(msg) from exc


def _read_kiln_config(root: Path) -> dict[str, object]:
    """Read kiln config from yaml/toml if present.  Returns empty dict otherwise."""
    for name in ("kiln.yaml", "kiln.yml"):
        path = root / name
        if path.is_file():
            return _parse_yaml(path)
    toml_path = root / "kiln.toml"
    if toml_path.is_file():
        return _parse_toml(toml_path)
    return {}


def _parse_yaml(path: Path) -> dict[str, object]:
    import yaml

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        msg = f"Failed to parse {path}: {exc}"
        raise ConfigError(msg) from exc
    return _flatten_kiln_section(data, path)


def _parse_toml(path: Path) -> dict[str, object]:
    import tomllib

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Failed to parse {path}: {exc}"
        raise ConfigError(msg) from exc
    return _flatten_kiln_section(data, path)


def _flatten_kiln_section(data: object, path: Path) -> dict[str, object]:
    """Extract kiln.* keys into top-level config."""
    if not isinstance(data, dict):
        msg = f"{path} must contain a mapping, got {type(data).__name__}"
        raise ConfigError(msg)

    section = data.get("kiln", data)
    if not isinstance(section, dict):
        msg = f"{path}: 'kiln' section must be a mapping"
        raise ConfigError(msg)

    unknown = sorted(set(section) - _CONFIG_KEYS - {"kiln"})
    if unknown:
        msg = f"{path}: unknown config key(s): {', '.join(unknown)}"
        raise ConfigError(msg)
    return {k: v for k, v in section.items() if k in _CONFIG_KEYS}


def _normalize_routes(routes: object) -> tuple[str, ...]:
    if isinstance(routes, str) or not isinstance(routes, (list, tuple)):
        msg = f"routes must be a list of route patterns, got {type(routes).__name__}"
        raise ConfigError(msg)
    return tuple(str(r) for r in routes)


def _load_route_params(route_params: object, root: Path) -> dict[str, object]:
    """Resolve ``module:attr`` producer strings; leave lists and callables as-is."""
    if not isinstance(route_params, Mapping):
        msg = f"route_params must be a mapping, got {type(route_params).__name__}"
        raise ConfigError(msg)

    result: dict[str, object] = {}
    for route, source in route_params.items():
        if isinstance(source, str):
            source = load_object(source, root, what=f"route_params[{route!r}]")
        result[str(route)] = source
    return result
