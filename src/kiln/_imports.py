"""Load user objects from ``module:attr`` strings.

Used for parameter producers, the app and the builder named in config.
The module part is first looked up as a file relative to the project root
(``data/users.py`` for ``data.users``), then imported normally.
"""

from __future__ import annotations

import importlib
import importlib.util
import sys
from pathlib import Path

from kiln._errors import ConfigError


def load_object(spec: str, root: Path, *, what: str = "object") -> object:
    """Resolve *spec* (``module:attr``) to the named object.

    Raises:
        ConfigError: If the spec is malformed, the module cannot be loaded,
            or the attribute does not exist.

    """
    module_part, sep, attr = spec.partition(":")
    if not sep or not module_part or not attr:
        msg = f"{what} {spec!r} must have the form 'module:attr'"
        raise ConfigError(msg)

    module = _load_module(module_part, root, spec=spec, what=what)

    obj: object = module
    for name in attr.split("."):
        try:
            obj = getattr(obj, name)
        except AttributeError:
            msg = f"{what} {spec!r}: {attr!r} not found in module {module_part!r}"
            raise ConfigError(msg) from None
    return obj


def _load_module(module_part: str, root: Path, *, spec: str, what: str) -> object:
    py_file = root.joinpath(*module_part.split(".")).with_suffix(".py")
    try:
        if py_file.is_file():
            module_name = f"kiln_user.{module_part}"
            spec_obj = importlib.util.spec_from_file_location(module_name, py_file)
            if spec_obj is None or spec_obj.loader is None:
                msg = f"{what} {spec!r}: failed to load {py_file}"
                raise ConfigError(msg)
            module = importlib.util.module_from_spec(spec_obj)
            sys.modules[module_name] = module
            spec_obj.loader.exec_module(module)
            return module
        return importlib.import_module(module_part)
    except ConfigError:
        raise
    except Exception as exc:
        msg = f"{what} {spec!r}: failed to import {module_part!r}: {exc}"
        raise ConfigError(msg) from exc
