# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

import importlib

__all__ = ("lazy_import",)


def lazy_import(
    name: str,
    module_map: dict[str, tuple[str, str | None]],
    package: str,
    globs: dict,
) -> object:
    """Registry-based lazy import for module ``__getattr__``.

    Looks up *name* in *module_map*, imports the object, and caches it
    in *globs* so that subsequent access bypasses ``__getattr__``.

    Example::

        _MAP = {
            "Repository": ("repository.repository", "Repository"),
        }

        def __getattr__(name: str):
            return lazy_import(name, _MAP, __name__, globals())
    """
    if name not in module_map:
        raise AttributeError(f"module '{package}' has no attribute '{name}'")
    module_path, import_name = module_map[name]
    pkg = globs.get("__package__") or package.rpartition(".")[0]
    mod = importlib.import_module(f".{module_path}", pkg)
    obj = getattr(mod, import_name or name)
    globs[name] = obj
    return obj
