"""Import-string resolution for pluggable collaborators.

Used by ``prpl serve --classifier`` to locate a User-Agent classifier
from a ``"module:attribute"`` string.
"""

import importlib
from typing import Any


def resolve_object(import_string: str) -> Any:
    """Resolve ``"module:attribute"`` to the named object.

    Raises:
        ValueError: If the string has no ``:attribute`` part.
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
    """
    module_path, _, attr_name = import_string.partition(":")
    if not module_path or not attr_name:
        msg = f"Expected 'module:attribute', got {import_string!r}"
        raise ValueError(msg)

    module = importlib.import_module(module_path)
    return getattr(module, attr_name)
