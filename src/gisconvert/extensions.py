"""Toolkit loading.

Built-in toolkits live as modules in ``toolkits/`` and expose a
``setup(registrar)`` function. External packages can contribute more
toolkits through the ``gisconvert.toolkits`` entry-point group.
"""

from __future__ import annotations

import logging
from importlib import import_module
from importlib.metadata import entry_points
from pathlib import Path

from .core.registry import Registrar

logger = logging.getLogger(__name__)


def load_builtin_toolkits(registrar: Registrar):
    """Load built-in toolkits from the toolkits/ directory.

    Modules are imported in name order so the advertised tool list is
    stable between runs.
    """
    base = Path(__file__).resolve().parent / "toolkits"
    if not base.exists():
        return

    for py in sorted(base.glob("*.py")):
        if py.name.startswith("_"):
            continue

        try:
            mod = import_module(f"{__package__}.toolkits.{py.stem}")
        except ImportError as e:
            logger.warning(f"Failed to load builtin toolkit {py.stem}: {e}")
            continue
        if hasattr(mod, "setup"):
            mod.setup(registrar)


def load_entrypoint_plugins(registrar: Registrar, group: str = "gisconvert.toolkits"):
    """Load external toolkits registered through Python entry points.

    Parameters
    ----------
    registrar : Registrar
        Registrar bound to the registry that should receive the tools
    group : str, optional
        The entry point group to search for plugins
    """
    for ep in entry_points(group=group):
        try:
            setup_fn = ep.load()
            setup_fn(registrar)  # Convention: plugins expose setup(registrar)
        except Exception as e:
            logger.warning(f"Failed to load plugin {ep.name}: {e}")
