# Configuration file for Sphinx documentation builder
import os
import sys

sys.path.insert(0, os.path.abspath("../../../"))

from confbind import __version__  # noqa: E402

project = "confbind"
copyright = "2024"
author = "Research Team"
release = __version__

extensions = [
    "sphinx.ext.intersphinx",
    "sphinx.ext.viewcode",
    "sphinx.ext.autosummary",
    "sphinx.ext.autodoc.typehints",
    "sphinx.ext.autodoc",
    "sphinx.ext.napoleon",
]

autodoc_default_options = {
    "members": True,
    "member-order": "bysource",
    "special-members": "__init__",
    "undoc-members": True,
    "show-inheritance": True,
}

intersphinx_mapping = {
    "python": ("https://docs.python.org/3", None),
    "pydantic": ("https://docs.pydantic.dev/latest", None),
}

# Handlers and binders share hook names; document them on the base classes only
autodoc_inherit_docstrings = True


def skip_private_binders(app, what, name, obj, skip, options):
    """Skip the binder callbacks that only the Binder calls."""
    if name in ("_bind_aggregate", "_merge", "_create", "_bind_value"):
        return True
    return skip


def setup(app):
    app.connect("autodoc-skip-member", skip_private_binders)


html_theme = "alabaster"
html_static_path = ["_static"]

suppress_warnings = ["app.add_directive"]
