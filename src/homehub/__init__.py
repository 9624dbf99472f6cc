"""
Home Management Hub household package.

The package bundles the JSON document store, the meal/planner/shopping/task domain
modules, notification polling and the GitHub meal publishing proxy.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
