# SPDX-License-Identifier: MIT
"""API route modules."""

from . import archives, discovery, modules

__all__ = ["archives", "discovery", "modules"]
