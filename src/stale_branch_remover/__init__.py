"""Stale git branch removal tool.

Features:
- Find local branches with no matching remote-tracking branch
- Skip the current branch and branches with pending changes
- Interactive confirmation before deletion
- Always return to the originally checked-out branch
"""

__version__ = "0.1.0"
