"""Version-bump advisory check for multi-package workspaces."""
