"""update-branch: keep pull requests up to date and merge them one at a time."""

__version__ = "0.1.0"
