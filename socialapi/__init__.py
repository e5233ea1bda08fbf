"""Social graph API: accounts, follows, posts and timelines."""

__version__ = "1.0.0"
