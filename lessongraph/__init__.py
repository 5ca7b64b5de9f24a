"""
lessongraph
Validates the front matter of a lesson-based documentation site and
resolves it into a consistent, ordered curriculum graph.
"""

__version__ = "0.1.0"
