"""coursecraft - block-based lesson content for courses.

Lessons are stored as an ordered sequence of typed blocks (text, code,
output, explanation, practice) serialized to JSON, with read support for
the older free-form markdown format.
"""

__version__ = "0.1.0"
