"""
Exception hierarchy for curtiz.

Scheduling state lives in plain text that the user edits by hand, so every
component prefers raising one of these over guessing.
"""


class CurtizError(Exception):
    """Base class for all curtiz errors."""
    pass


# =============================================================================
# Parsing
# =============================================================================


class ParseError(CurtizError):
    """Raised when annotated text cannot be turned into content."""
    pass


class MalformedHeaderError(ParseError):
    """Block header is of an unknown kind or has the wrong number of fields."""
    pass


class MalformedBulletError(ParseError):
    """A quiz bullet cannot be understood."""
    pass


class MalformedAnnotationError(ParseError):
    """A recall-model annotation line cannot be understood."""
    pass


# =============================================================================
# Clozes
# =============================================================================


class ClozeError(CurtizError):
    """Raised when a cloze cannot be located or identified."""
    pass


class ClozeNotFoundError(ClozeError):
    """The cloze (with its context) does not occur in the haystack."""
    pass


class AmbiguousClozeError(ClozeError):
    """The cloze (with its context) occurs more than once."""
    pass


class ContextExhaustedError(ClozeError):
    """No context length makes the cloze unique."""
    pass


# =============================================================================
# Extraction and scheduling
# =============================================================================


class SegmentationError(CurtizError):
    """The external morphological analysis or clause segmentation failed."""
    pass


class RefuseToForgetError(CurtizError):
    """Re-extraction would delete a bullet that owns a recall model."""
    pass


class NotLearnedError(CurtizError):
    """A quiz without a recall model was asked to be reviewed."""
    pass


# =============================================================================
# Persistence
# =============================================================================


class WriteConflictError(CurtizError):
    """The backing file changed on disk after it was read."""

    def __init__(self, path, read_mtime_ns: int, current_mtime_ns: int):
        self.path = path
        self.read_mtime_ns = read_mtime_ns
        self.current_mtime_ns = current_mtime_ns
        super().__init__(f"{path} has been modified since it was read, refusing to overwrite it")
