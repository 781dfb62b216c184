"""Exception hierarchy for the frm-toolbox framework."""


class FrmToolboxError(Exception):
    """Base exception for all frm-toolbox errors."""


class ToolError(FrmToolboxError):
    """Raised when a tool fails while reading or writing files."""


class ValidationError(FrmToolboxError):
    """Raised when parameter validation fails."""


class FormatError(FrmToolboxError):
    """Raised when FRM or PAL data is truncated or malformed."""


class LayoutError(FrmToolboxError):
    """Raised when frames cannot be laid out on a canvas."""


class InvalidDirectionCountError(LayoutError):
    """Raised when the packed composer does not get exactly six directions."""


class EmptyFrameSequenceError(LayoutError):
    """Raised when offsets are requested for a direction without frames."""
