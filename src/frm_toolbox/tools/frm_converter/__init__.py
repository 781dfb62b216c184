"""FRM Converter tool — renders Fallout .frm sprites as PNG or animated PNG."""

from frm_toolbox.tools.frm_converter.tool import FrmConverterTool

__all__ = ["FrmConverterTool"]
