"""FRM Info tool — reports the header and frame sizes of a .frm sprite."""

from frm_toolbox.tools.frm_info.tool import FrmInfoTool

__all__ = ["FrmInfoTool"]
