from .reader import WorkbookReadError, frame_to_grid, read_workbook

__all__ = ["WorkbookReadError", "frame_to_grid", "read_workbook"]
