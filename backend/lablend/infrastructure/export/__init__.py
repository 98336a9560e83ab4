from .workbook_exporter import AssetWorkbookExporter

__all__ = ["AssetWorkbookExporter"]
