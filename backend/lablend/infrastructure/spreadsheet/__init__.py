from .reconciler import SpreadsheetReconciler, associate_images
from .xlsx_package import XlsxPackage

__all__ = ["SpreadsheetReconciler", "associate_images", "XlsxPackage"]
