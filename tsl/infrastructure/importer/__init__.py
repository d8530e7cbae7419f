from .excel_parser import SUPPORTED_EXTENSIONS, ExcelParser

__all__ = ["SUPPORTED_EXTENSIONS", "ExcelParser"]
