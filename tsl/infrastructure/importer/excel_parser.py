"""
Excel Parser - Universal Excel/CSV Customer Import
===================================================

Parses any Excel or CSV file and auto-detects customer columns.
Supports .xlsx, .xls, and .csv formats, read from an uploaded buffer.
"""

import io
import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pandas as pd

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = ['.xlsx', '.xls', '.csv']

# Common column name variations for auto-detection
NAME_PATTERNS = ['name', 'customer', 'client', 'full_name', 'fullname', 'customer_name', 'client_name']
PHONE_PATTERNS = ['phone', 'mobile', 'cell', 'telephone', 'contact', 'number', 'phone_number', 'mobile_number', 'whatsapp']
VISIT_PATTERNS = ['last_visit', 'last visit', 'lastvisit', 'visit', 'visit_date', 'date']


class ExcelParser:
    """
    Universal Excel/CSV parser with auto-detection of customer columns.

    Usage:
        parser = ExcelParser()
        customers, columns = parser.parse_bytes(upload_bytes, "customers.xlsx")
        # customers: [{"name": "John", "phone": "923001234567", "last_visit_date": date(...)}, ...]
    """

    def __init__(self):
        self.detected_columns: Dict[str, Optional[str]] = {}

    def parse_bytes(self, content: bytes, filename: str) -> Tuple[List[Dict], Dict[str, Optional[str]]]:
        """
        Parse an uploaded file kept in memory (no temp file).

        Returns:
            Tuple of (customers list, detected column mapping)
        """
        ext = Path(filename).suffix.lower()
        if ext not in SUPPORTED_EXTENSIONS:
            raise ValueError(f"Unsupported file format: {ext or 'none'}. Use .xlsx, .xls, or .csv")

        try:
            if ext == '.csv':
                df = pd.read_csv(io.BytesIO(content), dtype=str)
            else:
                df = pd.read_excel(io.BytesIO(content), dtype=str)
        except Exception as e:
            logger.error(f"Failed to read file: {e}")
            raise ValueError(f"Could not read file: {e}") from e

        # Clean column names
        df.columns = df.columns.astype(str).str.strip().str.lower()

        # Phone first: "contact_name" must not be taken as the phone column
        phone_col = self._find_column(df.columns, PHONE_PATTERNS)
        remaining = [c for c in df.columns if c != phone_col]
        name_col = self._find_column(remaining, NAME_PATTERNS)
        visit_col = self._find_column([c for c in remaining if c != name_col], VISIT_PATTERNS)

        self.detected_columns = {
            'name': name_col,
            'phone': phone_col,
            'last_visit_date': visit_col,
        }
        logger.info(f"Detected columns: {self.detected_columns}")

        if not phone_col:
            raise ValueError("Could not detect 'Phone' column. Please ensure your file has a column with phone numbers.")

        visits = (
            pd.to_datetime(df[visit_col], errors='coerce')
            if visit_col else pd.Series([pd.NaT] * len(df), index=df.index)
        )

        customers = []
        for index, row in df.iterrows():
            phone = self._clean_phone(str(row.get(phone_col, '')))
            if not phone:
                continue

            name = str(row.get(name_col, '')).strip() if name_col else ''
            if name.lower() == 'nan':
                name = ''

            visit = visits.loc[index]
            customers.append({
                'name': name,
                'phone': phone,
                'last_visit_date': None if pd.isna(visit) else visit.date(),
            })

        logger.info(f"Parsed {len(customers)} customers from {len(df)} rows")
        return customers, self.detected_columns

    def _find_column(self, columns, patterns: List[str]) -> Optional[str]:
        """Find column matching any of the patterns."""
        for col in columns:
            col_lower = col.lower().strip()
            for pattern in patterns:
                if pattern in col_lower:
                    return col
        return None

    def _clean_phone(self, phone: str) -> str:
        """
        Clean and normalize phone number.
        Removes spaces, dashes, + signs and leading 00.
        """
        if not phone or phone.lower() == 'nan':
            return ''

        # Remove all non-digit characters except leading +
        cleaned = re.sub(r'[^\d+]', '', phone.strip())

        if cleaned.startswith('+'):
            cleaned = cleaned[1:]

        # 00 international prefix
        if cleaned.startswith('00'):
            cleaned = cleaned[2:]

        return cleaned
