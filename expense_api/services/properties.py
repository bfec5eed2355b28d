"""
Expense API — Property Value Extraction
=========================================

What:  Turns full property values from pages.properties.retrieve into scalars.
Why:   Database queries only return property previews. The full value comes
       from a separate call, and its shape depends on the property type.
How:   One small extractor per tracked property; each returns None when the
       value is missing or not the shape it expects.

Shapes handled:
    Date         {"object": "property_item", "type": "date",
                  "date": {"start": "2024-03-15", ...}}
    Amount       {"object": "property_item", "type": "number", "number": 42.5}
    Description  {"object": "list", "results": [
                     {"type": "title", "title": {"text": {"content": "..."}}}]}
    Formula      {"object": "property_item", "type": "formula",
                  "formula": {"type": "number", "number": 1200}}
"""

from datetime import date
from typing import Any, Callable, Dict, Optional, Union

Number = Union[int, float]


def extract_date(value: Dict[str, Any]) -> Optional[date]:
    """
    Parse the start of a date property into a calendar date.

    Only the leading YYYY-MM-DD is read, so "2024-03-15" and
    "2024-03-15T23:30:00.000-05:00" both give March 15, 2024.
    """
    start = (value.get("date") or {}).get("start")
    if not start:
        return None
    try:
        return date.fromisoformat(start[:10])
    except ValueError:
        return None


def extract_number(value: Dict[str, Any]) -> Optional[Number]:
    return value.get("number")


def extract_title(value: Dict[str, Any]) -> Optional[str]:
    """Plain content of the first rich-text block of a title property."""
    results = value.get("results") or []
    if not results:
        return None
    title = results[0].get("title") or {}
    return (title.get("text") or {}).get("content")


def extract_formula_number(value: Dict[str, Any]) -> Optional[Number]:
    return (value.get("formula") or {}).get("number")


# Tracked expense properties, in the order they are fetched for a record
# when the record does not dictate one. Anything else on the page is dropped.
EXPENSE_PROPERTY_EXTRACTORS: Dict[str, Callable[[Dict[str, Any]], Any]] = {
    "Description": extract_title,
    "Date": extract_date,
    "Amount": extract_number,
}
