"""
Report view.

Title block, executive summary, a data table and a horizontal bar chart
scaled to the largest value, with an optional conclusion.
"""

import re
from typing import Any, List, Mapping, Optional

from pydantic import BaseModel, Field

from ..core.elements import Element, format_number, h

DEFAULT_COMPANY_NAME = "Your Company Name"

_WHITESPACE = re.compile(r"\s+")


class DataPoint(BaseModel):
    """One labelled value."""

    label: str = Field(..., description="Label for the data point")
    value: float = Field(..., description="Numeric value for the data point")


class ReportProps(BaseModel):
    """Props accepted by the report view."""

    title: str = Field(..., min_length=1, description="Title of the report")
    date: str = Field(..., min_length=1, description="Date of the report (YYYY-MM-DD format)")
    author: str = Field(..., min_length=1, description="Name of the report author")
    summary: str = Field(..., min_length=1, description="Executive summary of the report")
    data: List[DataPoint] = Field(..., min_length=1, description="Array of data points to include in the report")
    conclusion: Optional[str] = Field(default=None, description="Conclusion or final thoughts for the report")
    companyName: Optional[str] = Field(default=None, description="Name of the company issuing the report")


def grouped_number(value: float) -> str:
    """Number with thousands separators and at most three decimals (``1,234.5``)."""
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.3f}".rstrip("0").rstrip(".")


def bar_width(value: float, max_value: float) -> str:
    if max_value == 0:
        return "0%"
    return f"{format_number(value / max_value * 100)}%"


def _section(title: str, *content: Any) -> Element:
    return h(
        "div",
        {"className": "my-4 p-4 border border-gray-200 rounded"},
        h("h2", {"className": "text-xl font-semibold"}, title),
        *content,
    )


def report_view(props: Mapping[str, Any]) -> Element:
    """
    Build the report element tree.

    Args:
        props: Validated ``ReportProps`` data with at least one data point

    Returns:
        Root element of the report page
    """
    data = props["data"]
    max_value = max(item["value"] for item in data)
    company_name = props.get("companyName", DEFAULT_COMPANY_NAME)
    conclusion = props.get("conclusion") or ""

    table = h(
        "table",
        {"className": "table my-4"},
        h(
            "thead",
            None,
            h(
                "tr",
                {"className": "bg-gray-100"},
                h("th", None, "Metric"),
                h("th", {"className": "text-right"}, "Value"),
            ),
        ),
        h(
            "tbody",
            None,
            [
                h(
                    "tr",
                    {"key": index},
                    h("td", None, item["label"]),
                    h("td", {"className": "text-right"}, grouped_number(item["value"])),
                )
                for index, item in enumerate(data)
            ],
        ),
    )

    bars = [
        h(
            "div",
            {"key": index, "className": "flex items-center gap-2"},
            h("div", {"className": "w-full max-w-xs text-sm"}, item["label"], ":"),
            h(
                "div",
                {"className": "flex-1 h-6 bg-gray-100 rounded"},
                h("div", {"className": "h-6 bg-blue-500 rounded", "style": {"width": bar_width(item["value"], max_value)}}),
            ),
            h("div", {"className": "w-16 text-right text-sm"}, format_number(item["value"])),
        )
        for index, item in enumerate(data)
    ]

    return h(
        "div",
        {"className": "page"},
        h(
            "div",
            {"className": "page-header text-center"},
            h("h1", {"className": "text-2xl font-bold"}, props["title"]),
            h("p", {"className": "text-gray-500"}, company_name),
            h("p", {"className": "text-gray-500"}, "Date: ", props["date"]),
            h("p", {"className": "text-gray-500"}, "Prepared by: ", props["author"]),
        ),
        _section("Executive Summary", h("p", {"className": "my-2"}, props["summary"])),
        h(
            "div",
            {"className": "my-4"},
            h("h2", {"className": "text-xl font-semibold"}, "Data Analysis"),
            table,
            h(
                "div",
                {"className": "my-4 p-4 border border-gray-200 rounded"},
                h("h3", {"className": "font-semibold mb-2"}, "Data Visualization"),
                h("div", {"className": "flex flex-col gap-2"}, bars),
            ),
        ),
        _section("Conclusion", h("p", {"className": "my-2"}, conclusion)) if conclusion else None,
        h(
            "div",
            {"className": "page-footer text-center"},
            h("p", None, f"Confidential - {company_name} - {props['date']}"),
        ),
    )


def report_filename(data: Mapping[str, Any]) -> str:
    title = data.get("title") or "generated"
    return f"Report-{_WHITESPACE.sub('-', str(title))}.pdf"
