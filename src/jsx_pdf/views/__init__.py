"""
Built-in views.

- invoice: invoice with line items, 10% tax and totals
- report: report with summary, data table and bar chart
"""

from .invoice import InvoiceProps, invoice_view
from .registry import FIXED_TEMPLATES, FixedTemplate, component_docs, get_fixed_template
from .report import ReportProps, report_view

__all__ = [
    "FIXED_TEMPLATES",
    "FixedTemplate",
    "InvoiceProps",
    "ReportProps",
    "component_docs",
    "get_fixed_template",
    "invoice_view",
    "report_view",
]
