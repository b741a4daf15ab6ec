"""
Invoice view.

Renders a single-page invoice with a line-item table and a subtotal, tax and
total block. Amounts are shown with two decimals; tax is a flat 10%.
"""

from typing import Any, List, Mapping, Optional

from pydantic import BaseModel, Field

from ..core.elements import Element, format_number, h

TAX_RATE = 0.1

DEFAULT_COMPANY_NAME = "Your Company Name"
DEFAULT_COMPANY_ADDRESS = "123 Business St, City, Country"
DEFAULT_COMPANY_EMAIL = "contact@example.com"
DEFAULT_COMPANY_PHONE = "+1 (555) 123-4567"


class InvoiceItem(BaseModel):
    """One invoice line."""

    description: str = Field(..., description="Description of the item")
    quantity: float = Field(..., description="Quantity of the item")
    unitPrice: float = Field(..., description="Price per unit of the item")


class InvoiceProps(BaseModel):
    """Props accepted by the invoice view."""

    invoiceNumber: str = Field(..., min_length=1, description="Unique identifier for the invoice")
    date: str = Field(..., min_length=1, description="Invoice creation date (YYYY-MM-DD format)")
    dueDate: str = Field(..., min_length=1, description="Payment due date (YYYY-MM-DD format)")
    customerName: str = Field(..., min_length=1, description="Name of the customer")
    customerAddress: str = Field(..., min_length=1, description="Full address of the customer")
    items: List[InvoiceItem] = Field(..., description="Array of items included in the invoice")
    notes: Optional[str] = Field(default=None, description="Additional notes to include on the invoice")
    companyName: Optional[str] = Field(default=None, description="Name of the company issuing the invoice")
    companyAddress: Optional[str] = Field(default=None, description="Address of the company")
    companyEmail: Optional[str] = Field(default=None, description="Email contact for the company")
    companyPhone: Optional[str] = Field(default=None, description="Phone number for the company")


def money(amount: float) -> str:
    return f"${amount:.2f}"


def invoice_totals(items: List[Mapping[str, Any]]) -> Mapping[str, float]:
    """Subtotal, tax and total of the invoice lines."""
    subtotal = sum(item["quantity"] * item["unitPrice"] for item in items)
    tax = subtotal * TAX_RATE
    return {"subtotal": subtotal, "tax": tax, "total": subtotal + tax}


def _summary_row(label: str, amount: float, bold: bool = False) -> Element:
    class_name = "flex justify-between py-2 font-bold" if bold else "flex justify-between py-2"
    return h("div", {"className": class_name}, h("span", None, label), h("span", None, money(amount)))


def _boxed(title: str, *content: Any) -> Element:
    return h(
        "div",
        {"className": "my-4 p-4 border border-gray-200 rounded"},
        h("h3", {"className": "font-semibold"}, title),
        *content,
    )


def invoice_view(props: Mapping[str, Any]) -> Element:
    """
    Build the invoice element tree.

    Args:
        props: Validated ``InvoiceProps`` data; company fields fall back to
            placeholder values

    Returns:
        Root element of the invoice page
    """
    items = props["items"]
    totals = invoice_totals(items)
    notes = props.get("notes") or ""
    company_name = props.get("companyName", DEFAULT_COMPANY_NAME)

    header = h(
        "div",
        {"className": "page-header flex justify-between items-center"},
        h(
            "div",
            None,
            h("h1", {"className": "text-2xl font-bold"}, company_name),
            h("p", {"className": "text-gray-500"}, props.get("companyAddress", DEFAULT_COMPANY_ADDRESS)),
            h("p", {"className": "text-gray-500"}, props.get("companyEmail", DEFAULT_COMPANY_EMAIL)),
            h("p", {"className": "text-gray-500"}, props.get("companyPhone", DEFAULT_COMPANY_PHONE)),
        ),
        h(
            "div",
            {"className": "text-right"},
            h("h2", {"className": "text-xl font-bold"}, "INVOICE"),
            h("p", None, h("strong", None, "Invoice #:"), " ", props["invoiceNumber"]),
            h("p", None, h("strong", None, "Date:"), " ", props["date"]),
            h("p", None, h("strong", None, "Due Date:"), " ", props["dueDate"]),
        ),
    )

    rows = [
        h(
            "tr",
            {"key": index},
            h("td", None, item["description"]),
            h("td", {"className": "text-right"}, format_number(item["quantity"])),
            h("td", {"className": "text-right"}, money(item["unitPrice"])),
            h("td", {"className": "text-right"}, money(item["quantity"] * item["unitPrice"])),
        )
        for index, item in enumerate(items)
    ]

    table = h(
        "table",
        {"className": "table"},
        h(
            "thead",
            None,
            h(
                "tr",
                {"className": "bg-gray-100"},
                h("th", None, "Description"),
                h("th", {"className": "text-right"}, "Quantity"),
                h("th", {"className": "text-right"}, "Unit Price"),
                h("th", {"className": "text-right"}, "Amount"),
            ),
        ),
        h("tbody", None, rows),
    )

    summary = h(
        "div",
        {"className": "flex justify-end my-4"},
        h(
            "div",
            {"className": "w-full max-w-xs"},
            _summary_row("Subtotal:", totals["subtotal"]),
            _summary_row("Tax (10%):", totals["tax"]),
            _summary_row("Total:", totals["total"], bold=True),
        ),
    )

    return h(
        "div",
        {"className": "page"},
        header,
        _boxed(
            "Bill To:",
            h("p", {"className": "font-bold"}, props["customerName"]),
            h("p", None, props["customerAddress"]),
        ),
        table,
        summary,
        _boxed("Notes:", h("p", None, notes)) if notes else None,
        h("div", {"className": "page-footer text-center"}, h("p", None, "Thank you for your business!")),
    )


def invoice_filename(data: Mapping[str, Any]) -> str:
    return f"Invoice-{data.get('invoiceNumber') or 'generated'}.pdf"
