"""HTML and plain-text rendering of the dashboard"""

from datetime import datetime
from typing import List, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from money_tracker.config import PACKAGE_DIR
from money_tracker.schemas.dashboard import DashboardView
from money_tracker.schemas.transaction import Transaction, TransactionType
from money_tracker.utils.decimal_utils import format_amount

TEMPLATES_DIR = PACKAGE_DIR / "templates"


def format_date(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d") if value else ""


def transaction_label(transaction: Transaction) -> str:
    return "Sent" if transaction.type == TransactionType.SEND else "Received"


def _build_environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(["html"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["money"] = format_amount
    env.filters["local_date"] = format_date
    env.filters["tx_label"] = transaction_label
    return env


class RenderService:
    """Renders dashboard views through Jinja2 templates"""

    env = _build_environment()

    @classmethod
    def _render(cls, template_name: str, view: DashboardView, **extra) -> str:
        template = cls.env.get_template(template_name)
        return template.render(view=view, currency=view.currency_symbol, **extra)

    @classmethod
    def render_people_table(cls, view: DashboardView) -> str:
        """Rows of the people table"""
        return cls._render("people_table.html", view)

    @classmethod
    def render_transactions(cls, view: DashboardView) -> str:
        """Collapsible per-person transaction groups"""
        return cls._render("transactions.html", view)

    @classmethod
    def render_totals(cls, view: DashboardView) -> str:
        return cls._render("totals.html", view)

    @classmethod
    def render_page(cls, view: DashboardView, title: str = "Money Tracker") -> str:
        """Self-contained HTML snapshot of the whole dashboard"""
        return cls._render(
            "snapshot.html",
            view,
            title=title,
            generated_at=datetime.now().strftime("%Y-%m-%d %H:%M"),
        )

    @staticmethod
    def render_people_text(view: DashboardView) -> str:
        lines: List[str] = ["People"]
        if not view.people:
            lines.append("  No people yet")
        for person in view.people:
            lines.append(f"  {person.name:<24} {format_amount(person.balance, view.currency_symbol):>14}")
        return "\n".join(lines)

    @classmethod
    def render_text(cls, view: DashboardView) -> str:
        """Plain-text dashboard for terminals"""
        currency = view.currency_symbol
        lines: List[str] = [cls.render_people_text(view), ""]

        lines.append("Transactions")
        if not view.groups:
            lines.append("  No transactions yet")
        for group in view.groups:
            marker = "-" if group.expanded else "+"
            lines.append(f"  [{marker}] {group.person_name} ({len(group.transactions)})")
            if not group.expanded:
                continue
            for t in group.transactions:
                status = " (Reversed)" if t.reversed else ""
                description = t.description or "No description"
                lines.append(
                    f"      #{t.id} {transaction_label(t):<8} {format_amount(t.amount, currency):>12}"
                    f"  {description} {format_date(t.date)}{status}".rstrip()
                )

        lines.append("")
        lines.append(
            f"Total sent: {format_amount(view.totals.sent, currency)}  "
            f"Total received: {format_amount(view.totals.received, currency)}  "
            f"Net: {format_amount(view.totals.net, currency)}"
        )
        return "\n".join(lines)
