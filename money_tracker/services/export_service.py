"""CSV and HTML exports"""

import csv
import io
import logging
from pathlib import Path
from typing import Iterable, Optional

from money_tracker.schemas.dashboard import DashboardView
from money_tracker.schemas.transaction import Transaction
from money_tracker.services.render_service import RenderService

logger = logging.getLogger(__name__)

CSV_COLUMNS = ["id", "person", "type", "amount", "description", "date", "reversed"]


class ExportService:
    """Export the dashboard as CSV or a standalone HTML page"""

    @staticmethod
    def transactions_to_csv(transactions: Iterable[Transaction]) -> str:
        """
        Serialize transactions to CSV.

        Args:
            transactions: Transactions to export

        Returns:
            CSV text with a header row
        """
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(CSV_COLUMNS)
        for t in transactions:
            writer.writerow([
                t.id,
                t.owner_name,
                t.type.value,
                str(t.amount),
                t.description or "",
                t.date.isoformat() if t.date else "",
                "true" if t.reversed else "false",
            ])
        return buffer.getvalue()

    @staticmethod
    def dashboard_to_html(view: DashboardView, title: str = "Money Tracker") -> str:
        return RenderService.render_page(view, title=title)

    @staticmethod
    def write(content: str, output: Optional[Path]) -> Optional[Path]:
        """
        Write export content to a file.

        Args:
            content: Export text
            output: Target path; None means the caller prints it instead

        Returns:
            The path written, or None
        """
        if output is None:
            return None
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(content, encoding="utf-8")
        logger.info("Exported %d bytes to %s", len(content), output)
        return output
