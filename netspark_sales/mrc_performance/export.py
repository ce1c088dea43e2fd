# netspark_sales/mrc_performance/export.py
"""
CSV and Excel Export for MRC Performance

- CSV of the filtered individual sales list (Month,Seller,MRC,Type)
- Formatted Excel report with summary, monthly trend, leaderboard and
  sales sheets

Uses openpyxl for formatting capabilities.
"""

import logging
from datetime import datetime
from io import BytesIO
from typing import Dict, Optional

import pandas as pd

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, Border, Side, PatternFill
from openpyxl.utils import get_column_letter

from .constants import CSV_HEADER, EXCEL_STYLES
from .formatters import format_csv_amount, format_currency

logger = logging.getLogger(__name__)


# =============================================================================
# CSV
# =============================================================================

def sales_to_csv(sales_df: pd.DataFrame) -> str:
    """
    Individual sales as CSV text.

    Header Month,Seller,MRC,Type then one line per row in the given order.
    MRC is the recorded value with exactly two decimals.

    Args:
        sales_df: Filtered rows from the individual sales list

    Returns:
        CSV string ("\\n" line endings)
    """
    sales_df = sales_df.reset_index(drop=True)
    export_df = pd.DataFrame({
        'Month': sales_df['month'].astype(str),
        'Seller': sales_df['seller'].astype(str),
        'MRC': [format_csv_amount(v) for v in sales_df['mrc']],
        'Type': sales_df['type'].astype(str),
    }, columns=CSV_HEADER)

    logger.info(f"CSV export: {len(export_df)} rows")
    return export_df.to_csv(index=False, lineterminator="\n")


# =============================================================================
# EXCEL
# =============================================================================

class MRCExport:
    """
    Excel report generator for the MRC dashboards.

    Usage:
        exporter = MRCExport()
        excel_bytes = exporter.create_report(
            overview=overview,
            monthly_df=trend_df,
            leaderboard_df=leaderboard_df,
            filters={'reference_date': date.today()}
        )

        st.download_button(
            label="Download Report",
            data=excel_bytes,
            file_name="mrc_performance.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
    """

    def __init__(self):
        """Initialize with default styles."""
        self.wb = None
        self._init_styles()

    def _init_styles(self):
        """Initialize reusable styles."""
        self.header_fill = PatternFill(
            start_color=EXCEL_STYLES['header_fill_color'],
            end_color=EXCEL_STYLES['header_fill_color'],
            fill_type='solid'
        )

        self.header_font = Font(
            bold=True,
            color=EXCEL_STYLES['header_font_color'],
            size=11
        )

        self.title_font = Font(bold=True, size=16)
        self.subtitle_font = Font(bold=True, size=12)

        thin_border = Side(style='thin', color='000000')
        self.cell_border = Border(
            left=thin_border,
            right=thin_border,
            top=thin_border,
            bottom=thin_border
        )

        self.center_align = Alignment(horizontal='center', vertical='center')
        self.currency_format = EXCEL_STYLES['currency_format']

    # =========================================================================
    # MAIN EXPORT METHOD
    # =========================================================================

    def create_report(
        self,
        overview: Dict,
        monthly_df: pd.DataFrame,
        leaderboard_df: pd.DataFrame,
        filters: Dict,
        sales_df: pd.DataFrame = None
    ) -> BytesIO:
        """
        Create formatted Excel report with multiple sheets.

        Args:
            overview: Output of MRCMetrics.calculate_overview_metrics
            monthly_df: month, wireline, wireless, total
            leaderboard_df: seller, total, rank
            filters: Report settings shown on the summary sheet
            sales_df: Optional individual sales rows

        Returns:
            BytesIO containing Excel file
        """
        self.wb = Workbook()

        self._create_summary_sheet(overview, filters)
        self._write_table(
            "Monthly Trend",
            monthly_df,
            {'month': 'Month', 'wireline': 'Wireline MRC', 'wireless': 'Wireless MRC', 'total': 'Total MRC'},
            currency_cols={'wireline', 'wireless', 'total'}
        )
        self._write_table(
            "Seller Ranking",
            leaderboard_df,
            {'rank': 'Rank', 'seller': 'Seller', 'total': 'Total MRC'},
            currency_cols={'total'}
        )

        if sales_df is not None and not sales_df.empty:
            self._write_table(
                "Individual Sales",
                sales_df,
                {'month': 'Month', 'seller': 'Seller', 'type': 'Type', 'mrc': 'MRC',
                 'effective_mrc': 'Effective MRC', 'customer': 'Customer'},
                currency_cols={'mrc', 'effective_mrc'}
            )

        output = BytesIO()
        self.wb.save(output)
        output.seek(0)

        logger.info("Excel report created successfully")
        return output

    # =========================================================================
    # SHEETS
    # =========================================================================

    def _create_summary_sheet(self, overview: Dict, filters: Dict):
        """Cover page with headline totals."""
        ws = self.wb.active
        ws.title = "Summary"

        row = 1
        ws.cell(row=row, column=1, value="MRC Performance Report")
        ws.cell(row=row, column=1).font = self.title_font
        ws.merge_cells(start_row=row, start_column=1, end_row=row, end_column=3)
        row += 2

        ws.cell(row=row, column=1, value="As of:")
        ws.cell(row=row, column=2, value=str(filters.get('reference_date', '')))
        row += 1

        ws.cell(row=row, column=1, value="Generated:")
        ws.cell(row=row, column=2, value=datetime.now().strftime('%Y-%m-%d %H:%M'))
        row += 2

        ws.cell(row=row, column=1, value="Key Figures")
        ws.cell(row=row, column=1).font = self.subtitle_font
        row += 1

        kpi_rows = [
            ("YTD MRC", format_currency(overview.get('ytd', 0))),
            ("MTD MRC", format_currency(overview.get('mtd', 0))),
            ("Records (YTD)", f"{overview.get('ytd_record_count', 0):,}"),
            ("Upgrade rule", "Upgrades count as $15.00 MRC"),
        ]

        for label, value in kpi_rows:
            ws.cell(row=row, column=1, value=label)
            ws.cell(row=row, column=2, value=value)
            row += 1

        ws.column_dimensions['A'].width = 20
        ws.column_dimensions['B'].width = 30

    def _write_table(
        self,
        title: str,
        df: pd.DataFrame,
        columns: Dict[str, str],
        currency_cols: Optional[set] = None
    ):
        """Write selected columns with a styled header row."""
        ws = self.wb.create_sheet(title)
        currency_cols = currency_cols or set()
        present = [c for c in columns if c in df.columns]

        for col_idx, col in enumerate(present, start=1):
            cell = ws.cell(row=1, column=col_idx, value=columns[col])
            cell.fill = self.header_fill
            cell.font = self.header_font
            cell.alignment = self.center_align
            cell.border = self.cell_border
            ws.column_dimensions[get_column_letter(col_idx)].width = max(14, len(columns[col]) + 4)

        for row_idx, record in enumerate(df[present].itertuples(index=False), start=2):
            for col_idx, (col, value) in enumerate(zip(present, record), start=1):
                if pd.isna(value):
                    value = None
                elif hasattr(value, 'item'):
                    value = value.item()
                cell = ws.cell(row=row_idx, column=col_idx, value=value)
                cell.border = self.cell_border
                if col in currency_cols:
                    cell.number_format = self.currency_format

        ws.freeze_panes = 'A2'
