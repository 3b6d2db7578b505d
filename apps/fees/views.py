# fees/views.py

from django.shortcuts import get_object_or_404
from django.contrib.auth.decorators import login_required
from django.http import HttpResponse, JsonResponse
from datetime import datetime
import logging

# Excel imports
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side

from academics.models import SchoolClass
from core.utils import resolve_academic_year, format_money, get_currency_prefix
from .stats import get_class_balance_report
from .utils import get_balance_status_label

logger = logging.getLogger(__name__)


# =============================================================================
# EXPORT VIEWS
# =============================================================================

@login_required
def export_class_balances_excel(request, class_id):
    """Export every student's fee balance in a class to Excel"""
    school_class = get_object_or_404(SchoolClass, pk=class_id)
    academic_year = resolve_academic_year(request.GET.get('year'))
    if academic_year is None:
        return JsonResponse(
            {'success': False, 'error': 'No academic year selected or active.', 'code': 'no_academic_year'},
            status=400
        )

    report = get_class_balance_report(school_class, academic_year)
    currency = get_currency_prefix()

    wb = Workbook()
    ws = wb.active
    ws.title = "Fee Balances"

    header_fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
    header_font = Font(bold=True, color="FFFFFF", size=12)
    header_alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)

    border_style = Border(
        left=Side(style='thin', color='000000'),
        right=Side(style='thin', color='000000'),
        top=Side(style='thin', color='000000'),
        bottom=Side(style='thin', color='000000')
    )

    # Title row
    ws.merge_cells('A1:G1')
    title_cell = ws['A1']
    title_cell.value = f"Fee Balances - {school_class.name} ({academic_year.name})"
    title_cell.font = Font(bold=True, size=16, color="4472C4")
    title_cell.alignment = Alignment(horizontal="center", vertical="center")

    ws.merge_cells('A2:G2')
    subtitle_cell = ws['A2']
    structure = report['fee_structure']
    subtitle = f"Generated on: {datetime.now().strftime('%Y-%m-%d %H:%M')}"
    if structure is not None:
        subtitle += f" | Total fee: {format_money(structure.total_fee)}"
    else:
        subtitle += " | No fee structure defined for this class"
    subtitle_cell.value = subtitle
    subtitle_cell.font = Font(size=10, italic=True)
    subtitle_cell.alignment = Alignment(horizontal="center")

    ws.append([])

    headers = [
        '#', 'Admission No.', 'Student Name',
        f'Total Fee ({currency})', f'Paid ({currency})', f'Balance ({currency})', 'Status'
    ]
    ws.append(headers)
    for cell in ws[4]:
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = header_alignment
        cell.border = border_style

    for idx, row in enumerate(report['rows'], start=1):
        ws.append([
            idx,
            row['admission_number'],
            row['student_name'],
            float(row['total_fee']),
            float(row['total_paid']),
            float(row['balance']),
            get_balance_status_label(row),
        ])
        current_row = ws.max_row
        for cell in ws[current_row]:
            cell.border = border_style
            cell.alignment = Alignment(vertical="center")
        for cell in ws[current_row][3:6]:
            cell.number_format = '#,##0'

    column_widths = {'A': 5, 'B': 16, 'C': 30, 'D': 16, 'E': 16, 'F': 16, 'G': 18}
    for col, width in column_widths.items():
        ws.column_dimensions[col].width = width

    summary_row = ws.max_row + 2
    ws[f'A{summary_row}'] = 'Students:'
    ws[f'C{summary_row}'] = len(report['rows'])
    for offset, status in enumerate(['SETTLED', 'PARTIAL', 'UNPAID', 'NO_STRUCTURE'], start=1):
        ws[f'A{summary_row + offset}'] = f"{status.replace('_', ' ').title()}:"
        ws[f'C{summary_row + offset}'] = report['counts'].get(status, 0)
    for offset in range(5):
        ws[f'A{summary_row + offset}'].font = Font(bold=True)

    ws.freeze_panes = 'A5'

    response = HttpResponse(
        content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    )
    filename = f"fee_balances_{school_class.name.replace(' ', '_')}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.xlsx"
    response['Content-Disposition'] = f'attachment; filename="{filename}"'

    wb.save(response)
    logger.info(f"Exported fee balances for {school_class.name} ({academic_year.name})")
    return response
