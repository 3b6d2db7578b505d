# academics/views.py

from django.shortcuts import get_object_or_404
from django.contrib.auth.decorators import login_required
from django.http import HttpResponse, JsonResponse
from datetime import datetime
from io import BytesIO
import logging

# Excel imports
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side

# PDF imports
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.enums import TA_CENTER

from .models import SchoolClass
from .services import LeaderboardService
from .stats import get_student_report_summary
from .utils import validate_term, get_term_display
from students.models import Student
from core.utils import parse_filters, resolve_academic_year

logger = logging.getLogger(__name__)


def _export_scope(request):
    filters = parse_filters(request, ['term', 'year'])
    term = filters['term'] or 'first'
    is_valid, error = validate_term(term)
    if not is_valid:
        return None, None, JsonResponse({'success': False, 'error': error, 'code': 'invalid_term'}, status=400)

    academic_year = resolve_academic_year(filters['year'])
    if academic_year is None:
        return None, None, JsonResponse(
            {'success': False, 'error': 'No academic year selected or active.', 'code': 'no_academic_year'},
            status=400
        )
    return term, academic_year, None


# =============================================================================
# EXPORT VIEWS
# =============================================================================

@login_required
def export_class_leaderboard_excel(request, class_id):
    """Export a class leaderboard to Excel"""
    school_class = get_object_or_404(SchoolClass, pk=class_id)
    term, academic_year, error_response = _export_scope(request)
    if error_response:
        return error_response

    leaderboard = LeaderboardService.build_class_leaderboard(school_class, term, academic_year)

    wb = Workbook()
    ws = wb.active
    ws.title = "Leaderboard"

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
    ws.merge_cells('A1:F1')
    title_cell = ws['A1']
    title_cell.value = f"{school_class.name} Leaderboard - {get_term_display(term)} {academic_year.name}"
    title_cell.font = Font(bold=True, size=16, color="4472C4")
    title_cell.alignment = Alignment(horizontal="center", vertical="center")

    ws.merge_cells('A2:F2')
    subtitle_cell = ws['A2']
    subtitle_cell.value = f"Generated on: {datetime.now().strftime('%Y-%m-%d %H:%M')}"
    subtitle_cell.font = Font(size=10, italic=True)
    subtitle_cell.alignment = Alignment(horizontal="center")

    ws.append([])

    headers = ['Rank', 'Admission No.', 'Student Name', 'Subjects', 'Total Score', 'Average (%)']
    ws.append(headers)
    for cell in ws[4]:
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = header_alignment
        cell.border = border_style

    for entry in leaderboard['entries']:
        ws.append([
            entry['rank'],
            entry['admission_number'],
            entry['student_name'],
            entry['subject_count'],
            entry['total_score'],
            entry['average'],
        ])
        current_row = ws.max_row
        for cell in ws[current_row]:
            cell.border = border_style
            cell.alignment = Alignment(vertical="center")
        ws.cell(row=current_row, column=1).alignment = Alignment(horizontal="center", vertical="center")

    column_widths = {'A': 8, 'B': 16, 'C': 30, 'D': 10, 'E': 12, 'F': 12}
    for col, width in column_widths.items():
        ws.column_dimensions[col].width = width

    summary_row = ws.max_row + 2
    ws[f'A{summary_row}'] = 'Students ranked:'
    ws[f'C{summary_row}'] = len(leaderboard['entries'])
    ws[f'A{summary_row}'].font = Font(bold=True)
    if leaderboard['warnings']:
        ws[f'A{summary_row + 1}'] = 'Excluded scores:'
        ws[f'C{summary_row + 1}'] = len(leaderboard['warnings'])
        ws[f'A{summary_row + 1}'].font = Font(bold=True)

    ws.freeze_panes = 'A5'

    response = HttpResponse(
        content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    )
    filename = f"leaderboard_{school_class.name.replace(' ', '_')}_{term}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.xlsx"
    response['Content-Disposition'] = f'attachment; filename="{filename}"'

    wb.save(response)
    return response


@login_required
def export_report_card_pdf(request, student_id):
    """Export a student's term report card to PDF"""
    student = get_object_or_404(Student.objects.select_related('school_class'), pk=student_id)
    term, academic_year, error_response = _export_scope(request)
    if error_response:
        return error_response

    report = get_student_report_summary(student, term, academic_year)

    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=40,
        leftMargin=40,
        topMargin=40,
        bottomMargin=30,
    )

    elements = []

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        'CustomTitle',
        parent=styles['Heading1'],
        fontSize=22,
        textColor=colors.HexColor('#4472C4'),
        spaceAfter=12,
        alignment=TA_CENTER,
    )
    subtitle_style = ParagraphStyle(
        'CustomSubtitle',
        parent=styles['Normal'],
        fontSize=10,
        textColor=colors.grey,
        spaceAfter=20,
        alignment=TA_CENTER,
    )

    elements.append(Paragraph("Report Card", title_style))
    elements.append(Paragraph(
        f"{report['term_display']} | {report['academic_year']} | "
        f"Generated on: {datetime.now().strftime('%Y-%m-%d')}",
        subtitle_style
    ))

    details = [
        ['Student:', report['student_name'], 'Admission No.:', report['admission_number']],
        ['Class:', report['class_name'] or 'Not assigned', 'Position:',
         f"{report['position']} of {report['class_size']}" if report['position'] else '-'],
    ]
    details_table = Table(details, colWidths=[1 * inch, 2.3 * inch, 1.2 * inch, 2 * inch])
    details_table.setStyle(TableStyle([
        ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
        ('FONTNAME', (2, 0), (2, -1), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 10),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
    ]))
    elements.append(details_table)
    elements.append(Spacer(1, 0.25 * inch))

    data = [['#', 'Subject', 'Code', 'Score (%)', 'Remarks']]
    for idx, subject in enumerate(report['subjects'], start=1):
        data.append([
            str(idx),
            subject['subject_name'][:35],
            subject['subject_code'],
            str(subject['score']),
            (subject['remarks'] or '')[:40],
        ])

    table = Table(data, colWidths=[0.4 * inch, 2.4 * inch, 0.8 * inch, 0.9 * inch, 2.2 * inch])
    table.setStyle(TableStyle([
        # Header
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#4472C4')),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('ALIGN', (0, 0), (-1, 0), 'CENTER'),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, 0), 10),
        ('BOTTOMPADDING', (0, 0), (-1, 0), 10),

        # Data rows
        ('FONTNAME', (0, 1), (-1, -1), 'Helvetica'),
        ('FONTSIZE', (0, 1), (-1, -1), 9),
        ('ALIGN', (0, 1), (0, -1), 'CENTER'),
        ('ALIGN', (3, 1), (3, -1), 'CENTER'),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#F5F5F5')]),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
    ]))
    elements.append(table)

    elements.append(Spacer(1, 0.3 * inch))
    summary_text = f"""
    <b>Summary:</b><br/>
    Subjects graded: {report['subject_count']}<br/>
    Total score: {report['total_score']}<br/>
    Average score: {report['average']}%
    """
    elements.append(Paragraph(summary_text, styles['Normal']))

    doc.build(elements)

    pdf = buffer.getvalue()
    buffer.close()

    response = HttpResponse(content_type='application/pdf')
    filename = f"report_card_{student.admission_number}_{term}_{academic_year.name}.pdf"
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    response.write(pdf)

    logger.info(f"Exported {term} term report card for {student.full_name}")
    return response
