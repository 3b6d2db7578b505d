# academics/ajax_views.py

from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.contrib.auth.decorators import login_required
from django.views.decorators.http import require_GET, require_POST
from django.core.exceptions import ValidationError
import logging

from .models import SchoolClass
from .services import LeaderboardService, ReportCardService
from .stats import get_student_report_summary
from .forms import ScoreEntryForm
from .utils import validate_term, get_term_display
from students.models import Student
from core.utils import (
    parse_filters, resolve_academic_year, get_request_data,
    validation_error_response, form_error_response, to_plain_number,
)

logger = logging.getLogger(__name__)

DEFAULT_TERM = 'first'


def _resolve_scope(request):
    """
    Term and academic year a read request is scoped to.

    Returns:
        tuple: (term, academic_year, error_response); error_response is
        None when both resolved
    """
    filters = parse_filters(request, ['term', 'year'])
    term = filters['term'] or DEFAULT_TERM

    is_valid, error = validate_term(term)
    if not is_valid:
        return None, None, JsonResponse(
            {'success': False, 'error': error, 'code': 'invalid_term'}, status=400
        )

    academic_year = resolve_academic_year(filters['year'])
    if academic_year is None:
        return None, None, JsonResponse(
            {'success': False, 'error': 'No academic year selected or active.', 'code': 'no_academic_year'},
            status=400
        )

    return term, academic_year, None


# =============================================================================
# LEADERBOARDS
# =============================================================================

@login_required
@require_GET
def class_leaderboard(request, class_id):
    """Ranked students of one class for a term"""
    school_class = get_object_or_404(SchoolClass, pk=class_id)
    term, academic_year, error_response = _resolve_scope(request)
    if error_response:
        return error_response

    leaderboard = LeaderboardService.build_class_leaderboard(school_class, term, academic_year)
    leaderboard['term_display'] = get_term_display(term)

    return JsonResponse({'success': True, 'leaderboard': leaderboard})


@login_required
@require_GET
def school_leaderboard(request):
    """Top students across the school for a term"""
    term, academic_year, error_response = _resolve_scope(request)
    if error_response:
        return error_response

    size = None
    raw_size = request.GET.get('size', '').strip()
    if raw_size:
        try:
            size = int(raw_size)
        except ValueError:
            return JsonResponse(
                {'success': False, 'error': 'Size must be a whole number.', 'code': 'invalid_size'},
                status=400
            )

    leaderboard = LeaderboardService.build_school_leaderboard(term, academic_year, size=size)
    leaderboard['term_display'] = get_term_display(term)

    return JsonResponse({'success': True, 'leaderboard': leaderboard})


@login_required
@require_GET
def subject_performance(request, class_id):
    """Average, highest and lowest score per subject in a class"""
    school_class = get_object_or_404(SchoolClass, pk=class_id)
    term, academic_year, error_response = _resolve_scope(request)
    if error_response:
        return error_response

    performance = LeaderboardService.build_subject_performance(school_class, term, academic_year)
    performance['term_display'] = get_term_display(term)

    return JsonResponse({'success': True, 'performance': performance})


# =============================================================================
# STUDENT REPORT
# =============================================================================

@login_required
@require_GET
def student_report(request, student_id):
    """Report card figures for one student"""
    student = get_object_or_404(Student.objects.select_related('school_class'), pk=student_id)
    term, academic_year, error_response = _resolve_scope(request)
    if error_response:
        return error_response

    summary = get_student_report_summary(student, term, academic_year)
    ungraded = ReportCardService.get_ungraded_subjects(student, term, academic_year)
    summary['ungraded_subjects'] = [
        {'subject_id': str(subject.pk), 'subject_name': subject.name}
        for subject in ungraded
    ]

    return JsonResponse({'success': True, 'report': summary})


# =============================================================================
# SCORE ENTRY
# =============================================================================

@login_required
@require_POST
def record_score(request):
    """Record or replace one subject score"""
    try:
        data = get_request_data(request)
    except ValueError as e:
        return JsonResponse({'success': False, 'error': str(e), 'code': 'invalid_json'}, status=400)

    form = ScoreEntryForm(data)
    if not form.is_valid():
        return form_error_response(form)

    academic_year = form.cleaned_data['academic_year'] or resolve_academic_year()
    if academic_year is None:
        return JsonResponse(
            {'success': False, 'error': 'No academic year selected or active.', 'code': 'no_academic_year'},
            status=400
        )

    try:
        report_card, created = ReportCardService.record_score(
            form.cleaned_data['student'],
            form.cleaned_data['subject'],
            form.cleaned_data['term'],
            academic_year,
            form.cleaned_data['score'],
            remarks=form.cleaned_data['remarks'],
        )
    except ValidationError as e:
        return validation_error_response(e)

    return JsonResponse({
        'success': True,
        'created': created,
        'message': 'Score recorded' if created else 'Score updated',
        'report_card': {
            'id': str(report_card.pk),
            'student_id': str(report_card.student_id),
            'subject_id': str(report_card.subject_id),
            'term': report_card.term,
            'academic_year': report_card.academic_year,
            'score': to_plain_number(report_card.score),
        },
    }, status=201 if created else 200)
