# students/ajax_views.py

from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.contrib.auth.decorators import login_required
from django.views.decorators.http import require_GET, require_POST
from django.core.exceptions import ValidationError
from django.core.paginator import Paginator, EmptyPage, PageNotAnInteger
import logging

from .models import Student
from .forms import StudentForm
from .services import StudentService
from academics.models import SchoolClass
from core.utils import (
    parse_filters, resolve_academic_year, get_request_data,
    validation_error_response, form_error_response,
)

logger = logging.getLogger(__name__)

STUDENTS_PER_PAGE = 25


def serialize_student(student):
    return {
        'id': str(student.pk),
        'full_name': student.full_name,
        'admission_number': student.admission_number,
        'gender': student.gender,
        'class_id': str(student.school_class_id) if student.school_class_id else None,
        'class_name': student.school_class.name if student.school_class_id else None,
        'status': student.status,
        'parent_name': student.parent_name,
        'parent_phone': student.parent_phone,
    }


# =============================================================================
# STUDENT SEARCH
# =============================================================================

@login_required
@require_GET
def student_search(request):
    """Students matching a name or admission number, paginated"""
    filters = parse_filters(request, ['q', 'class', 'status', 'page'])

    school_class = None
    if filters['class']:
        try:
            school_class = get_object_or_404(SchoolClass, pk=filters['class'])
        except ValidationError:
            return JsonResponse({'success': False, 'error': 'Invalid class id.', 'code': 'invalid_class'}, status=400)

    students = StudentService.search_students(filters['q'], school_class, filters['status'])

    paginator = Paginator(students, STUDENTS_PER_PAGE)
    try:
        page = paginator.page(filters['page'] or 1)
    except PageNotAnInteger:
        page = paginator.page(1)
    except EmptyPage:
        page = paginator.page(paginator.num_pages)

    return JsonResponse({
        'success': True,
        'students': [serialize_student(student) for student in page.object_list],
        'pagination': {
            'page': page.number,
            'num_pages': paginator.num_pages,
            'count': paginator.count,
        },
    })


# =============================================================================
# STUDENT REGISTRATION
# =============================================================================

@login_required
@require_POST
def student_register(request):
    """Register a student"""
    try:
        data = get_request_data(request)
    except ValueError as e:
        return JsonResponse({'success': False, 'error': str(e), 'code': 'invalid_json'}, status=400)

    form = StudentForm(data)
    if not form.is_valid():
        return form_error_response(form)

    student_data = dict(form.cleaned_data)
    if student_data.get('academic_year') is None:
        student_data['academic_year'] = resolve_academic_year()

    try:
        student = StudentService.register_student(student_data)
    except ValidationError as e:
        return validation_error_response(e)

    return JsonResponse({'success': True, 'student': serialize_student(student)}, status=201)


# =============================================================================
# STUDENT PROFILE
# =============================================================================

@login_required
@require_GET
def student_profile(request, student_id):
    """Student details with attendance and fee balance for the selected year"""
    from attendance.stats import get_student_attendance_summary
    from fees.services import PaymentService
    from fees.ajax_views import serialize_balance

    student = get_object_or_404(Student.objects.select_related('school_class'), pk=student_id)
    academic_year = resolve_academic_year(request.GET.get('year'))

    profile = serialize_student(student)
    profile['date_of_birth'] = student.date_of_birth.isoformat() if student.date_of_birth else None
    profile['parent_email'] = student.parent_email
    profile['address'] = student.address

    return JsonResponse({
        'success': True,
        'student': profile,
        'academic_year': academic_year.name if academic_year else None,
        'attendance': get_student_attendance_summary(student),
        'balance': serialize_balance(PaymentService.get_student_balance(student, academic_year)) if academic_year else None,
    })
