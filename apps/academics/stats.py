# academics/stats.py
"""
Statistics utility functions for academic records
"""

from django.db.models import Count, Q
from decimal import Decimal
import logging

from core.utils import round_half_up, to_plain_number
from .utils import get_term_display

logger = logging.getLogger(__name__)


# =============================================================================
# STUDENT REPORT STATISTICS
# =============================================================================

def get_student_report_summary(student, term, academic_year):
    """
    Report card figures for one student, term and academic year.

    Args:
        student: Student instance
        term: 'first', 'second' or 'third'
        academic_year: AcademicYear instance

    Returns:
        dict: {
            'student_id', 'student_name', 'admission_number', 'class_name',
            'term', 'term_display', 'academic_year',
            'subjects': list of {subject_id, subject_name, subject_code, score, remarks},
            'total_score': number,
            'subject_count': int,
            'average': int (0 when nothing is graded),
            'position': int or None, class leaderboard rank,
            'class_size': int, students ranked in the class
        }
    """
    from .models import ReportCard
    from .rankings import rank_class
    from .services import LeaderboardService

    report_cards = ReportCard.objects.filter(
        student=student,
        term=term,
        academic_year=academic_year.name
    ).select_related('subject').order_by('subject__name')

    subjects = []
    total = Decimal('0')
    for report_card in report_cards:
        subjects.append({
            'subject_id': str(report_card.subject_id),
            'subject_name': report_card.subject.name,
            'subject_code': report_card.subject.code,
            'score': to_plain_number(report_card.score),
            'remarks': report_card.remarks,
        })
        total += report_card.score

    subject_count = len(subjects)
    average = round_half_up(total / subject_count) if subject_count else 0

    position = None
    class_size = 0
    if student.school_class_id:
        records = LeaderboardService.get_score_records(term, academic_year, student.school_class)
        ranked = rank_class(records, student.school_class_id)
        class_size = len(ranked)
        for entry in ranked:
            if entry['student_id'] == str(student.pk):
                position = entry['rank']
                break

    return {
        'student_id': str(student.pk),
        'student_name': student.full_name,
        'admission_number': student.admission_number,
        'class_name': student.school_class.name if student.school_class_id else None,
        'term': term,
        'term_display': get_term_display(term),
        'academic_year': academic_year.name,
        'subjects': subjects,
        'total_score': to_plain_number(total),
        'subject_count': subject_count,
        'average': average,
        'position': position,
        'class_size': class_size,
    }


# =============================================================================
# DASHBOARD STATISTICS
# =============================================================================

def get_academic_dashboard_statistics(academic_year):
    """
    Headline academic figures for an academic year.

    Returns:
        dict: student, class and subject counts plus graded record counts per term
    """
    from .models import SchoolClass, Subject, ReportCard
    from students.models import Student

    students = Student.objects.filter(status='active')
    report_cards = ReportCard.objects.filter(academic_year=academic_year.name) if academic_year else ReportCard.objects.none()

    graded = report_cards.aggregate(
        total=Count('id'),
        first=Count('id', filter=Q(term='first')),
        second=Count('id', filter=Q(term='second')),
        third=Count('id', filter=Q(term='third')),
    )

    return {
        'academic_year': academic_year.name if academic_year else None,
        'total_students': students.count(),
        'students_in_year': students.filter(academic_year=academic_year).count() if academic_year else 0,
        'total_classes': SchoolClass.objects.count(),
        'active_subjects': Subject.objects.filter(is_active=True).count(),
        'graded_records': graded['total'],
        'graded_by_term': {
            'first': graded['first'],
            'second': graded['second'],
            'third': graded['third'],
        },
    }
