# academics/services.py

"""
Academic Services Module

Business logic for academic operations:
- Academic year management (one active year at a time)
- Subject management per class
- Score entry (one score per student, subject, term and year)
- Leaderboards and subject performance

Leaderboard arithmetic lives in academics/rankings.py; the services here
fetch the score rows for an explicit term and academic year and hand
them over as plain dicts.

All writes use @transaction.atomic for data consistency
"""

from django.db import transaction
from django.db.models import Q
from django.core.exceptions import ValidationError
from decimal import Decimal
import logging

from .models import AcademicYear, SchoolClass, Subject, ReportCard
from .rankings import (
    partition_scores,
    rank_class,
    rank_school_top,
    subject_stats,
    DEFAULT_LEADERBOARD_SIZE,
)
from .utils import validate_academic_year_format, validate_term, validate_score
from core.utils import get_leaderboard_size

logger = logging.getLogger(__name__)


# =============================================================================
# ACADEMIC YEAR SERVICE
# =============================================================================

class AcademicYearService:
    """Academic year lifecycle"""

    @staticmethod
    @transaction.atomic
    def create_year(name, make_active=False):
        """
        Create an academic year.

        Args:
            name (str): e.g. "2025-2026"
            make_active (bool): also make it the active year

        Returns:
            AcademicYear instance

        Raises:
            ValidationError: bad format or name already used
        """
        name = (name or '').strip()
        is_valid, error = validate_academic_year_format(name)
        if not is_valid:
            raise ValidationError(error, code='invalid_year_name')

        if AcademicYear.objects.filter(name=name).exists():
            raise ValidationError(f"Academic year {name} already exists", code='duplicate_year')

        year = AcademicYear.objects.create(name=name)
        if make_active or not AcademicYear.objects.filter(is_active=True).exists():
            year.set_active()

        logger.info(f"Created academic year {year.name}")
        return year

    @staticmethod
    def set_active_year(year):
        """Make year the only active academic year"""
        year.set_active()
        return year

    @staticmethod
    @transaction.atomic
    def rename_year(year, name):
        """
        Rename an academic year.

        Score rows keep the year name as text, so they are renamed too.
        """
        name = (name or '').strip()
        is_valid, error = validate_academic_year_format(name)
        if not is_valid:
            raise ValidationError(error, code='invalid_year_name')

        if AcademicYear.objects.filter(name=name).exclude(pk=year.pk).exists():
            raise ValidationError(f"Academic year {name} already exists", code='duplicate_year')

        old_name = year.name
        year.name = name
        year.save()
        ReportCard.objects.filter(academic_year=old_name).update(academic_year=name)

        logger.info(f"Renamed academic year {old_name} to {name}")
        return year

    @staticmethod
    @transaction.atomic
    def delete_year(year):
        """
        Delete an academic year.

        Score rows hold the year name as text; a year with scores is kept.

        Raises:
            ValidationError: the active year, or a year with recorded scores
        """
        if year.is_active:
            raise ValidationError(
                "The active academic year cannot be deleted",
                code='active_year'
            )

        has_scores = ReportCard.objects.filter(
            Q(academic_year=year.name) | Q(academic_year_ref=year)
        ).exists()
        if has_scores:
            raise ValidationError(
                f"Academic year {year.name} has recorded scores and cannot be deleted",
                code='year_has_scores'
            )

        name = year.name
        year.delete()
        logger.info(f"Deleted academic year {name}")


# =============================================================================
# SUBJECT SERVICE
# =============================================================================

class SubjectService:
    """Subjects taught per class"""

    @staticmethod
    @transaction.atomic
    def add_subject(school_class, name, code):
        """
        Add a subject to a class, reactivating it if it was retired.

        Returns:
            Subject instance
        """
        name = (name or '').strip()
        code = (code or '').strip().upper()
        if not name or not code:
            raise ValidationError("Subject name and code are required", code='required')

        existing = Subject.objects.filter(school_class=school_class, code=code).first()
        if existing is not None:
            if existing.is_active:
                raise ValidationError(
                    f"{school_class.name} already has a subject with code {code}",
                    code='duplicate_subject'
                )
            existing.name = name
            existing.is_active = True
            existing.save()
            logger.info(f"Reactivated subject {code} for {school_class.name}")
            return existing

        if Subject.objects.filter(school_class=school_class, name__iexact=name).exists():
            raise ValidationError(
                f"{school_class.name} already has a subject named {name}",
                code='duplicate_subject'
            )

        subject = Subject.objects.create(school_class=school_class, name=name, code=code)
        logger.info(f"Added subject {subject} to {school_class.name}")
        return subject

    @staticmethod
    @transaction.atomic
    def deactivate_subject(subject):
        """Retire a subject; its recorded scores stay in place"""
        if subject.is_active:
            subject.is_active = False
            subject.save()
            logger.info(f"Deactivated subject {subject} for {subject.school_class.name}")
        return subject


# =============================================================================
# REPORT CARD SERVICE
# =============================================================================

class ReportCardService:
    """Score entry"""

    @staticmethod
    @transaction.atomic
    def record_score(student, subject, term, academic_year, score, remarks=''):
        """
        Record or replace a student's score for a subject and term.

        Args:
            student: Student instance
            subject: Subject instance
            term: 'first', 'second' or 'third'
            academic_year: AcademicYear instance
            score: percentage in [0, 100]
            remarks: optional teacher remarks

        Returns:
            tuple: (ReportCard, created)

        Raises:
            ValidationError: code 'MalformedScore' for a score outside
                [0, 100], 'invalid_term' for an unknown term
        """
        is_valid, error = validate_score(score)
        if not is_valid:
            logger.warning(f"Rejected score {score!r} for {student} in {subject}: {error}")
            raise ValidationError(error, code='MalformedScore')

        is_valid, error = validate_term(term)
        if not is_valid:
            raise ValidationError(error, code='invalid_term')

        if not subject.is_active:
            raise ValidationError(f"{subject.name} is no longer offered", code='inactive_subject')

        report_card, created = ReportCard.objects.update_or_create(
            student=student,
            subject=subject,
            term=term,
            academic_year=academic_year.name,
            defaults={
                'academic_year_ref': academic_year,
                'score': Decimal(str(score)),
                'remarks': remarks or '',
            }
        )

        action = "Recorded" if created else "Updated"
        logger.info(f"{action} {subject.name} score {score} for {student.full_name} ({term} term {academic_year.name})")
        return report_card, created

    @staticmethod
    def get_ungraded_subjects(student, term, academic_year):
        """Active subjects of the student's class with no score yet for the term"""
        if student.school_class is None:
            return Subject.objects.none()

        graded = ReportCard.objects.filter(
            student=student,
            term=term,
            academic_year=academic_year.name
        ).values_list('subject_id', flat=True)

        return student.school_class.get_active_subjects().exclude(pk__in=graded)


# =============================================================================
# LEADERBOARD SERVICE
# =============================================================================

class LeaderboardService:
    """Fetch score rows and rank them"""

    @staticmethod
    def get_score_records(term, academic_year, school_class=None):
        """
        Score records for one term and academic year.

        Args:
            term: 'first', 'second' or 'third'
            academic_year: AcademicYear instance
            school_class: optional SchoolClass to narrow the rows to

        Returns:
            list: score record dicts (see academics.rankings)
        """
        report_cards = ReportCard.objects.filter(
            term=term,
            academic_year=academic_year.name,
        ).select_related('student', 'subject')

        if school_class is not None:
            report_cards = report_cards.filter(student__school_class=school_class)

        return [report_card.to_score_record() for report_card in report_cards]

    @staticmethod
    def build_class_leaderboard(school_class, term, academic_year):
        """
        Ranked students of one class.

        Returns:
            dict: {'class_id', 'class_name', 'term', 'academic_year',
                   'entries': ranked entries, 'warnings': malformed scores}
        """
        records = LeaderboardService.get_score_records(term, academic_year, school_class)
        valid, warnings = partition_scores(records)

        return {
            'class_id': str(school_class.pk),
            'class_name': school_class.name,
            'term': term,
            'academic_year': academic_year.name,
            'entries': rank_class(valid, school_class.pk),
            'warnings': warnings,
        }

    @staticmethod
    def build_school_leaderboard(term, academic_year, size=None):
        """
        Top students across the whole school.

        Args:
            size: number of entries; defaults to the LEADERBOARD_SIZE setting

        Returns:
            dict: {'term', 'academic_year', 'size', 'entries', 'warnings'}
        """
        if size is None:
            size = get_leaderboard_size() or DEFAULT_LEADERBOARD_SIZE

        records = LeaderboardService.get_score_records(term, academic_year)
        valid, warnings = partition_scores(records)

        entries = rank_school_top(valid, size)

        class_names = dict(
            SchoolClass.objects.filter(
                pk__in={entry['class_id'] for entry in entries if entry['class_id']}
            ).values_list('pk', 'name')
        )
        class_names = {str(pk): name for pk, name in class_names.items()}
        for entry in entries:
            entry['class_name'] = class_names.get(entry['class_id'])

        return {
            'term': term,
            'academic_year': academic_year.name,
            'size': size,
            'entries': entries,
            'warnings': warnings,
        }

    @staticmethod
    def build_subject_performance(school_class, term, academic_year):
        """
        Per-subject average, highest and lowest score for a class.

        Returns:
            dict: {'class_id', 'class_name', 'term', 'academic_year',
                   'subjects': subject stats, 'warnings'}
        """
        records = LeaderboardService.get_score_records(term, academic_year, school_class)
        valid, warnings = partition_scores(records)

        return {
            'class_id': str(school_class.pk),
            'class_name': school_class.name,
            'term': term,
            'academic_year': academic_year.name,
            'subjects': subject_stats(valid, school_class.pk),
            'warnings': warnings,
        }
