# academics/models.py

from django.db import models, transaction
from django.core.validators import MinValueValidator, MaxValueValidator
from django.core.exceptions import ValidationError
from decimal import Decimal
import logging

from utils.models import BaseModel
from .utils import TERM_CHOICES, validate_academic_year_format

logger = logging.getLogger(__name__)


# =============================================================================
# ACADEMIC YEAR MODEL
# =============================================================================

class AcademicYear(BaseModel):
    """
    A named school year (e.g. "2025-2026") scoping fee structures, scores,
    payments and attendance.

    Exactly one year is active system-wide at a time. The active year is
    only a default: every report and calculation receives the year it is
    scoped to as an explicit argument.
    """

    name = models.CharField(
        "Academic Year",
        max_length=20,
        unique=True,
        help_text="Format: YYYY-YYYY (e.g. 2025-2026)"
    )
    is_active = models.BooleanField("Active", default=False, db_index=True)

    class Meta:
        verbose_name = "Academic Year"
        verbose_name_plural = "Academic Years"
        ordering = ['-name']

    def __str__(self):
        return self.name

    def clean(self):
        is_valid, error = validate_academic_year_format(self.name)
        if not is_valid:
            raise ValidationError({'name': error})

    @classmethod
    def get_active(cls):
        """Return the active academic year or None"""
        return cls.objects.filter(is_active=True).order_by('-name').first()

    @transaction.atomic
    def set_active(self):
        """Make this the only active academic year"""
        AcademicYear.objects.exclude(pk=self.pk).filter(is_active=True).update(is_active=False)
        if not self.is_active:
            self.is_active = True
            self.save(update_fields=['is_active', 'updated_at', 'updated_by_id', 'updated_from_ip'])
        logger.info(f"Academic year {self.name} set as active")


# =============================================================================
# CLASS MODEL
# =============================================================================

class SchoolClass(BaseModel):
    """A class (form/grade) students are enrolled in, e.g. "JSS 1"."""

    LEVEL_CHOICES = [
        ('Nursery', 'Nursery'),
        ('Primary', 'Primary'),
        ('Junior Secondary', 'Junior Secondary'),
        ('Senior Secondary', 'Senior Secondary'),
    ]

    name = models.CharField("Class Name", max_length=50, unique=True)
    level = models.CharField(
        "Level",
        max_length=30,
        choices=LEVEL_CHOICES,
        blank=True,
        db_index=True
    )
    teacher_name = models.CharField("Class Teacher", max_length=100, blank=True)
    capacity = models.PositiveIntegerField("Capacity", default=30)

    class Meta:
        verbose_name = "Class"
        verbose_name_plural = "Classes"
        ordering = ['name']

    def __str__(self):
        return self.name

    def get_active_subjects(self):
        return self.subjects.filter(is_active=True).order_by('name')


# =============================================================================
# SUBJECT MODEL
# =============================================================================

class Subject(BaseModel):
    """A subject taught in one class. Retired subjects are deactivated, not deleted."""

    name = models.CharField("Subject Name", max_length=100)
    code = models.CharField("Subject Code", max_length=20)
    school_class = models.ForeignKey(
        SchoolClass,
        verbose_name="Class",
        on_delete=models.CASCADE,
        related_name='subjects'
    )
    is_active = models.BooleanField("Active", default=True, db_index=True)

    class Meta:
        verbose_name = "Subject"
        verbose_name_plural = "Subjects"
        ordering = ['school_class__name', 'name']
        constraints = [
            models.UniqueConstraint(fields=['name', 'school_class'], name='unique_subject_per_class'),
            models.UniqueConstraint(fields=['code', 'school_class'], name='unique_subject_code_per_class'),
        ]

    def __str__(self):
        return f"{self.name} ({self.code})"


# =============================================================================
# REPORT CARD MODEL
# =============================================================================

class ReportCard(BaseModel):
    """
    One numeric score for a student in a subject for a term.

    There is at most one row per (student, subject, term, academic year).
    Scores are percentages in [0, 100]; no letter grades are stored.
    """

    student = models.ForeignKey(
        'students.Student',
        verbose_name="Student",
        on_delete=models.CASCADE,
        related_name='report_cards'
    )
    subject = models.ForeignKey(
        Subject,
        verbose_name="Subject",
        on_delete=models.CASCADE,
        related_name='report_cards'
    )
    term = models.CharField("Term", max_length=10, choices=TERM_CHOICES, db_index=True)

    # Year name is kept alongside the FK; leaderboards filter on the name
    academic_year = models.CharField("Academic Year", max_length=20, db_index=True)
    academic_year_ref = models.ForeignKey(
        AcademicYear,
        verbose_name="Academic Year Record",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='report_cards'
    )

    score = models.DecimalField(
        "Score",
        max_digits=5,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))]
    )
    remarks = models.TextField("Remarks", blank=True)

    class Meta:
        verbose_name = "Report Card Entry"
        verbose_name_plural = "Report Card Entries"
        ordering = ['student', 'subject__name']
        constraints = [
            models.UniqueConstraint(
                fields=['student', 'subject', 'term', 'academic_year'],
                name='unique_student_subject_term_year'
            ),
        ]
        indexes = [
            models.Index(fields=['term', 'academic_year']),
        ]

    def __str__(self):
        return f"{self.student} - {self.subject.name} ({self.term} {self.academic_year}): {self.score}"

    def clean(self):
        if self.score is not None and not (Decimal('0') <= Decimal(str(self.score)) <= Decimal('100')):
            raise ValidationError({'score': "Score must be between 0 and 100"})

    def to_score_record(self):
        """Plain-dict snapshot consumed by the ranking engine"""
        return {
            'student_id': str(self.student_id),
            'student_name': self.student.full_name,
            'admission_number': self.student.admission_number,
            'class_id': str(self.student.school_class_id) if self.student.school_class_id else None,
            'subject_id': str(self.subject_id),
            'subject_name': self.subject.name,
            'term': self.term,
            'academic_year': self.academic_year,
            'score': self.score,
        }
