# students/models.py

from django.db import models
import logging

from utils.models import BaseModel

logger = logging.getLogger(__name__)


# =============================================================================
# STUDENT MODEL
# =============================================================================

class Student(BaseModel):
    """Core model for student information"""

    # -------------------------------------------------------------------------
    # CHOICE FIELDS
    # -------------------------------------------------------------------------

    GENDER_CHOICES = (
        ('male', 'Male'),
        ('female', 'Female'),
    )

    STATUS_CHOICES = (
        ('active', 'Active'),
        ('inactive', 'Inactive'),
        ('graduated', 'Graduated'),
        ('transferred', 'Transferred'),
    )

    # -------------------------------------------------------------------------
    # IDENTIFICATION
    # -------------------------------------------------------------------------

    full_name = models.CharField("Full Name", max_length=150, db_index=True)
    admission_number = models.CharField(
        "Admission Number",
        max_length=30,
        unique=True,
        help_text="School-issued admission number"
    )
    gender = models.CharField("Gender", max_length=10, choices=GENDER_CHOICES, blank=True)
    date_of_birth = models.DateField("Date of Birth", null=True, blank=True)

    # -------------------------------------------------------------------------
    # ENROLLMENT
    # -------------------------------------------------------------------------

    school_class = models.ForeignKey(
        'academics.SchoolClass',
        verbose_name="Class",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='students'
    )
    academic_year = models.ForeignKey(
        'academics.AcademicYear',
        verbose_name="Academic Year",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='students'
    )
    status = models.CharField(
        "Status",
        max_length=20,
        choices=STATUS_CHOICES,
        default='active',
        db_index=True
    )

    # -------------------------------------------------------------------------
    # PARENT / GUARDIAN CONTACT
    # -------------------------------------------------------------------------

    parent_name = models.CharField("Parent/Guardian Name", max_length=150, blank=True)
    parent_phone = models.CharField("Parent/Guardian Phone", max_length=30, blank=True)
    parent_email = models.EmailField("Parent/Guardian Email", blank=True)
    address = models.TextField("Address", blank=True)

    class Meta:
        verbose_name = "Student"
        verbose_name_plural = "Students"
        ordering = ['full_name']
        indexes = [
            models.Index(fields=['school_class', 'status']),
        ]

    def __str__(self):
        return f"{self.full_name} ({self.admission_number})"

    @property
    def is_active(self):
        return self.status == 'active'
