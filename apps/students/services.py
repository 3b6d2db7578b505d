# students/services.py

"""
Student Services

Registration, updates and lookup of student records.
"""

from django.db import transaction
from django.db.models import Q
from django.core.exceptions import ValidationError
import logging

from .models import Student

logger = logging.getLogger(__name__)


class StudentService:
    """Student record management"""

    @staticmethod
    @transaction.atomic
    def register_student(student_data):
        """
        Register a new student.

        Args:
            student_data (dict): Student fields
                Required:
                    - full_name: str
                    - admission_number: str
                Optional:
                    - school_class, academic_year, gender, date_of_birth,
                      parent_name, parent_phone, parent_email, address

        Returns:
            Student instance

        Raises:
            ValidationError: If required fields are missing or the
                admission number is already taken
        """
        full_name = (student_data.get('full_name') or '').strip()
        admission_number = (student_data.get('admission_number') or '').strip()

        if not full_name:
            raise ValidationError("Full name is required", code='required')
        if not admission_number:
            raise ValidationError("Admission number is required", code='required')

        if Student.objects.filter(admission_number__iexact=admission_number).exists():
            raise ValidationError(
                f"Admission number {admission_number} is already in use",
                code='duplicate_admission_number'
            )

        data = dict(student_data, full_name=full_name, admission_number=admission_number)
        student = Student.objects.create(**data)

        logger.info(f"Registered student {student.full_name} ({student.admission_number})")
        return student

    @staticmethod
    @transaction.atomic
    def update_student(student, update_data):
        """
        Update student fields.

        Returns:
            Updated Student instance
        """
        new_number = update_data.get('admission_number')
        if new_number and new_number != student.admission_number:
            taken = Student.objects.filter(
                admission_number__iexact=new_number
            ).exclude(pk=student.pk).exists()
            if taken:
                raise ValidationError(
                    f"Admission number {new_number} is already in use",
                    code='duplicate_admission_number'
                )

        for field, value in update_data.items():
            setattr(student, field, value)
        student.save()

        logger.info(f"Updated student {student.full_name}")
        return student

    @staticmethod
    def search_students(query=None, school_class=None, status=None):
        """
        Search students by name or admission number.

        Args:
            query: case-insensitive substring of full name or admission number
            school_class: optional SchoolClass filter
            status: optional status filter

        Returns:
            QuerySet of Student ordered by full name
        """
        students = Student.objects.select_related('school_class').order_by('full_name')

        if query:
            students = students.filter(
                Q(full_name__icontains=query) | Q(admission_number__icontains=query)
            )
        if school_class is not None:
            students = students.filter(school_class=school_class)
        if status:
            students = students.filter(status=status)

        return students
