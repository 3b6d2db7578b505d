# academics/forms.py

"""
Academic Forms

Score entry and academic year forms. Field-level checks only; the
services enforce the one-score-per-term rule and retired subjects.
"""

from django import forms
from django.core.exceptions import ValidationError
from decimal import Decimal
import logging

from .models import AcademicYear, Subject
from .utils import TERM_CHOICES, validate_academic_year_format
from students.models import Student

logger = logging.getLogger(__name__)


# =============================================================================
# SCORE ENTRY FORM
# =============================================================================

class ScoreEntryForm(forms.Form):
    """Record one subject score for a student"""

    student = forms.ModelChoiceField(
        queryset=Student.objects.select_related('school_class'),
        widget=forms.Select(attrs={'class': 'form-control'})
    )
    subject = forms.ModelChoiceField(
        queryset=Subject.objects.select_related('school_class'),
        widget=forms.Select(attrs={'class': 'form-control'})
    )
    term = forms.ChoiceField(
        choices=TERM_CHOICES,
        widget=forms.Select(attrs={'class': 'form-control'})
    )
    academic_year = forms.ModelChoiceField(
        queryset=AcademicYear.objects.all(),
        required=False,
        help_text="Defaults to the active academic year",
        widget=forms.Select(attrs={'class': 'form-control'})
    )
    score = forms.DecimalField(
        max_digits=5,
        decimal_places=2,
        min_value=Decimal('0'),
        max_value=Decimal('100'),
        widget=forms.NumberInput(attrs={'class': 'form-control', 'step': '0.5', 'min': 0, 'max': 100})
    )
    remarks = forms.CharField(
        required=False,
        widget=forms.Textarea(attrs={'class': 'form-control', 'rows': 2})
    )

    def clean(self):
        cleaned_data = super().clean()
        student = cleaned_data.get('student')
        subject = cleaned_data.get('subject')

        if student and subject and student.school_class_id != subject.school_class_id:
            raise ValidationError(
                f'{subject.name} is not taught in {student.full_name}\'s class.'
            )

        return cleaned_data


# =============================================================================
# ACADEMIC YEAR FORM
# =============================================================================

class AcademicYearForm(forms.ModelForm):
    """Create or rename an academic year"""

    class Meta:
        model = AcademicYear
        fields = ['name']
        widgets = {
            'name': forms.TextInput(attrs={'class': 'form-control', 'placeholder': '2025-2026'}),
        }

    def clean_name(self):
        name = (self.cleaned_data.get('name') or '').strip()
        is_valid, error = validate_academic_year_format(name)
        if not is_valid:
            raise ValidationError(error)
        return name
