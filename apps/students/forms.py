# students/forms.py

from django import forms
from django.core.exceptions import ValidationError
import logging

from .models import Student

logger = logging.getLogger(__name__)


# =============================================================================
# STUDENT FORM
# =============================================================================

class StudentForm(forms.ModelForm):
    """Form for registering or editing a student"""

    class Meta:
        model = Student
        fields = [
            'full_name', 'admission_number', 'gender', 'date_of_birth',
            'school_class', 'academic_year', 'status',
            'parent_name', 'parent_phone', 'parent_email', 'address',
        ]
        widgets = {
            'full_name': forms.TextInput(attrs={'class': 'form-control'}),
            'admission_number': forms.TextInput(attrs={'class': 'form-control'}),
            'gender': forms.Select(attrs={'class': 'form-control'}),
            'date_of_birth': forms.DateInput(attrs={'class': 'form-control', 'type': 'date'}),
            'school_class': forms.Select(attrs={'class': 'form-control'}),
            'academic_year': forms.Select(attrs={'class': 'form-control'}),
            'status': forms.Select(attrs={'class': 'form-control'}),
            'parent_name': forms.TextInput(attrs={'class': 'form-control'}),
            'parent_phone': forms.TextInput(attrs={'class': 'form-control'}),
            'parent_email': forms.EmailInput(attrs={'class': 'form-control'}),
            'address': forms.Textarea(attrs={'class': 'form-control', 'rows': 2}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['status'].required = False

    def clean_status(self):
        return self.cleaned_data.get('status') or 'active'

    def clean_full_name(self):
        full_name = (self.cleaned_data.get('full_name') or '').strip()
        if not full_name:
            raise ValidationError('Full name is required.')
        return full_name

    def clean_admission_number(self):
        admission_number = (self.cleaned_data.get('admission_number') or '').strip().upper()
        duplicates = Student.objects.filter(admission_number__iexact=admission_number)
        if self.instance.pk:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise ValidationError(f'Admission number {admission_number} is already in use.')
        return admission_number
