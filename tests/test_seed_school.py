# tests/test_seed_school.py

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from academics.models import AcademicYear, SchoolClass, Subject

pytestmark = pytest.mark.django_db


def test_seed_creates_structure():
    call_command('seed_school')

    assert AcademicYear.get_active().name == "2025-2026"
    assert SchoolClass.objects.count() == 15
    assert SchoolClass.objects.get(name="Primary 4").level == "Primary"
    assert Subject.objects.filter(school_class__name="Nursery 1").count() == 6
    assert Subject.objects.filter(school_class__name="SSS 3").count() == 12


def test_seed_is_idempotent():
    call_command('seed_school')
    call_command('seed_school')

    assert AcademicYear.objects.count() == 1
    assert SchoolClass.objects.count() == 15
    assert Subject.objects.count() == 9 * 6 + 6 * 12


def test_no_activate_keeps_current_year(academic_year):
    call_command('seed_school', year="2026-2027", no_activate=True)

    academic_year.refresh_from_db()
    assert academic_year.is_active
    assert not AcademicYear.objects.get(name="2026-2027").is_active


def test_bad_year_name():
    with pytest.raises(CommandError):
        call_command('seed_school', year="next year")
