# tests/conftest.py

"""Shared fixtures for the schooldesk test suite."""

import itertools

import pytest

from academics.models import AcademicYear, SchoolClass, Subject
from students.models import Student


@pytest.fixture
def academic_year(db):
    return AcademicYear.objects.create(name="2025-2026", is_active=True)


@pytest.fixture
def other_year(db):
    return AcademicYear.objects.create(name="2024-2025", is_active=False)


@pytest.fixture
def jss1(db):
    return SchoolClass.objects.create(name="JSS 1", level="Junior Secondary")


@pytest.fixture
def jss2(db):
    return SchoolClass.objects.create(name="JSS 2", level="Junior Secondary")


@pytest.fixture
def subjects(jss1):
    return {
        code: Subject.objects.create(school_class=jss1, name=name, code=code)
        for name, code in [("English Language", "ENG"), ("Mathematics", "MATH"), ("Biology", "BIO")]
    }


@pytest.fixture
def make_student(db, academic_year):
    """Factory creating active students with unique admission numbers"""
    counter = itertools.count(1)

    def _make(full_name, school_class, **extra):
        number = next(counter)
        extra.setdefault('admission_number', f"ADM-{number:04d}")
        extra.setdefault('academic_year', academic_year)
        return Student.objects.create(full_name=full_name, school_class=school_class, **extra)

    return _make


@pytest.fixture
def auth_client(client, django_user_model):
    user = django_user_model.objects.create_user(username="bursar", password="not-a-real-password")
    client.force_login(user)
    return client


def score_record(student_id, score, subject_id="s1", class_id="c1", student_name=None, subject_name=None):
    """Plain score record as produced by ReportCard.to_score_record"""
    return {
        'student_id': student_id,
        'student_name': student_name or f"Student {student_id}",
        'admission_number': f"ADM-{student_id}",
        'class_id': class_id,
        'subject_id': subject_id,
        'subject_name': subject_name or f"Subject {subject_id}",
        'term': 'first',
        'academic_year': '2025-2026',
        'score': score,
    }
