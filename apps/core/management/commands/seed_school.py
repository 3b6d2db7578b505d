# core/management/commands/seed_school.py
"""
Seed the default school structure
=================================

Creates the default academic year, the class structure and the subjects
taught at each level. Safe to run repeatedly: existing rows are left as
they are and only missing ones are added.

Usage:
    python manage.py seed_school
    python manage.py seed_school --year 2026-2027
"""

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
import logging

from academics.models import AcademicYear, SchoolClass, Subject
from academics.utils import validate_academic_year_format

logger = logging.getLogger(__name__)

DEFAULT_ACADEMIC_YEAR = "2025-2026"

CLASS_STRUCTURE = [
    ('Nursery', ['Nursery 1', 'Nursery 2', 'Nursery 3']),
    ('Primary', [f'Primary {n}' for n in range(1, 7)]),
    ('Junior Secondary', ['JSS 1', 'JSS 2', 'JSS 3']),
    ('Senior Secondary', ['SSS 1', 'SSS 2', 'SSS 3']),
]

BASIC_SUBJECTS = [
    ('English Language', 'ENG'),
    ('Mathematics', 'MATH'),
    ('Basic Science', 'BSC'),
    ('Social Studies', 'SS'),
    ('Creative Arts', 'CA'),
    ('Physical Education', 'PE'),
]

SECONDARY_SUBJECTS = [
    ('English Language', 'ENG'),
    ('Mathematics', 'MATH'),
    ('Biology', 'BIO'),
    ('Chemistry', 'CHEM'),
    ('Physics', 'PHY'),
    ('Geography', 'GEO'),
    ('History', 'HIST'),
    ('Civic Education', 'CE'),
    ('Economics', 'ECON'),
    ('Agricultural Science', 'AGRIC'),
    ('Technical Drawing', 'TD'),
    ('Computer Studies', 'CS'),
]

SUBJECTS_BY_LEVEL = {
    'Nursery': BASIC_SUBJECTS,
    'Primary': BASIC_SUBJECTS,
    'Junior Secondary': SECONDARY_SUBJECTS,
    'Senior Secondary': SECONDARY_SUBJECTS,
}


class Command(BaseCommand):
    help = "Create the default academic year, classes and subjects"

    def add_arguments(self, parser):
        parser.add_argument(
            '--year',
            default=DEFAULT_ACADEMIC_YEAR,
            help=f"Academic year to create and activate (default {DEFAULT_ACADEMIC_YEAR})"
        )
        parser.add_argument(
            '--no-activate',
            action='store_true',
            help="Do not make the year the active one if another year is active"
        )

    @transaction.atomic
    def handle(self, *args, **options):
        year_name = options['year'].strip()
        is_valid, error = validate_academic_year_format(year_name)
        if not is_valid:
            raise CommandError(error)

        year, created = AcademicYear.objects.get_or_create(name=year_name)
        if created:
            self.stdout.write(f"Created academic year {year.name}")

        has_other_active = AcademicYear.objects.filter(is_active=True).exclude(pk=year.pk).exists()
        if not year.is_active and not (options['no_activate'] and has_other_active):
            year.set_active()
            self.stdout.write(f"Academic year {year.name} is now active")

        classes_created = 0
        subjects_created = 0

        for level, class_names in CLASS_STRUCTURE:
            for class_name in class_names:
                school_class, class_created = SchoolClass.objects.get_or_create(
                    name=class_name,
                    defaults={'level': level}
                )
                classes_created += int(class_created)

                for subject_name, code in SUBJECTS_BY_LEVEL[level]:
                    _, subject_created = Subject.objects.get_or_create(
                        school_class=school_class,
                        code=code,
                        defaults={'name': subject_name}
                    )
                    subjects_created += int(subject_created)

        logger.info(
            f"Seeded school structure: {classes_created} classes, "
            f"{subjects_created} subjects for {year.name}"
        )
        self.stdout.write(self.style.SUCCESS(
            f"Seed complete: {classes_created} classes and {subjects_created} subjects created"
        ))
