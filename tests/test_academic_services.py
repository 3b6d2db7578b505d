# tests/test_academic_services.py

import logging
from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError

from academics.models import AcademicYear, ReportCard
from academics.services import (
    AcademicYearService,
    SubjectService,
    ReportCardService,
    LeaderboardService,
)
from academics.stats import get_student_report_summary, get_academic_dashboard_statistics

pytestmark = pytest.mark.django_db


@pytest.fixture
def ranked_class(jss1, subjects, academic_year, make_student):
    """Three JSS 1 students averaging 90, 90 and 80 in the first term"""
    scores = {
        "Aminata Bangura": (90, 90),
        "Mohamed Conteh": (95, 85),
        "Fatmata Koroma": (80, 80),
    }
    students = {}
    for name, (eng, math) in scores.items():
        student = make_student(name, jss1)
        ReportCardService.record_score(student, subjects['ENG'], 'first', academic_year, eng)
        ReportCardService.record_score(student, subjects['MATH'], 'first', academic_year, math)
        students[name] = student
    return students


class TestAcademicYearService:

    def test_first_year_becomes_active(self):
        year = AcademicYearService.create_year("2025-2026")
        assert year.is_active

    def test_later_year_is_not_activated_by_default(self, academic_year):
        year = AcademicYearService.create_year("2026-2027")
        assert not year.is_active
        assert AcademicYear.get_active() == academic_year

    def test_only_one_active_year(self, academic_year):
        year = AcademicYearService.create_year("2026-2027", make_active=True)
        academic_year.refresh_from_db()
        assert year.is_active
        assert not academic_year.is_active
        assert AcademicYear.objects.filter(is_active=True).count() == 1

    @pytest.mark.parametrize("name", ["2025", "2025-2027", "twenty"])
    def test_bad_name_rejected(self, name):
        with pytest.raises(ValidationError) as exc:
            AcademicYearService.create_year(name)
        assert exc.value.code == 'invalid_year_name'

    def test_duplicate_name_rejected(self, academic_year):
        with pytest.raises(ValidationError) as exc:
            AcademicYearService.create_year(academic_year.name)
        assert exc.value.code == 'duplicate_year'

    def test_active_year_cannot_be_deleted(self, academic_year):
        with pytest.raises(ValidationError) as exc:
            AcademicYearService.delete_year(academic_year)
        assert exc.value.code == 'active_year'

    def test_inactive_year_can_be_deleted(self, other_year):
        AcademicYearService.delete_year(other_year)
        assert not AcademicYear.objects.filter(name="2024-2025").exists()

    def test_year_with_scores_cannot_be_deleted(self, other_year, jss1, subjects, make_student):
        pupil = make_student("Aminata Bangura", jss1)
        ReportCardService.record_score(pupil, subjects['ENG'], 'first', other_year, 70)

        with pytest.raises(ValidationError) as exc:
            AcademicYearService.delete_year(other_year)
        assert exc.value.code == 'year_has_scores'
        assert AcademicYear.objects.filter(name="2024-2025").exists()

    def test_rename_carries_scores_along(self, ranked_class, academic_year):
        AcademicYearService.rename_year(academic_year, "2030-2031")
        assert ReportCard.objects.filter(academic_year="2030-2031").count() == 6
        assert not ReportCard.objects.filter(academic_year="2025-2026").exists()


class TestSubjectService:

    def test_code_is_uppercased(self, jss2):
        subject = SubjectService.add_subject(jss2, "Physics", " phy ")
        assert subject.code == "PHY"

    def test_duplicate_code_rejected(self, subjects, jss1):
        with pytest.raises(ValidationError) as exc:
            SubjectService.add_subject(jss1, "Maths Again", "MATH")
        assert exc.value.code == 'duplicate_subject'

    def test_retired_subject_is_reactivated(self, subjects, jss1):
        SubjectService.deactivate_subject(subjects['BIO'])
        assert subjects['BIO'] not in jss1.get_active_subjects()

        subject = SubjectService.add_subject(jss1, "Biology", "BIO")
        assert subject.pk == subjects['BIO'].pk
        assert subject.is_active


class TestReportCardService:

    def test_record_then_update(self, jss1, subjects, academic_year, make_student):
        student = make_student("Isatu Kamara", jss1)

        report_card, created = ReportCardService.record_score(
            student, subjects['ENG'], 'first', academic_year, 72
        )
        assert created
        assert report_card.academic_year == academic_year.name
        assert report_card.academic_year_ref == academic_year

        report_card, created = ReportCardService.record_score(
            student, subjects['ENG'], 'first', academic_year, Decimal('78.5')
        )
        assert not created
        assert report_card.score == Decimal('78.5')
        assert ReportCard.objects.filter(student=student).count() == 1

    @pytest.mark.parametrize("score", [-5, 101, "abc", None])
    def test_malformed_score_rejected(self, jss1, subjects, academic_year, make_student, score):
        student = make_student("Isatu Kamara", jss1)
        with pytest.raises(ValidationError) as exc:
            ReportCardService.record_score(student, subjects['ENG'], 'first', academic_year, score)
        assert exc.value.code == 'MalformedScore'
        assert not ReportCard.objects.exists()

    def test_unknown_term_rejected(self, jss1, subjects, academic_year, make_student):
        student = make_student("Isatu Kamara", jss1)
        with pytest.raises(ValidationError) as exc:
            ReportCardService.record_score(student, subjects['ENG'], 'fourth', academic_year, 50)
        assert exc.value.code == 'invalid_term'

    def test_retired_subject_rejected(self, jss1, subjects, academic_year, make_student):
        student = make_student("Isatu Kamara", jss1)
        SubjectService.deactivate_subject(subjects['BIO'])
        with pytest.raises(ValidationError) as exc:
            ReportCardService.record_score(student, subjects['BIO'], 'first', academic_year, 50)
        assert exc.value.code == 'inactive_subject'

    def test_ungraded_subjects(self, jss1, subjects, academic_year, make_student):
        student = make_student("Isatu Kamara", jss1)
        ReportCardService.record_score(student, subjects['ENG'], 'first', academic_year, 64)

        ungraded = ReportCardService.get_ungraded_subjects(student, 'first', academic_year)
        assert {subject.code for subject in ungraded} == {"MATH", "BIO"}


class TestLeaderboards:

    def test_class_leaderboard_uses_carry_forward_ranks(self, ranked_class, jss1, academic_year):
        leaderboard = LeaderboardService.build_class_leaderboard(jss1, 'first', academic_year)

        ranks = [(entry['student_name'], entry['rank']) for entry in leaderboard['entries']]
        assert ranks == [("Aminata Bangura", 1), ("Mohamed Conteh", 1), ("Fatmata Koroma", 3)]
        assert leaderboard['warnings'] == []

    def test_malformed_score_warned_once(self, caplog, ranked_class, jss1, subjects, academic_year):
        ReportCard.objects.filter(
            student=ranked_class["Fatmata Koroma"], subject=subjects['MATH']
        ).update(score=Decimal('150'))

        with caplog.at_level(logging.WARNING, logger='academics.rankings'):
            leaderboard = LeaderboardService.build_class_leaderboard(jss1, 'first', academic_year)
            LeaderboardService.build_subject_performance(jss1, 'first', academic_year)
            LeaderboardService.build_school_leaderboard('first', academic_year)

        excluded = [r for r in caplog.records if "was excluded" in r.getMessage()]
        assert len(excluded) == 3
        assert len(leaderboard['warnings']) == 1

    def test_other_terms_are_not_counted(self, ranked_class, jss1, academic_year):
        leaderboard = LeaderboardService.build_class_leaderboard(jss1, 'second', academic_year)
        assert leaderboard['entries'] == []

    def test_school_leaderboard_size_from_settings(self, settings, ranked_class, jss2, academic_year,
                                                   make_student):
        settings.LEADERBOARD_SIZE = 2
        physics = SubjectService.add_subject(jss2, "Physics", "PHY")
        top_student = make_student("Hawa Sesay", jss2)
        ReportCardService.record_score(top_student, physics, 'first', academic_year, 99)

        leaderboard = LeaderboardService.build_school_leaderboard('first', academic_year)

        assert leaderboard['size'] == 2
        assert len(leaderboard['entries']) == 2
        assert leaderboard['entries'][0]['student_name'] == "Hawa Sesay"
        assert leaderboard['entries'][0]['class_name'] == "JSS 2"

    def test_subject_performance(self, ranked_class, jss1, academic_year):
        performance = LeaderboardService.build_subject_performance(jss1, 'first', academic_year)
        by_code = {stat['subject_name']: stat for stat in performance['subjects']}

        english = by_code["English Language"]
        assert english['highest'] == 95
        assert english['lowest'] == 80
        assert english['average'] == 88
        assert english['sample_count'] == 3


class TestReportSummary:

    def test_position_and_average(self, ranked_class, academic_year):
        student = ranked_class["Fatmata Koroma"]
        report = get_student_report_summary(student, 'first', academic_year)

        assert report['subject_count'] == 2
        assert report['total_score'] == 160
        assert report['average'] == 80
        assert report['position'] == 3
        assert report['class_size'] == 3
        assert report['term_display'] == "First Term"

    def test_nothing_graded(self, jss1, academic_year, make_student):
        student = make_student("New Pupil", jss1)
        report = get_student_report_summary(student, 'first', academic_year)
        assert report['average'] == 0
        assert report['position'] is None

    def test_dashboard_statistics(self, ranked_class, academic_year):
        stats = get_academic_dashboard_statistics(academic_year)
        assert stats['total_students'] == 3
        assert stats['graded_records'] == 6
        assert stats['graded_by_term'] == {'first': 6, 'second': 0, 'third': 0}
