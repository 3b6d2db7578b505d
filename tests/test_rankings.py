# tests/test_rankings.py

import copy
from decimal import Decimal

import pytest

from academics.rankings import (
    partition_scores,
    aggregate_student_scores,
    assign_carry_forward_ranks,
    rank_class,
    rank_school_top,
    rank_students,
    subject_stats,
)
from conftest import score_record


def _single_subject_class(averages, class_id="c1"):
    return [
        score_record(f"st{index:02d}", score, class_id=class_id, student_name=f"Student {index:02d}")
        for index, score in enumerate(averages, start=1)
    ]


class TestCarryForwardRanks:

    def test_tied_top_pair_shares_rank_and_next_skips(self):
        ranked = rank_class(_single_subject_class([90, 90, 80]), "c1")
        assert [entry['rank'] for entry in ranked] == [1, 1, 3]

    def test_tie_in_the_middle(self):
        ranked = rank_class(_single_subject_class([90, 80, 80, 70]), "c1")
        assert [entry['rank'] for entry in ranked] == [1, 2, 2, 4]

    def test_all_equal(self):
        ranked = rank_class(_single_subject_class([75, 75, 75]), "c1")
        assert [entry['rank'] for entry in ranked] == [1, 1, 1]

    def test_ranks_follow_positions_without_ties(self):
        ranked = rank_class(_single_subject_class([50, 95, 70]), "c1")
        assert [entry['average'] for entry in ranked] == [95, 70, 50]
        assert [entry['rank'] for entry in ranked] == [1, 2, 3]

    def test_assign_ranks_on_presorted_entries(self):
        entries = [{'student_id': str(n), 'average': avg} for n, avg in enumerate([88, 88, 88, 60])]
        ranks = [entry['rank'] for entry in assign_carry_forward_ranks(entries)]
        assert ranks == [1, 1, 1, 4]

    def test_tied_entries_ordered_by_name(self):
        records = [
            score_record("b", 80, student_name="Zainab Kamara"),
            score_record("a", 80, student_name="Abu Sesay"),
        ]
        ranked = rank_class(records, "c1")
        assert [entry['student_name'] for entry in ranked] == ["Abu Sesay", "Zainab Kamara"]


class TestAggregation:

    def test_average_is_rounded_half_up(self):
        records = [
            score_record("s1", 82, subject_id="math"),
            score_record("s1", 83, subject_id="eng"),
        ]
        entry = aggregate_student_scores(records)[0]
        assert entry['average'] == 83
        assert entry['total_score'] == 165
        assert entry['subject_count'] == 2

    def test_decimal_scores(self):
        records = [
            score_record("s1", Decimal('70.50'), subject_id="math"),
            score_record("s1", Decimal('70.00'), subject_id="eng"),
        ]
        entry = aggregate_student_scores(records)[0]
        assert entry['total_score'] == 140.5
        assert entry['average'] == 70

    def test_student_without_scores_does_not_appear(self):
        records = [score_record("s1", 60), score_record("s2", 140)]
        ranked = rank_students(records)
        assert [entry['student_id'] for entry in ranked] == ["s1"]

    def test_averages_stay_in_range(self):
        records = [score_record("s1", 0), score_record("s2", 100), score_record("s3", 49.5)]
        for entry in rank_students(records):
            assert 0 <= entry['average'] <= 100


class TestMalformedScores:

    @pytest.mark.parametrize("bad_score", [-1, 100.5, "abc", None, float('nan')])
    def test_malformed_score_is_excluded_with_warning(self, bad_score):
        records = [score_record("s1", 70), score_record("s2", bad_score)]
        valid, warnings = partition_scores(records)
        assert valid == [records[0]]
        assert len(warnings) == 1
        assert warnings[0]['code'] == 'MalformedScore'
        assert warnings[0]['student_id'] == "s2"

    def test_malformed_score_does_not_change_average(self):
        records = [
            score_record("s1", 80, subject_id="math"),
            score_record("s1", 250, subject_id="eng"),
        ]
        entry = rank_class(records, "c1")[0]
        assert entry['average'] == 80
        assert entry['subject_count'] == 1


class TestClassLeaderboard:

    def test_empty_input(self):
        assert rank_class([], "c1") == []

    def test_other_classes_are_ignored(self):
        records = _single_subject_class([90, 80], class_id="c1") + [
            score_record("other", 99, class_id="c2")
        ]
        ranked = rank_class(records, "c1")
        assert "other" not in [entry['student_id'] for entry in ranked]
        assert len(ranked) == 2

    def test_unknown_class_gives_empty_leaderboard(self):
        assert rank_class(_single_subject_class([90]), "missing") == []

    def test_input_is_not_mutated_and_result_is_repeatable(self):
        records = _single_subject_class([90, 90, 80, 65])
        snapshot = copy.deepcopy(records)

        first = rank_class(records, "c1")
        second = rank_class(records, "c1")

        assert records == snapshot
        assert first == second

    def test_ranks_never_decrease(self):
        ranked = rank_class(_single_subject_class([40, 90, 90, 55, 70, 70, 100]), "c1")
        ranks = [entry['rank'] for entry in ranked]
        assert ranks == sorted(ranks)
        assert ranks[0] == 1


class TestSchoolTop:

    def test_truncates_to_n(self):
        records = _single_subject_class(list(range(50, 65)))
        top = rank_school_top(records, 10)
        assert len(top) == 10
        assert top[0]['average'] == 64
        assert top[-1]['average'] == 55

    def test_spans_classes(self):
        records = [
            score_record("a", 70, class_id="c1"),
            score_record("b", 95, class_id="c2"),
            score_record("c", 80, class_id="c3"),
        ]
        top = rank_school_top(records, 10)
        assert [entry['student_id'] for entry in top] == ["b", "c", "a"]
        assert [entry['class_id'] for entry in top] == ["c2", "c3", "c1"]

    def test_tie_across_cutoff_is_dropped(self):
        records = _single_subject_class([90, 80, 80])
        top = rank_school_top(records, 2)
        assert len(top) == 2
        assert [entry['rank'] for entry in top] == [1, 2]

    def test_fewer_students_than_n(self):
        assert len(rank_school_top(_single_subject_class([60, 70]), 10)) == 2

    def test_zero_size(self):
        assert rank_school_top(_single_subject_class([60, 70]), 0) == []


class TestSubjectStats:

    def test_average_highest_lowest(self):
        records = [
            score_record("s1", 80, subject_id="math", subject_name="Mathematics"),
            score_record("s2", 65, subject_id="math", subject_name="Mathematics"),
            score_record("s3", 90, subject_id="math", subject_name="Mathematics"),
            score_record("s1", 50, subject_id="eng", subject_name="English Language"),
        ]
        stats = subject_stats(records, "c1")

        assert [stat['subject_id'] for stat in stats] == ["math", "eng"]
        math = stats[0]
        assert math['average'] == 78
        assert math['highest'] == 90
        assert math['lowest'] == 65
        assert math['sample_count'] == 3
        assert math['lowest'] <= math['average'] <= math['highest']

    def test_excludes_malformed_and_other_classes(self):
        records = [
            score_record("s1", 60, subject_id="math"),
            score_record("s2", 120, subject_id="math"),
            score_record("s3", 100, subject_id="math", class_id="c2"),
        ]
        stats = subject_stats(records, "c1")
        assert len(stats) == 1
        assert stats[0]['highest'] == 60
        assert stats[0]['sample_count'] == 1

    def test_empty(self):
        assert subject_stats([], "c1") == []
