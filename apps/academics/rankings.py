# academics/rankings.py

"""
Leaderboards and subject performance.

Pure computation over score records already fetched for one term and
academic year. Nothing here touches the database, the clock or any
global state: the same input always produces the same output, and the
input records are never mutated.

A score record is a dict with the keys:
    student_id, student_name, admission_number, class_id,
    subject_id, subject_name, term, academic_year, score

Ranking rule ("carry-forward"):
    Entries are sorted by average, highest first. The first entry is
    rank 1. Each later entry copies the previous entry's rank when the
    averages are equal, otherwise it takes its 1-based position in the
    sorted list. Averages [90, 90, 80] therefore rank [1, 1, 3].
"""

from decimal import Decimal, InvalidOperation
import logging

from core.utils import round_half_up, to_plain_number

logger = logging.getLogger(__name__)

DEFAULT_LEADERBOARD_SIZE = 10

MIN_SCORE = Decimal('0')
MAX_SCORE = Decimal('100')


# =============================================================================
# INPUT VALIDATION
# =============================================================================

def _to_score(value):
    """Convert a raw score to Decimal, or None if it is not a usable number"""
    if value is None or isinstance(value, bool):
        return None
    try:
        score = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return None
    if not score.is_finite():
        return None
    return score


def partition_scores(records):
    """
    Split score records into usable records and malformed-score warnings.

    Scores are validated by the entry form before they are stored, so a
    bad score here means the data was written some other way. Such a
    record is left out of every aggregate instead of failing the whole
    leaderboard.

    Args:
        records: iterable of score record dicts

    Returns:
        tuple: (valid_records, warnings)
            valid_records: list of the records whose score is in [0, 100]
            warnings: list of dicts {code, student_id, subject_id, score, message}
    """
    valid = []
    warnings = []

    for record in records:
        score = _to_score(record.get('score'))
        if score is not None and MIN_SCORE <= score <= MAX_SCORE:
            valid.append(record)
            continue

        warning = {
            'code': 'MalformedScore',
            'student_id': record.get('student_id'),
            'subject_id': record.get('subject_id'),
            'score': record.get('score'),
            'message': (
                f"Score {record.get('score')!r} for student {record.get('student_id')} "
                f"in subject {record.get('subject_id')} is outside 0-100 and was excluded"
            ),
        }
        logger.warning(warning['message'])
        warnings.append(warning)

    return valid, warnings


def _same_class(record, class_id):
    return class_id is not None and str(record.get('class_id')) == str(class_id)


# =============================================================================
# AGGREGATION
# =============================================================================

def aggregate_student_scores(records):
    """
    Total and average each student's scores.

    Only students with at least one usable score appear; nobody is
    synthesized with an average of 0.

    Args:
        records: iterable of score record dicts

    Returns:
        list: one dict per student, in first-seen order:
            student_id, student_name, admission_number, class_id,
            total_score, subject_count, average
    """
    valid, _ = partition_scores(records)

    groups = {}
    for record in valid:
        student_id = record['student_id']
        group = groups.get(student_id)
        if group is None:
            group = {
                'student_id': student_id,
                'student_name': record.get('student_name', ''),
                'admission_number': record.get('admission_number', ''),
                'class_id': record.get('class_id'),
                'total': Decimal('0'),
                'count': 0,
            }
            groups[student_id] = group
        group['total'] += _to_score(record['score'])
        group['count'] += 1

    entries = []
    for group in groups.values():
        entries.append({
            'student_id': group['student_id'],
            'student_name': group['student_name'],
            'admission_number': group['admission_number'],
            'class_id': group['class_id'],
            'total_score': to_plain_number(group['total']),
            'subject_count': group['count'],
            'average': round_half_up(group['total'] / group['count']),
        })
    return entries


# =============================================================================
# RANKING
# =============================================================================

def sort_by_average(entries):
    """
    Order entries by average, highest first.

    Equal averages are ordered by student name then id so the result does
    not depend on the order rows came back from the database.
    """
    return sorted(
        entries,
        key=lambda entry: (-entry['average'], entry.get('student_name') or '', str(entry['student_id']))
    )


def assign_carry_forward_ranks(sorted_entries):
    """
    Attach ranks to entries already sorted by average (descending).

    Tied averages share the rank of the first entry in the tie; the next
    distinct average takes its position in the list, so [90, 90, 80]
    yields [1, 1, 3].

    Args:
        sorted_entries: list of aggregated entries, highest average first

    Returns:
        list: new dicts with a 'rank' key added
    """
    ranked = []
    previous = None

    for index, entry in enumerate(sorted_entries):
        if previous is not None and entry['average'] == previous['average']:
            rank = previous['rank']
        else:
            rank = index + 1
        ranked_entry = dict(entry, rank=rank)
        ranked.append(ranked_entry)
        previous = ranked_entry

    return ranked


def rank_students(records):
    """Aggregate, sort and rank score records"""
    return assign_carry_forward_ranks(sort_by_average(aggregate_student_scores(records)))


def rank_class(records, class_id):
    """
    Leaderboard for one class.

    Args:
        records: score records for one term and academic year
        class_id: class to rank; records for other classes are ignored

    Returns:
        list: ranked entries, highest average first ([] for no records)
    """
    return rank_students([record for record in records if _same_class(record, class_id)])


def rank_school_top(records, n=DEFAULT_LEADERBOARD_SIZE):
    """
    School-wide leaderboard truncated to the first n entries.

    Ranking happens over every student before truncating, so ranks are
    school-wide positions. A student at position n + 1 is dropped even
    when tied with position n.

    Args:
        records: score records for one term and academic year, all classes
        n: number of entries to keep

    Returns:
        list: at most n ranked entries
    """
    if n is None or n <= 0:
        return []
    return rank_students(records)[:n]


# =============================================================================
# SUBJECT STATISTICS
# =============================================================================

def subject_stats(records, class_id):
    """
    Per-subject average, highest and lowest score for one class.

    Args:
        records: score records for one term and academic year
        class_id: class whose subjects are summarised

    Returns:
        list: dicts {subject_id, subject_name, average, highest, lowest,
              sample_count} sorted by average, highest first
    """
    class_records = [record for record in records if _same_class(record, class_id)]
    valid, _ = partition_scores(class_records)

    groups = {}
    for record in valid:
        score = _to_score(record['score'])
        subject_id = record['subject_id']
        group = groups.get(subject_id)
        if group is None:
            group = {
                'subject_id': subject_id,
                'subject_name': record.get('subject_name', ''),
                'total': Decimal('0'),
                'highest': score,
                'lowest': score,
                'count': 0,
            }
            groups[subject_id] = group
        group['total'] += score
        group['highest'] = max(group['highest'], score)
        group['lowest'] = min(group['lowest'], score)
        group['count'] += 1

    stats = [
        {
            'subject_id': group['subject_id'],
            'subject_name': group['subject_name'],
            'average': round_half_up(group['total'] / group['count']),
            'highest': to_plain_number(group['highest']),
            'lowest': to_plain_number(group['lowest']),
            'sample_count': group['count'],
        }
        for group in groups.values()
    ]

    return sorted(
        stats,
        key=lambda stat: (-stat['average'], stat['subject_name'] or '', str(stat['subject_id']))
    )
