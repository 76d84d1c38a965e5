from datetime import date, datetime, timezone

import pytest

from portal.services.grade_summary import (
    NO_DATA,
    NoData,
    Percent,
    compute_category_breakdown,
    compute_category_weights,
    compute_current_grade_percent,
    compute_missing_assignment_count,
    letter_from_percent,
    normalize_status,
    parse_points,
    parse_timestamp,
    summarize_student,
)

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

HOMEWORK_ONLY = {
    "categories": [{"name": "Homework", "weight_pct": 100}],
    "late_penalty_per_day_pct": 10,
    "max_late_penalty_pct": 50,
}


def assignment(id_, category="Homework", points=100, due_at="2020-01-01"):
    return {"id": id_, "category": category, "points": points, "due_at": due_at}


def grade(assignment_id, points_earned=None, status="graded", late_days_override=None):
    return {
        "assignment_id": assignment_id,
        "points_earned": points_earned,
        "status": status,
        "late_days_override": late_days_override,
    }


class TestEndToEnd:
    def test_graded_and_submitted(self):
        assignments = [assignment("a1")]
        grades = [grade("a1", 80)]

        assert compute_current_grade_percent(
            HOMEWORK_ONLY, assignments, grades, ["a1"], now=NOW
        ) == Percent(80.0)
        assert compute_missing_assignment_count(assignments, grades, ["a1"], now=NOW) == 0

    def test_unsubmitted_past_due_is_auto_zero_and_missing(self):
        assignments = [assignment("a1")]

        result = compute_current_grade_percent(HOMEWORK_ONLY, assignments, [], [], now=NOW)
        assert result == Percent(0.0)
        assert not isinstance(result, NoData)
        assert compute_missing_assignment_count(assignments, [], [], now=NOW) == 1


class TestCurrentGradePercent:
    def test_no_applicable_work_is_no_data_not_zero(self):
        assignments = [assignment("a1", due_at="2099-01-01")]
        result = compute_current_grade_percent(HOMEWORK_ONLY, assignments, [], [], now=NOW)
        assert result is NO_DATA
        assert result != Percent(0.0)

    def test_no_assignments_is_no_data(self):
        assert compute_current_grade_percent(HOMEWORK_ONLY, [], [], [], now=NOW) is NO_DATA

    def test_excused_is_ignored_entirely(self):
        assignments = [assignment("a1"), assignment("a2")]
        grades = [grade("a1", 0, status="excused"), grade("a2", 90)]
        assert compute_current_grade_percent(
            HOMEWORK_ONLY, assignments, grades, [], now=NOW
        ) == Percent(90.0)

    def test_only_excused_is_no_data(self):
        assignments = [assignment("a1")]
        grades = [grade("a1", 100, status="excused", late_days_override=3)]
        assert compute_current_grade_percent(HOMEWORK_ONLY, assignments, grades, [], now=NOW) is NO_DATA

    def test_points_earned_clamped_to_points_possible(self):
        assignments = [assignment("a1", points=100)]
        grades = [grade("a1", 150)]
        assert compute_current_grade_percent(
            HOMEWORK_ONLY, assignments, grades, [], now=NOW
        ) == Percent(100.0)

    def test_negative_points_earned_clamped_to_zero(self):
        assignments = [assignment("a1")]
        grades = [grade("a1", -5)]
        assert compute_current_grade_percent(
            HOMEWORK_ONLY, assignments, grades, [], now=NOW
        ) == Percent(0.0)

    def test_explicit_missing_counts_as_zero_even_if_submitted(self):
        assignments = [assignment("a1"), assignment("a2")]
        grades = [grade("a1", 100, status="missing"), grade("a2", 100)]
        assert compute_current_grade_percent(
            HOMEWORK_ONLY, assignments, grades, ["a1", "a2"], now=NOW
        ) == Percent(50.0)

    def test_submitted_but_ungraded_does_not_count(self):
        assignments = [assignment("a1")]
        assert compute_current_grade_percent(HOMEWORK_ONLY, assignments, [], ["a1"], now=NOW) is NO_DATA

    def test_future_ungraded_work_does_not_count(self):
        assignments = [assignment("a1", due_at="2099-01-01"), assignment("a2")]
        grades = [grade("a2", 70)]
        assert compute_current_grade_percent(
            HOMEWORK_ONLY, assignments, grades, [], now=NOW
        ) == Percent(70.0)

    def test_graded_future_work_counts(self):
        assignments = [assignment("a1", due_at="2099-01-01")]
        grades = [grade("a1", 40)]
        assert compute_current_grade_percent(
            HOMEWORK_ONLY, assignments, grades, [], now=NOW
        ) == Percent(40.0)

    def test_late_penalty_is_capped(self):
        assignments = [assignment("a1")]
        grades = [grade("a1", 100, late_days_override=10)]
        assert compute_current_grade_percent(
            HOMEWORK_ONLY, assignments, grades, ["a1"], now=NOW
        ) == Percent(50.0)

    def test_late_penalty_below_cap(self):
        assignments = [assignment("a1")]
        grades = [grade("a1", 100, late_days_override=2)]
        result = compute_current_grade_percent(HOMEWORK_ONLY, assignments, grades, ["a1"], now=NOW)
        assert result.value == pytest.approx(80.0)

    def test_no_penalty_when_per_day_is_zero(self):
        settings = {**HOMEWORK_ONLY, "late_penalty_per_day_pct": 0}
        assignments = [assignment("a1")]
        grades = [grade("a1", 90, late_days_override=5)]
        assert compute_current_grade_percent(
            settings, assignments, grades, ["a1"], now=NOW
        ) == Percent(90.0)

    def test_late_days_override_is_clamped(self):
        settings = {**HOMEWORK_ONLY, "late_penalty_per_day_pct": 1, "max_late_penalty_pct": 100}
        assignments = [assignment("a1")]
        grades = [grade("a1", 100, late_days_override=1000)]
        # 365 days * 1% is capped at 100%
        assert compute_current_grade_percent(
            settings, assignments, grades, ["a1"], now=NOW
        ) == Percent(0.0)

    def test_negative_late_days_means_no_penalty(self):
        assignments = [assignment("a1")]
        grades = [grade("a1", 100, late_days_override=-4)]
        assert compute_current_grade_percent(
            HOMEWORK_ONLY, assignments, grades, ["a1"], now=NOW
        ) == Percent(100.0)

    def test_weighted_categories(self):
        settings = {
            "categories": [
                {"name": "Homework", "weight_pct": 30},
                {"name": "Tests", "weight_pct": 70},
            ],
        }
        assignments = [assignment("h1"), assignment("t1", category="Tests", points=50)]
        grades = [grade("h1", 100), grade("t1", 25)]
        result = compute_current_grade_percent(settings, assignments, grades, [], now=NOW)
        assert result.value == pytest.approx(65.0)

    def test_equal_weight_fallback(self):
        settings = {"categories": [{"name": "Homework", "weight_pct": 0}]}
        assignments = [assignment("h1"), assignment("l1", category="Labs")]
        grades = [grade("h1", 80), grade("l1", 60)]
        result = compute_current_grade_percent(settings, assignments, grades, [], now=NOW)
        assert result.value == pytest.approx(70.0)

    def test_unlisted_category_gets_zero_weight_when_others_have_weight(self):
        settings = {"categories": [{"name": "Homework", "weight_pct": 50}]}
        assignments = [assignment("h1"), assignment("x1", category="Extra")]
        grades = [grade("h1", 90), grade("x1", 10)]
        assert compute_current_grade_percent(
            settings, assignments, grades, [], now=NOW
        ) == Percent(90.0)

    def test_category_names_are_case_insensitive(self):
        settings = {
            "categories": [
                {"name": "homework", "weight_pct": 100},
                {"name": "Tests", "weight_pct": 0},
            ],
        }
        assignments = [assignment("h1", category="  HOMEWORK "), assignment("t1", category="tests")]
        grades = [grade("h1", 60), grade("t1", 100)]
        assert compute_current_grade_percent(
            settings, assignments, grades, [], now=NOW
        ) == Percent(60.0)

    def test_blank_category_defaults_to_homework(self):
        settings = {
            "categories": [
                {"name": "Homework", "weight_pct": 100},
                {"name": "Tests", "weight_pct": 0},
            ],
        }
        assignments = [assignment("h1", category="   "), {"id": "h2", "points": 100}]
        grades = [grade("h1", 50), grade("h2", 100)]
        rows = compute_category_breakdown(settings, assignments, grades, [], now=NOW)
        assert [r.key for r in rows] == ["homework"]
        assert rows[0].possible == 200

    def test_invalid_points_default_to_100(self):
        assignments = [assignment("a1", points="lots")]
        grades = [grade("a1", 50)]
        assert compute_current_grade_percent(
            HOMEWORK_ONLY, assignments, grades, [], now=NOW
        ) == Percent(50.0)

    def test_order_of_assignments_does_not_matter(self):
        settings = {
            "categories": [
                {"name": "Homework", "weight_pct": 25},
                {"name": "Quizzes", "weight_pct": 35},
                {"name": "Tests", "weight_pct": 40},
            ],
        }
        assignments = [
            assignment("h1", points=10),
            assignment("q1", category="Quizzes", points=20),
            assignment("t1", category="Tests", points=30),
            assignment("h2", points=15),
        ]
        grades = [grade("h1", 7), grade("q1", 13), grade("t1", 29), grade("h2", 11)]

        forward = compute_current_grade_percent(settings, assignments, grades, [], now=NOW)
        backward = compute_current_grade_percent(
            settings, list(reversed(assignments)), grades, [], now=NOW
        )
        assert forward.value == pytest.approx(backward.value)

    def test_result_is_clamped_to_100(self):
        settings = {"categories": [{"name": "Homework", "weight_pct": 100}]}
        assignments = [assignment("a1"), assignment("a2")]
        grades = [grade("a1", 100), grade("a2", 999)]
        assert compute_current_grade_percent(
            settings, assignments, grades, [], now=NOW
        ) == Percent(100.0)

    def test_unparseable_due_date_is_never_past_due(self):
        assignments = [assignment("a1", due_at="not a date")]
        assert compute_current_grade_percent(HOMEWORK_ONLY, assignments, [], [], now=NOW) is NO_DATA

    def test_malformed_inputs_do_not_raise(self):
        assert compute_current_grade_percent(None, "nope", None, None, now=NOW) is NO_DATA
        assert compute_current_grade_percent(
            {"categories": "bad", "late_penalty_per_day_pct": "x"},
            [None, 5, {"id": ""}, assignment("a1", points=float("nan"))],
            [None, {"assignment_id": None}, grade("a1", "abc", status=42)],
            "a1",
            now="garbage",
        ) == Percent(0.0)

    def test_numeric_strings_are_accepted(self):
        assignments = [assignment("a1", points="50")]
        grades = [grade("a1", "40")]
        assert compute_current_grade_percent(
            HOMEWORK_ONLY, assignments, grades, [], now=NOW
        ) == Percent(80.0)

    def test_integer_ids_match_string_submission_ids(self):
        assignments = [assignment(7)]
        assert compute_current_grade_percent(HOMEWORK_ONLY, assignments, [], ["7"], now=NOW) is NO_DATA
        assert compute_missing_assignment_count(assignments, [], {"7"}, now=NOW) == 0

    @pytest.mark.parametrize("falsy_id", [0, False, "", None])
    def test_falsy_assignment_ids_are_skipped(self, falsy_id):
        assignments = [assignment(falsy_id)]
        assert compute_current_grade_percent(HOMEWORK_ONLY, assignments, [], [], now=NOW) is NO_DATA
        assert compute_missing_assignment_count(assignments, [], [], now=NOW) == 0

    def test_grade_with_falsy_assignment_id_is_ignored(self):
        assignments = [assignment("a1", due_at="2099-01-01")]
        grades = [grade(0, 50), grade(False, 50)]
        assert compute_current_grade_percent(HOMEWORK_ONLY, assignments, grades, [], now=NOW) is NO_DATA

    def test_boolean_points_earned_is_ungraded(self):
        assignments = [assignment("a1", due_at="2099-01-01")]
        grades = [grade("a1", True)]
        assert compute_current_grade_percent(HOMEWORK_ONLY, assignments, grades, [], now=NOW) is NO_DATA
        # past due and unsubmitted, so it falls back to auto-zero and counts as missing
        past_due = [assignment("a1")]
        assert compute_current_grade_percent(HOMEWORK_ONLY, past_due, grades, [], now=NOW) == Percent(0.0)
        assert compute_missing_assignment_count(past_due, grades, [], now=NOW) == 1


class TestMissingAssignmentCount:
    def test_submission_and_grading_progression(self):
        assignments = [assignment("a1")]

        assert compute_missing_assignment_count(assignments, [], [], now=NOW) == 1
        # submitted, even ungraded
        assert compute_missing_assignment_count(assignments, [], ["a1"], now=NOW) == 0
        # graded with a numeric score, including zero
        assert compute_missing_assignment_count(assignments, [grade("a1", 0)], [], now=NOW) == 0
        # explicitly marked missing always counts
        assert compute_missing_assignment_count(
            assignments, [grade("a1", 50, status="missing")], ["a1"], now=NOW
        ) == 1

    def test_excused_is_never_missing(self):
        assignments = [assignment("a1")]
        grades = [grade("a1", status="excused")]
        assert compute_missing_assignment_count(assignments, grades, [], now=NOW) == 0

    def test_not_past_due_is_never_missing(self):
        assignments = [
            assignment("a1", due_at="2099-01-01"),
            assignment("a2", due_at=None),
            assignment("a3", due_at=""),
        ]
        grades = [grade("a1", status="missing")]
        assert compute_missing_assignment_count(assignments, grades, [], now=NOW) == 0

    def test_due_exactly_now_is_not_past_due(self):
        assignments = [assignment("a1", due_at=NOW.isoformat())]
        assert compute_missing_assignment_count(assignments, [], [], now=NOW) == 0

    def test_grade_record_without_points_is_still_missing(self):
        assignments = [assignment("a1")]
        grades = [grade("a1", None, status="late")]
        assert compute_missing_assignment_count(assignments, grades, [], now=NOW) == 1

    def test_counts_each_assignment_once(self):
        assignments = [assignment("a1"), assignment("a2"), assignment("a3")]
        grades = [grade("a2", 10)]
        assert compute_missing_assignment_count(assignments, grades, ["a3"], now=NOW) == 1


class TestBreakdown:
    def test_effective_weights_after_fallback(self):
        settings = {"categories": []}
        assignments = [assignment("h1"), assignment("t1", category="Tests", points=50)]
        grades = [grade("h1", 80), grade("t1", 50)]

        rows = compute_category_breakdown(settings, assignments, grades, [], now=NOW)
        assert [(r.key, r.earned, r.possible, r.percent, r.weight) for r in rows] == [
            ("homework", 80, 100, 80.0, 50.0),
            ("tests", 50, 50, 100.0, 50.0),
        ]

    def test_empty_when_no_data(self):
        assert compute_category_breakdown(HOMEWORK_ONLY, [], [], [], now=NOW) == []

    def test_summary_bundles_everything(self):
        assignments = [assignment("a1"), assignment("a2")]
        grades = [grade("a1", 92.5)]

        summary = summarize_student(HOMEWORK_ONLY, assignments, grades, [], now=NOW)
        # a2 is past due and unsubmitted: 92.5 / 200
        assert summary.percent == pytest.approx(46.25)
        assert summary.letter == "F"
        assert summary.missing_count == 1
        assert len(summary.categories) == 1

    def test_summary_without_data(self):
        summary = summarize_student(HOMEWORK_ONLY, [], [], [], now=NOW)
        assert summary.current_grade is NO_DATA
        assert summary.percent is None
        assert summary.letter == "N/A"
        assert summary.missing_count == 0


class TestNormalization:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (42, 42),
            ("7", 7),
            (42.5, 43),
            (0.5, 1),
            (0, 100),
            (0.4, 100),
            (101, 100),
            (-3, 100),
            (None, 100),
            ("", 100),
            ("abc", 100),
            (float("inf"), 100),
        ],
    )
    def test_parse_points(self, value, expected):
        assert parse_points(value) == expected

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("graded", "graded"),
            (" EXCUSED ", "excused"),
            ("Missing", "missing"),
            ("late", "late"),
            ("submitted", "graded"),
            (None, "graded"),
            (3, "graded"),
        ],
    )
    def test_normalize_status(self, value, expected):
        assert normalize_status(value) == expected

    @pytest.mark.parametrize(
        "value,expected",
        [
            (100, "A+"),
            (97, "A+"),
            (96.99, "A"),
            (93, "A"),
            (92.5, "A-"),
            (90, "A-"),
            (88, "B+"),
            (83, "B"),
            (80, "B-"),
            (77, "C+"),
            (73, "C"),
            (70, "C-"),
            (67, "D+"),
            (63, "D"),
            (60, "D-"),
            (59.99, "F"),
            (0, "F"),
            (float("nan"), "N/A"),
            (float("inf"), "N/A"),
            (None, "N/A"),
            ("n/a", "N/A"),
        ],
    )
    def test_letter_from_percent(self, value, expected):
        assert letter_from_percent(value) == expected

    def test_letter_from_variants(self):
        assert letter_from_percent(Percent(88.0)) == "B+"
        assert letter_from_percent(NO_DATA) == "N/A"

    def test_category_weights(self):
        settings = {
            "categories": [
                {"name": " Homework ", "weight_pct": 30.4},
                {"name": "", "weight_pct": 50},
                {"name": "Tests", "weight_pct": "abc"},
                {"name": "Labs", "weight_pct": 250},
                {"name": "Quizzes", "weight_pct": -10},
                "not a category",
            ],
        }
        assert compute_category_weights(settings) == {"homework": 30, "labs": 100, "quizzes": 0}

    def test_parse_timestamp(self):
        assert parse_timestamp("2020-01-01") == datetime(2020, 1, 1, tzinfo=timezone.utc)
        assert parse_timestamp("2020-01-01T10:00:00Z") == datetime(2020, 1, 1, 10, tzinfo=timezone.utc)
        assert parse_timestamp(date(2020, 1, 1)) == datetime(2020, 1, 1, tzinfo=timezone.utc)
        assert parse_timestamp(datetime(2020, 1, 1)).tzinfo is timezone.utc
        assert parse_timestamp("yesterday") is None
        assert parse_timestamp(12345) is None
