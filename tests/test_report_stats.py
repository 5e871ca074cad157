"""
Tests for services/report_stats.py

Run: pytest tests/test_report_stats.py -v
"""

from datetime import date

import pytest

from schemas.records import (
    Award,
    Certification,
    Committee,
    Community,
    Conference,
    Course,
    EvaluationTerm,
    Grant,
    Patent,
    Position,
    Publication,
    Recognition,
    Review,
    career_adapter,
    research_adapter,
)
from schemas.reports import ResearchStats, ServiceStats, TeachingStats
from services.report_stats import (
    career_stats,
    compute_scope_stats,
    evaluation_score,
    professional_stats,
    rating_trends,
    research_stats,
    safe_mean,
    service_stats,
    teaching_stats,
)


class TestSafeMean:
    def test_empty_is_zero(self):
        assert safe_mean([]) == 0.0

    def test_ignores_none(self):
        assert safe_mean([4.0, None, 5.0]) == 4.5

    def test_rounds_to_two_places(self):
        assert safe_mean([1.0, 1.0, 2.0]) == 1.33


class TestResearchStats:
    def test_publications_and_grant(self):
        outputs = [
            Publication(id=1, teacher_id=1, type="publication", title="A", impact_factor=4.0, citation_count=10),
            Publication(id=2, teacher_id=1, type="publication", title="B", impact_factor=6.0, citation_count=5),
            Grant(id=3, teacher_id=1, type="grant", title="NSF", funding_amount=250000),
        ]

        stats = research_stats(outputs)

        assert stats.publications == 2
        assert stats.grants == 1
        assert stats.patents == 0
        assert stats.total_funding == 250000
        assert stats.avg_impact_factor == 5.0
        assert stats.total_citations == 15
        assert stats.total_outputs == 3

    def test_publication_without_impact_factor_is_skipped_in_average(self):
        outputs = [
            Publication(id=1, teacher_id=1, type="publication", title="A", impact_factor=3.0),
            Publication(id=2, teacher_id=1, type="publication", title="B"),
        ]
        assert research_stats(outputs).avg_impact_factor == 3.0

    def test_empty(self):
        stats = research_stats([])
        assert stats.total_outputs == 0
        assert stats.avg_impact_factor == 0.0
        assert stats.total_funding == 0.0

    def test_patent_counts_only_toward_patents(self):
        stats = research_stats([Patent(id=1, teacher_id=1, type="patent", title="Method")])
        assert stats.patents == 1
        assert stats.total_funding == 0
        assert stats.total_citations == 0

    def test_grant_with_null_funding_counts_as_zero(self):
        grant = research_adapter.validate_python(
            {"id": 1, "teacher_id": 1, "type": "grant", "title": "Seed", "funding_amount": None}
        )
        assert research_stats([grant]).total_funding == 0


class TestServiceStats:
    def test_empty_service_is_all_zeros(self):
        stats = service_stats([])
        assert stats.total_contributions == 0
        assert stats.total_hours == 0
        assert stats.avg_hours_per_service == 0
        assert stats.ongoing == 0

    def test_counts_by_type_and_ongoing(self):
        contributions = [
            Committee(id=1, teacher_id=1, type="committee", title="Curriculum", workload_hours=40,
                      start_date=date(2022, 1, 1)),
            Review(id=2, teacher_id=1, type="review", title="Journal reviewer", workload_hours=20,
                   start_date=date(2021, 1, 1), end_date=date(2021, 12, 31)),
            Community(id=3, teacher_id=1, type="community", title="Code club", workload_hours=None),
        ]

        stats = service_stats(contributions)

        assert (stats.committees, stats.reviews, stats.community) == (1, 1, 1)
        assert stats.ongoing == 2
        assert stats.total_hours == 60
        assert stats.avg_hours_per_service == 20.0


class TestProfessionalStats:
    def test_counts_and_hours(self):
        activities = [
            Certification(id=1, teacher_id=1, type="certification", title="AWS", duration_hours=40),
            Conference(id=2, teacher_id=1, type="conference", title="NeurIPS", duration_hours=25),
        ]

        stats = professional_stats(activities)

        assert stats.certifications == 1
        assert stats.conferences == 1
        assert stats.trainings == 0
        assert stats.total_hours == 65
        assert stats.avg_hours_per_activity == 32.5


class TestCareerStats:
    def test_counts_by_type_and_level(self):
        events = [
            Position(id=1, teacher_id=1, type="position", title="Associate Professor"),
            Award(id=2, teacher_id=1, type="award", title="Best Paper", achievement_level="international"),
            Recognition(id=3, teacher_id=1, type="recognition", title="Dean's list", achievement_level="university"),
        ]

        stats = career_stats(events)

        assert (stats.positions, stats.awards, stats.recognitions) == (1, 1, 1)
        assert stats.international == 1
        assert stats.university == 1
        assert stats.national == 0

    def test_unknown_type_is_rejected_at_parse_time(self):
        with pytest.raises(ValueError):
            career_adapter.validate_python({"id": 1, "teacher_id": 1, "type": "sabbatical", "title": "X"})


class TestTeachingStats:
    def test_average_of_term_averages(self):
        courses = [
            Course(id=1, teacher_id=1, course_code="CS101", course_name="Intro", semester="Fall", year=2023,
                   enrollment=45),
            Course(id=2, teacher_id=1, course_code="CS201", course_name="Algo", semester="Spring", year=2024,
                   enrollment=None),
        ]
        evaluations = [
            EvaluationTerm(teacher_id=1, semester="Fall", year=2023, avg_overall=4.0, response_count=30),
            EvaluationTerm(teacher_id=1, semester="Spring", year=2024, avg_overall=5.0, response_count=10),
        ]

        stats = teaching_stats(courses, evaluations)

        assert stats.course_count == 2
        assert stats.total_enrollment == 45
        assert stats.avg_rating == 4.5
        assert stats.total_responses == 40
        assert stats.avg_teaching_quality == 0.0


class TestComputeScopeStats:
    def test_only_requested_domains_are_filled(self):
        stats = compute_scope_stats(frozenset({"research"}))
        assert stats.research is not None
        assert stats.teaching is None
        assert stats.service is None
        assert stats.professional is None
        assert stats.career is None

    def test_same_input_same_output(self):
        outputs = (Grant(id=1, teacher_id=1, type="grant", title="G", funding_amount=10),)
        domains = frozenset({"research", "service"})
        assert compute_scope_stats(domains, research=outputs) == compute_scope_stats(domains, research=outputs)


class TestRatingTrends:
    def test_oldest_term_first_with_semester_order(self):
        terms = [
            EvaluationTerm(teacher_id=1, semester="Fall", year=2024, avg_overall=4.6, response_count=12),
            EvaluationTerm(teacher_id=1, semester="Spring", year=2024, avg_overall=4.1, response_count=8),
            EvaluationTerm(teacher_id=1, semester="Winter", year=2023, avg_overall=3.9, response_count=3),
            EvaluationTerm(teacher_id=1, semester="Fall", year=2023, avg_overall=4.25, avg_teaching_quality=4.5,
                           response_count=2),
        ]

        points = rating_trends(terms)

        assert [p.period for p in points] == ["2023 Fall", "2023 Winter", "2024 Spring", "2024 Fall"]
        first = points[0]
        assert first.metrics.overall_rating == 4.25
        assert first.metrics.teaching_quality == 4.5
        assert first.metrics.course_content is None
        assert first.evaluation_count == 2

    def test_empty(self):
        assert rating_trends([]) == []


class TestEvaluationScore:
    def test_weighted_composite(self):
        score = evaluation_score(
            TeachingStats(avg_rating=4.25, avg_teaching_quality=4.5),
            ResearchStats(total_outputs=2, grants=1, total_funding=250000, avg_impact_factor=4.0),
            ServiceStats(total_contributions=1, total_hours=40),
        )

        # 4.25*0.4 + 3.0*0.3 + 0.7*0.15 + 5.0*0.15 = 3.455
        assert score.overall_score == 3.5
        assert score.teaching_effectiveness == 4.5
        assert score.research_output == 3.0
        assert score.service_contribution == 0.7
        assert score.grant_funding == 5.0

    def test_component_scores_are_capped_at_five(self):
        score = evaluation_score(
            TeachingStats(avg_rating=5.0, avg_teaching_quality=5.0),
            ResearchStats(total_outputs=40, avg_impact_factor=9.5, total_funding=2_000_000),
            ServiceStats(total_contributions=30, total_hours=900),
        )

        assert score.research_output == 5.0
        assert score.service_contribution == 5.0
        assert score.grant_funding == 5.0
        assert score.overall_score == 5.0

    def test_missing_domains_score_zero(self):
        assert evaluation_score(None, None, None) == evaluation_score(
            TeachingStats(), ResearchStats(), ServiceStats()
        )
        assert evaluation_score(None, None, None).overall_score == 0.0
