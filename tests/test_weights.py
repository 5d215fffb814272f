"""Tests for category weights and per-item assessment weights."""

import pytest

from app.core.grading_errors import GradingErrorException
from app.domains.scores.services import ScoreAggregator
from app.domains.weights.services import DEFAULT_WEIGHTS, WeightStore
from app.models.grading import AssessmentType, GradingWeight
from conftest import auth_headers


# ── Service ──────────────────────────────────────────────────

class TestWeightStore:
    def test_exact_hundred_accepted(self, db_session, course):
        row = WeightStore(db_session).set_weights(
            course.id, "prof-uuid", {"assignment": 20, "quiz": 20, "midterm": 25, "final": 35}
        )
        assert row.as_dict() == {
            AssessmentType.ASSIGNMENT: 20,
            AssessmentType.QUIZ: 20,
            AssessmentType.MIDTERM: 25,
            AssessmentType.FINAL: 35,
        }

    def test_sum_of_99_rejected_without_writing(self, db_session, course):
        store = WeightStore(db_session)
        with pytest.raises(GradingErrorException) as exc:
            store.set_weights(course.id, None, {"assignment": 20, "quiz": 20, "midterm": 25, "final": 34})
        assert exc.value.status_code == 400
        assert exc.value.error_code == "WEIGHTS_SUM_INVALID"
        assert store.get_weights(course.id) is None

    def test_sum_within_tolerance_accepted(self, db_session, course):
        row = WeightStore(db_session).set_weights(
            course.id, None, {"assignment": 20.0005, "quiz": 20, "midterm": 25, "final": 35}
        )
        assert row.assignment_weight == pytest.approx(20.0005)

    def test_sum_outside_tolerance_rejected(self, db_session, course):
        with pytest.raises(GradingErrorException):
            WeightStore(db_session).set_weights(
                course.id, None, {"assignment": 20.01, "quiz": 20, "midterm": 25, "final": 35}
            )

    def test_negative_weight_rejected(self, db_session, course):
        with pytest.raises(GradingErrorException) as exc:
            WeightStore(db_session).validate_weights({"assignment": -10, "quiz": 50, "midterm": 25, "final": 35})
        assert exc.value.error_code == "INVALID_WEIGHT"

    def test_unknown_category_rejected(self, db_session):
        with pytest.raises(GradingErrorException) as exc:
            WeightStore(db_session).validate_weights({"homework": 20})
        assert exc.value.error_code == "INVALID_ASSESSMENT_TYPE"

    def test_missing_categories_use_defaults(self, db_session, course):
        row = WeightStore(db_session).set_weights(course.id, None, {"assignment": 20, "quiz": 20})
        assert row.midterm_weight == DEFAULT_WEIGHTS[AssessmentType.MIDTERM]
        assert row.final_weight == DEFAULT_WEIGHTS[AssessmentType.FINAL]

    def test_resubmission_overwrites_single_row(self, db_session, course):
        store = WeightStore(db_session)
        store.set_weights(course.id, None, {"assignment": 20, "quiz": 20, "midterm": 25, "final": 35})
        store.set_weights(course.id, None, {"assignment": 10, "quiz": 10, "midterm": 30, "final": 50})
        rows = db_session.query(GradingWeight).filter(GradingWeight.course_id == course.id).all()
        assert len(rows) == 1
        assert rows[0].final_weight == 50

    def test_effective_weights_zero_when_unconfigured(self, db_session, course):
        weights = WeightStore(db_session).effective_weights(course.id)
        assert weights == {t: 0.0 for t in AssessmentType}

    def test_item_weight_defaults_to_zero(self, db_session, course):
        assert WeightStore(db_session).get_item_weight(course.id, "quiz", "q1") == 0.0

    def test_item_weight_upsert(self, db_session, course):
        store = WeightStore(db_session)
        first = store.set_item_weight(course.id, "quiz", "q1", 5)
        second = store.set_item_weight(course.id, "quiz", "q1", 7.5)
        assert first.id == second.id
        assert store.get_item_weight(course.id, AssessmentType.QUIZ, "q1") == 7.5
        assert len(store.list_item_weights(course.id)) == 1

    def test_item_weight_negative_rejected(self, db_session, course):
        with pytest.raises(GradingErrorException) as exc:
            WeightStore(db_session).set_item_weight(course.id, "quiz", "q1", -1)
        assert exc.value.error_code == "INVALID_WEIGHT"

    def test_delete_item_weight(self, db_session, course):
        store = WeightStore(db_session)
        store.set_item_weight(course.id, "assignment", "hw1", 10)
        deleted = store.delete_item_weight(course.id, "assignment", "hw1")
        assert deleted is not None
        assert store.get_item_weight(course.id, "assignment", "hw1") == 0.0
        assert store.delete_item_weight(course.id, "assignment", "hw1") is None

    def test_item_ids_are_stripped(self, db_session, course):
        store = WeightStore(db_session)
        row = store.set_item_weight(course.id, "quiz", "q1 ", 50)
        assert row.assessment_id == "q1"
        assert store.get_item_weight(course.id, "quiz", " q1") == 50
        assert store.set_item_weight(course.id, "quiz", "q1", 40).id == row.id

    def test_blank_item_id_rejected(self, db_session, course):
        with pytest.raises(GradingErrorException) as exc:
            WeightStore(db_session).set_item_weight(course.id, "quiz", "   ", 5)
        assert exc.value.error_code == "MISSING_IDENTIFIER"

    def test_padded_item_weight_applies_to_its_grade(self, db_session, course, student):
        WeightStore(db_session).set_item_weight(course.id, "quiz", "q1 ", 50)
        agg = ScoreAggregator(db_session)
        agg.record_or_update_score(student.uuid, course.id, "quiz", "q1 ", 100)
        totals = agg.weighted_category_totals(student.uuid, course.id)
        assert totals["quiz"]["total_weighted_score"] == pytest.approx(50)


# ── HTTP ─────────────────────────────────────────────────────

class TestGradingWeightRoutes:
    def test_get_before_configured_returns_404(self, client, professor, course):
        resp = client.get(f"/api/grading-weights/{course.id}", headers=auth_headers(professor))
        assert resp.status_code == 404

    def test_set_and_get(self, client, professor, course):
        body = {"assignment_weight": 20, "quiz_weight": 20, "midterm_weight": 25, "final_weight": 35}
        resp = client.post(f"/api/grading-weights/{course.id}", json=body, headers=auth_headers(professor))
        assert resp.status_code == 200, resp.text
        assert resp.json()["professor_uuid"] == professor.uuid

        resp = client.get(f"/api/grading-weights/{course.id}", headers=auth_headers(professor))
        assert resp.status_code == 200
        assert resp.json()["final_weight"] == 35

    def test_invalid_sum_returns_error_code(self, client, professor, course):
        body = {"assignment_weight": 20, "quiz_weight": 20, "midterm_weight": 25, "final_weight": 34}
        resp = client.post(f"/api/grading-weights/{course.id}", json=body, headers=auth_headers(professor))
        assert resp.status_code == 400
        assert resp.json()["error_code"] == "WEIGHTS_SUM_INVALID"

    def test_other_professor_forbidden(self, client, other_professor, course):
        body = {"assignment_weight": 25, "quiz_weight": 25, "midterm_weight": 25, "final_weight": 25}
        resp = client.post(f"/api/grading-weights/{course.id}", json=body, headers=auth_headers(other_professor))
        assert resp.status_code == 403

    def test_student_forbidden(self, client, student, course):
        resp = client.get(f"/api/grading-weights/{course.id}", headers=auth_headers(student))
        assert resp.status_code == 403

    def test_admin_allowed(self, client, admin, course):
        body = {"assignment_weight": 25, "quiz_weight": 25, "midterm_weight": 25, "final_weight": 25}
        resp = client.post(f"/api/grading-weights/{course.id}", json=body, headers=auth_headers(admin))
        assert resp.status_code == 200, resp.text

    def test_unknown_course_returns_404(self, client, admin, db_session):
        resp = client.get("/api/grading-weights/999", headers=auth_headers(admin))
        assert resp.status_code == 404


class TestAssessmentWeightRoutes:
    def test_create_list_get_delete(self, client, professor, course):
        headers = auth_headers(professor)
        body = {"course_id": course.id, "assessment_type": "quiz", "assessment_id": "q1", "weight": 5}
        resp = client.post("/api/assessment-weights/", json=body, headers=headers)
        assert resp.status_code == 201, resp.text
        assert resp.json()["assessment_type"] == "quiz"

        resp = client.get(f"/api/assessment-weights/{course.id}", headers=headers)
        assert [w["assessment_id"] for w in resp.json()] == ["q1"]

        resp = client.get(f"/api/assessment-weights/{course.id}/quiz/q1", headers=headers)
        assert resp.status_code == 200
        assert resp.json()["weight"] == 5

        resp = client.delete(f"/api/assessment-weights/{course.id}/quiz/q1", headers=headers)
        assert resp.status_code == 200

        resp = client.get(f"/api/assessment-weights/{course.id}/quiz/q1", headers=headers)
        assert resp.status_code == 404

    def test_padded_item_id_stored_stripped(self, client, professor, course):
        headers = auth_headers(professor)
        body = {"course_id": course.id, "assessment_type": "quiz", "assessment_id": " q1 ", "weight": 5}
        resp = client.post("/api/assessment-weights/", json=body, headers=headers)
        assert resp.status_code == 201, resp.text
        assert resp.json()["assessment_id"] == "q1"

        resp = client.get(f"/api/assessment-weights/{course.id}/quiz/q1", headers=headers)
        assert resp.status_code == 200

    def test_invalid_type_returns_400(self, client, professor, course):
        body = {"course_id": course.id, "assessment_type": "homework", "assessment_id": "h1", "weight": 5}
        resp = client.post("/api/assessment-weights/", json=body, headers=auth_headers(professor))
        assert resp.status_code == 400
        assert resp.json()["error_code"] == "INVALID_ASSESSMENT_TYPE"
