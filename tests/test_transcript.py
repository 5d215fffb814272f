"""Tests for the all-courses transcript view."""

from app.domains.grading.services import GradeResolver
from app.domains.scores.services import ScoreAggregator
from app.domains.weights.services import WeightStore
from app.models.course import Course, Enrollment
from app.services.transcript_service import build_transcript
from conftest import auth_headers


def _second_course(db, professor_id, student_uuid):
    c = Course(course_code="BIO110", course_name="Biology", professor_id=professor_id)
    db.add(c)
    db.flush()
    db.add(Enrollment(course_id=c.id, student_uuid=student_uuid))
    db.commit()
    return c


class TestTranscriptService:
    def test_missing_pieces_are_empty(self, db_session, course, student):
        data = build_transcript(db_session, student.uuid)
        assert data["student_uuid"] == student.uuid
        assert len(data["courses"]) == 1
        entry = data["courses"][0]
        assert entry["course_code"] == "CS101"
        assert entry["weights"] is None
        assert entry["summary"] is None
        assert entry["final_grade"] is None
        assert entry["grades"] == []

    def test_full_entry(self, db_session, course, student):
        WeightStore(db_session).set_weights(course.id, None, {"assignment": 20, "quiz": 20, "midterm": 25, "final": 35})
        ScoreAggregator(db_session).record_or_update_score(student.uuid, course.id, "quiz", "q1", 9, 10, weight=5)
        GradeResolver(db_session).resolve_student(student.uuid, course.id)

        entry = build_transcript(db_session, student.uuid)["courses"][0]
        assert entry["weights"] == {"assignment": 20, "quiz": 20, "midterm": 25, "final": 35}
        assert entry["summary"]["letter_grade"] == "F"
        assert entry["grades"][0]["weight"] == 5
        assert entry["grades"][0]["percentage"] == 90.0

    def test_professor_filter(self, db_session, course, student, other_professor):
        other = _second_course(db_session, other_professor.id, student.uuid)
        assert len(build_transcript(db_session, student.uuid)["courses"]) == 2
        limited = build_transcript(db_session, student.uuid, professor_id=other_professor.id)
        assert [c["course_id"] for c in limited["courses"]] == [other.id]


class TestTranscriptRoute:
    def test_student_sees_own(self, client, student, course):
        resp = client.get(f"/api/grades/student/{student.uuid}/all-courses", headers=auth_headers(student))
        assert resp.status_code == 200, resp.text
        assert resp.json()["courses"][0]["course_id"] == course.id

    def test_student_cannot_see_others(self, client, student, other_student, course):
        resp = client.get(f"/api/grades/student/{other_student.uuid}/all-courses", headers=auth_headers(student))
        assert resp.status_code == 403

    def test_unknown_student_404(self, client, admin):
        resp = client.get("/api/grades/student/missing/all-courses", headers=auth_headers(admin))
        assert resp.status_code == 404
