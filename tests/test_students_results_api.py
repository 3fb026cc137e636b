from datetime import date, timedelta

import pytest

from utils.scoring import overall_band, validate_band


@pytest.mark.parametrize("scores, band", [
    ((6.0, 6.0, 6.0, 6.0), 6.0),
    ((5.0, 5.0, 5.0, 5.5), 5.0),    # 5.125
    ((6.5, 6.5, 6.0, 6.0), 6.5),    # 6.25
    ((7.0, 7.0, 7.0, 6.0), 7.0),    # 6.75
    ((4.0, 3.5, 4.0, 3.5), 4.0),    # 3.75
])
def test_overall_band(scores, band):
    assert overall_band(*scores) == band


def test_validate_band():
    assert validate_band(7, "listening_score") == 7.0
    for bad in (9.5, -1, "7", None, True):
        with pytest.raises(ValueError):
            validate_band(bad, "listening_score")


def test_create_student(make_student):
    body, _ = make_student("STU-1", remaining_tests={"listening": 2, "mock": 1},
                           expiry_date=date.today() + timedelta(days=90))
    assert body["remaining_tests"] == {"listening": 2, "reading": 0, "writing": 0, "speaking": 0, "mock": 1}
    assert body["is_expired"] is False
    assert body["batch_number"] == "B-12"


def test_create_student_validation(admin, make_student):
    make_student("STU-1")
    base = {"name": "X", "password": "pw"}
    assert admin.post("/students", json=dict(base, user_id="STU-1")).status_code == 409
    assert admin.post("/students", json=dict(base, user_id="GUEST-42")).status_code == 400
    assert admin.post("/students", json=dict(base, remaining_tests={"mock": -1})).status_code == 400
    assert admin.post("/students", json=dict(base, gender="Robot")).status_code == 400
    assert admin.post("/students", json={"name": "X"}).status_code == 400


def test_student_dashboard(make_student):
    _, student = make_student("STU-1", remaining_tests={"writing": 3},
                              expiry_date=date.today() - timedelta(days=1))
    me = student.get("/students/me").get_json()
    assert me["remaining_tests"]["writing"] == 3
    assert me["is_expired"] is True


def test_students_cannot_list_students(make_student):
    _, student = make_student("STU-1")
    assert student.get("/students").status_code == 403


def test_update_balance(admin, make_student):
    make_student("STU-1", remaining_tests={"listening": 1, "mock": 2})

    resp = admin.post("/students/STU-1/balance", json={"listening": 4})
    assert resp.status_code == 200
    assert resp.get_json()["remaining_tests"] == {"listening": 4, "reading": 0, "writing": 0, "speaking": 0, "mock": 2}

    assert admin.post("/students/STU-1/balance", json={"reading": -2}).status_code == 400
    assert admin.post("/students/NOPE/balance", json={"reading": 2}).status_code == 404


def test_publish_and_read_results(admin, make_session, make_student):
    s = make_session("Mock")
    _, student = make_student("STU-1")

    resp = admin.post("/results", json={
        "user_id": "STU-1", "session_id": s["id"],
        "listening_score": 7.0, "reading_score": 6.5, "writing_score": 6.0, "speaking_score": 6.5,
    })
    assert resp.status_code == 201, resp.get_json()
    result = resp.get_json()
    assert result["overall_score"] == 6.5
    assert result["module_type"] == "Mock"

    mine = student.get("/results/me").get_json()
    assert [r["id"] for r in mine] == [result["id"]]

    assert student.delete(f"/results/{result['id']}").status_code == 403
    assert admin.delete(f"/results/{result['id']}").status_code == 200
    assert student.get("/results/me").get_json() == []


def test_publish_result_validation(admin, make_session, make_student):
    s = make_session("Mock")
    make_student("STU-1")
    scores = {"listening_score": 7.0, "reading_score": 6.5, "writing_score": 6.0, "speaking_score": 6.5}

    assert admin.post("/results", json=dict(scores, user_id="STU-1")).status_code == 400
    assert admin.post("/results", json=dict(scores, user_id="STU-1", session_id=s["id"], writing_score=10)).status_code == 400
    assert admin.post("/results", json=dict(scores, user_id="NOPE", session_id=s["id"])).status_code == 404
    assert admin.post("/results", json=dict(scores, user_id="STU-1", session_id="missing")).status_code == 404


def test_edit_student_profile(admin, make_student):
    make_student("STU-1", expiry_date=date.today() - timedelta(days=1))
    new_expiry = date.today() + timedelta(days=180)

    resp = admin.patch("/students/STU-1", json={
        "name": "Nadia Rahman", "phone": "01811111111", "batch_number": "B-14",
        "expiry_date": new_expiry.isoformat(),
    })
    assert resp.status_code == 200, resp.get_json()
    body = resp.get_json()
    assert body["name"] == "Nadia Rahman"
    assert body["batch_number"] == "B-14"
    assert body["expiry_date"] == new_expiry.isoformat()
    assert body["is_expired"] is False

    cleared = admin.patch("/students/STU-1", json={"expiry_date": None}).get_json()
    assert cleared["expiry_date"] is None


def test_edit_student_validation(admin, make_student):
    _, student = make_student("STU-1")
    for bad in ({}, {"name": ""}, {"gender": "Robot"}, {"expiry_date": "next year"}, {"phone": 123}):
        assert admin.patch("/students/STU-1", json=bad).status_code == 400, bad
    assert admin.patch("/students/NOPE", json={"name": "X"}).status_code == 404
    assert student.patch("/students/STU-1", json={"name": "Me"}).status_code == 403


def test_correct_published_result(admin, make_session, make_student):
    s = make_session("Mock")
    _, student = make_student("STU-1")
    result = admin.post("/results", json={
        "user_id": "STU-1", "session_id": s["id"],
        "listening_score": 7.0, "reading_score": 6.5, "writing_score": 6.0, "speaking_score": 6.5,
    }).get_json()

    resp = admin.patch(f"/results/{result['id']}", json={"writing_score": 7.0, "speaking_score": 7.0})
    assert resp.status_code == 200, resp.get_json()
    assert resp.get_json()["overall_score"] == 7.0    # 6.875
    assert resp.get_json()["listening_score"] == 7.0

    assert admin.patch(f"/results/{result['id']}", json={"reading_score": 9.5}).status_code == 400
    assert admin.patch(f"/results/{result['id']}", json={}).status_code == 400
    assert admin.patch("/results/NOPE", json={"reading_score": 5}).status_code == 404
    assert student.patch(f"/results/{result['id']}", json={"reading_score": 9}).status_code == 403


def test_dashboard_stats(admin, make_session, make_student):
    s = make_session("Mock")
    closed = make_session("Reading")
    admin.post(f"/sessions/{closed['id']}/close")
    make_student("STU-1")
    make_student("STU-2")
    scores = {"reading_score": 6.0, "writing_score": 6.0, "speaking_score": 6.0}
    admin.post("/results", json=dict(scores, user_id="STU-1", session_id=s["id"], listening_score=6.0))
    admin.post("/results", json=dict(user_id="STU-2", session_id=s["id"], listening_score=7.0,
                                     reading_score=7.0, writing_score=7.0, speaking_score=7.0))
    listening = make_session("Listening")
    admin.post("/bookings/guest", json={"session_id": listening["id"], "name": "X", "phone": "1"})

    stats = admin.get("/admin/stats").get_json()
    assert stats["total_students"] == 2
    assert stats["scheduled_sessions"] == 3
    assert stats["upcoming_tests"] == 2
    assert stats["total_registrations"] == 1
    assert stats["published_results"] == 2
    assert stats["average_band"] == 6.5
    assert stats["top_scorer"] == {"user_id": "STU-2", "name": "Student STU-2", "overall_score": 7.0}


def test_students_cannot_read_stats(make_student):
    _, student = make_student("STU-1")
    assert student.get("/admin/stats").status_code == 403
