def test_create_user_and_reject_duplicate_email(client):
    r = client.post("/users", json={"email": "new.teacher@example.com", "role": "teacher"})
    assert r.status_code == 201, r.text
    assert r.json()["role"] == "teacher"

    dup = client.post("/users", json={"email": "new.teacher@example.com"})
    assert dup.status_code == 409


def test_create_classroom_requires_teacher(client, seed_data):
    ok = client.post(
        "/classrooms",
        json={"title": "Physics", "teacher_id": seed_data["teacher_id"]},
    )
    assert ok.status_code == 201, ok.text
    assert ok.json()["teacher_id"] == seed_data["teacher_id"]

    bad = client.post(
        "/classrooms",
        json={"title": "Physics", "teacher_id": seed_data["student_id"]},
    )
    assert bad.status_code == 400


def test_enroll_student_once(client, seed_data):
    url = f"/classrooms/{seed_data['classroom_id']}/enrollments"

    r = client.post(url, json={"student_id": seed_data["outsider_id"]})
    assert r.status_code == 201, r.text

    again = client.post(url, json={"student_id": seed_data["outsider_id"]})
    assert again.status_code == 409


def test_cannot_enroll_teacher(client, seed_data):
    r = client.post(
        f"/classrooms/{seed_data['classroom_id']}/enrollments",
        json={"student_id": seed_data["teacher_id"]},
    )
    assert r.status_code == 400


def test_create_assignment_defaults(client, seed_data):
    r = client.post(
        f"/classrooms/{seed_data['classroom_id']}/assignments",
        json={"title": "Reading log"},
    )
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["category"] == "Homework"
    assert body["points"] == 100
    assert body["due_at"] is None


def test_assignment_points_are_validated(client, seed_data):
    r = client.post(
        f"/classrooms/{seed_data['classroom_id']}/assignments",
        json={"title": "Too big", "points": 250},
    )
    assert r.status_code == 422


def test_list_assignments_nulls_last(client, seed_data):
    client.post(
        f"/classrooms/{seed_data['classroom_id']}/assignments",
        json={"title": "Undated"},
    )
    r = client.get(f"/classrooms/{seed_data['classroom_id']}/assignments")
    assert r.status_code == 200
    titles = [a["title"] for a in r.json()]
    assert titles == ["Cell worksheet", "Unit test", "Undated"]


def test_unknown_classroom(client):
    assert client.get("/classrooms/9999").status_code == 404
    assert client.get("/classrooms/9999/assignments").status_code == 404
