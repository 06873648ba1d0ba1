from tests.conftest import auth_headers


async def test_attendance_upserts_per_period(client, school_a):
    students = school_a.students
    payload = {
        "classId": school_a.school_class.id,
        "date": "2024-05-02",
        "period": 1,
        "attendances": [
            {"studentId": students[0].id, "status": "PRESENT"},
            {"studentId": students[1].id, "status": "ABSENT"},
        ]
    }
    first = await client.post("/api/attendance/mark", json=payload, headers=school_a.teacher_headers)
    assert first.status_code == 201
    assert first.json()["count"] == 2

    payload["attendances"] = [{"studentId": students[1].id, "status": "LATE"}]
    await client.post("/api/attendance/mark", json=payload, headers=school_a.teacher_headers)

    listing = await client.get(
        "/api/attendance/list",
        params={"classId": school_a.school_class.id, "date": "2024-05-02"},
        headers=school_a.teacher_headers
    )
    statuses = {a["studentId"]: a["status"] for a in listing.json()["attendances"]}
    assert statuses == {students[0].id: "PRESENT", students[1].id: "LATE"}


async def test_students_only_see_their_own_attendance(client, school_a):
    await client.post(
        "/api/attendance/mark",
        json={
            "classId": school_a.school_class.id,
            "date": "2024-05-03",
            "attendances": [
                {"studentId": s.id, "status": "PRESENT"} for s in school_a.students
            ]
        },
        headers=school_a.teacher_headers
    )

    response = await client.get("/api/attendance/list", headers=school_a.student_headers)

    rows = response.json()["attendances"]
    assert len(rows) == 1
    assert rows[0]["studentId"] == school_a.students[0].id


async def test_attendance_rejects_foreign_students(client, school_a, school_b):
    response = await client.post(
        "/api/attendance/mark",
        json={
            "classId": school_a.school_class.id,
            "date": "2024-05-03",
            "attendances": [{"studentId": school_b.students[0].id, "status": "PRESENT"}]
        },
        headers=school_a.teacher_headers
    )
    assert response.status_code == 400


async def test_marks_are_validated_and_scoped(client, school_a):
    too_many = await client.post(
        "/api/marks/create",
        json={
            "studentId": school_a.students[0].id,
            "classId": school_a.school_class.id,
            "subject": "Maths",
            "marks": 120,
            "totalMarks": 100
        },
        headers=school_a.teacher_headers
    )
    assert too_many.status_code == 400

    for student in school_a.students:
        created = await client.post(
            "/api/marks/create",
            json={
                "studentId": student.id,
                "classId": school_a.school_class.id,
                "subject": "Maths",
                "marks": 88,
                "totalMarks": 100
            },
            headers=school_a.teacher_headers
        )
        assert created.status_code == 201

    everyone = await client.get("/api/marks/list", headers=school_a.teacher_headers)
    assert len(everyone.json()["marks"]) == 2

    own = await client.get(
        "/api/marks/list",
        params={"studentId": school_a.students[1].id},
        headers=school_a.student_headers
    )
    assert [m["studentId"] for m in own.json()["marks"]] == [school_a.students[0].id]


async def test_homework_for_the_students_class(client, school_a):
    created = await client.post(
        "/api/homework/create",
        json={
            "title": "Fractions",
            "description": "Exercise 4.2",
            "subject": "Maths",
            "classId": school_a.school_class.id,
            "dueDate": "2024-05-10"
        },
        headers=school_a.teacher_headers
    )
    assert created.status_code == 201
    assert created.json()["homework"]["homeworkClass"]["name"] == "Grade 5"

    response = await client.get("/api/homework/list", headers=school_a.student_headers)
    homeworks = response.json()["homeworks"]
    assert [h["title"] for h in homeworks] == ["Fractions"]
    assert homeworks[0]["teacher"]["id"] == school_a.teacher.id


async def test_newsfeed_lifecycle(client, school_a):
    headers = school_a.admin_headers
    created = await client.post(
        "/api/newsfeed/create",
        json={"title": "Holiday", "description": "School closed Monday"},
        headers=headers
    )
    feed_id = created.json()["newsFeed"]["id"]

    updated = await client.put(
        f"/api/newsfeed/{feed_id}",
        json={"title": "Holiday moved", "description": "School closed Tuesday"},
        headers=school_a.teacher_headers
    )
    assert updated.status_code == 200
    listing = await client.get("/api/newsfeed/list", headers=school_a.student_headers)
    assert [f["title"] for f in listing.json()["newsFeeds"]] == ["Holiday moved"]

    forbidden = await client.delete(f"/api/newsfeed/{feed_id}", headers=school_a.student_headers)
    assert forbidden.status_code == 403

    deleted = await client.delete(f"/api/newsfeed/{feed_id}", headers=headers)
    assert deleted.status_code == 200
    listing = await client.get("/api/newsfeed/list", headers=school_a.student_headers)
    assert listing.json()["newsFeeds"] == []


async def test_certificates_for_students(client, school_a):
    for student in school_a.students:
        await client.post(
            "/api/certificates/create",
            json={"studentId": student.id, "title": "Merit", "certificateType": "ACADEMIC"},
            headers=school_a.teacher_headers
        )

    staff_view = await client.get("/api/certificates/list", headers=school_a.admin_headers)
    assert len(staff_view.json()["certificates"]) == 2

    own = await client.get("/api/certificates/list", headers=school_a.student_headers)
    certificates = own.json()["certificates"]
    assert len(certificates) == 1
    assert certificates[0]["student"]["user"]["name"] == school_a.student_users[0].name


async def test_fee_record_round_trip(client, school_a):
    missing = await client.get("/api/fees/mine", headers=school_a.student_headers)
    assert missing.status_code == 404

    saved = await client.post(
        "/api/fees/set",
        json={"studentId": school_a.students[0].id, "totalAmount": 5000, "paidAmount": 1500},
        headers=school_a.admin_headers
    )
    assert saved.status_code == 200

    mine = await client.get("/api/fees/mine", headers=school_a.student_headers)
    assert mine.json()["fee"]["balance"] == 3500

    await client.post(
        "/api/fees/set",
        json={"studentId": school_a.students[0].id, "totalAmount": 5000, "paidAmount": 5000},
        headers=school_a.admin_headers
    )
    mine = await client.get("/api/fees/mine", headers=school_a.student_headers)
    assert mine.json()["fee"]["balance"] == 0


async def test_overpaid_fee_is_rejected(client, school_a):
    response = await client.post(
        "/api/fees/set",
        json={"studentId": school_a.students[0].id, "totalAmount": 100, "paidAmount": 150},
        headers=school_a.admin_headers
    )
    assert response.status_code == 400


async def test_deactivating_a_student_keeps_history(client, school_a):
    leaving = school_a.students[1]
    response = await client.request(
        "DELETE",
        f"/api/student/{leaving.id}",
        json={"reason": "Moved city"},
        headers=school_a.admin_headers
    )
    assert response.status_code == 200
    history = response.json()["history"]
    assert history["originalStudentId"] == leaving.id
    assert history["className"] == "Grade 5"
    assert history["reason"] == "Moved city"

    students = await client.get("/api/student/list", headers=school_a.admin_headers)
    assert leaving.id not in {s["id"] for s in students.json()["students"]}

    histories = await client.get(
        "/api/history/student",
        params={"originalStudentId": leaving.id},
        headers=school_a.teacher_headers
    )
    assert [h["name"] for h in histories.json()["histories"]] == [school_a.student_users[1].name]

    login = await client.get("/api/auth/session", headers=auth_headers(school_a.student_users[1]))
    assert login.status_code == 401


async def test_assign_students_to_new_class(client, school_a):
    created = await client.post("/api/class/create", json={"name": "Grade 7"}, headers=school_a.admin_headers)
    class_id = created.json()["class"]["id"]

    assigned = await client.post(
        f"/api/class/{class_id}/assign",
        json={"studentIds": [school_a.students[0].id]},
        headers=school_a.admin_headers
    )
    assert assigned.json()["count"] == 1

    roster = await client.get("/api/class/students", params={"classId": class_id}, headers=school_a.teacher_headers)
    assert [s["id"] for s in roster.json()["students"]] == [school_a.students[0].id]
