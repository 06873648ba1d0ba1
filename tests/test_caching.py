from schoolportal.core.redis import get_redis

from tests.conftest import auth_headers


async def test_repeated_list_is_served_from_cache(client, school_a, query_counter):
    headers = school_a.admin_headers

    first = await client.get("/api/class/list", headers=headers)
    assert query_counter.matching("FROM classes")

    query_counter.reset()
    second = await client.get("/api/class/list", headers=headers)

    assert second.content == first.content
    assert query_counter.matching("FROM classes") == []


async def test_class_list_carries_teacher_and_count(client, school_a):
    response = await client.get("/api/class/list", headers=school_a.teacher_headers)

    classes = response.json()["classes"]
    assert len(classes) == 1
    assert classes[0]["teacher"]["id"] == school_a.teacher.id
    assert classes[0]["studentCount"] == len(school_a.students)


async def test_create_invalidates_class_list(client, school_a):
    headers = school_a.admin_headers
    before = await client.get("/api/class/list", headers=headers)
    assert len(before.json()["classes"]) == 1

    created = await client.post(
        "/api/class/create",
        json={"name": "Grade 6", "section": "B", "teacherId": school_a.other_teacher.id},
        headers=headers
    )
    assert created.status_code == 201

    after = await client.get("/api/class/list", headers=headers)
    assert [c["name"] for c in after.json()["classes"]] == ["Grade 6", "Grade 5"]


async def test_duplicate_class_is_conflict(client, school_a):
    response = await client.post(
        "/api/class/create",
        json={"name": "Grade 5", "section": "A"},
        headers=school_a.admin_headers
    )
    assert response.status_code == 409


async def test_new_student_shows_in_cached_list(client, school_a, query_counter):
    headers = school_a.admin_headers
    await client.get("/api/student/list", headers=headers)

    created = await client.post(
        "/api/student/create",
        json={
            "name": "Riya Sharma",
            "fatherName": "Anil Sharma",
            "phoneNo": "9876543210",
            "aadhaarNo": "123412341234",
            "dob": "2013-06-15",
            "classId": school_a.school_class.id
        },
        headers=headers
    )
    assert created.status_code == 201
    body = created.json()
    assert body["temporaryPassword"]
    assert body["student"]["user"]["name"] == "Riya Sharma"
    assert body["student"]["studentClass"]["id"] == school_a.school_class.id

    students = (await client.get("/api/student/list", headers=headers)).json()["students"]
    assert students[0]["id"] == body["student"]["id"]
    assert len(students) == len(school_a.students) + 1


async def test_caches_are_per_tenant(client, school_a, school_b):
    a = await client.get("/api/newsfeed/list", headers=school_a.admin_headers)
    await client.post(
        "/api/newsfeed/create",
        json={"title": "Sports day", "description": "Friday"},
        headers=school_b.admin_headers
    )
    a_again = await client.get("/api/newsfeed/list", headers=school_a.admin_headers)
    b = await client.get("/api/newsfeed/list", headers=auth_headers(school_b.teacher))

    assert a.json()["newsFeeds"] == a_again.json()["newsFeeds"] == []
    assert [f["title"] for f in b.json()["newsFeeds"]] == ["Sports day"]


async def test_lists_served_without_redis(app, client, school_a, query_counter):
    async def redis_down():
        return None

    app.dependency_overrides[get_redis] = redis_down
    headers = school_a.admin_headers

    first = await client.get("/api/class/list", headers=headers)
    query_counter.reset()
    second = await client.get("/api/class/list", headers=headers)

    assert first.status_code == second.status_code == 200
    assert second.json() == first.json()
    assert query_counter.matching("FROM classes")
