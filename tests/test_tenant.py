from sqlalchemy import select

from schoolportal.models import School, User
from schoolportal.schemas.enums import UserRole
from schoolportal.schemas.auth import SessionUser
from schoolportal.services.tenant_service import TenantService

from tests.conftest import auth_headers, make_user


def as_session(user: User) -> SessionUser:
    return SessionUser(
        user_id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        school_id=user.school_id
    )


async def test_students_never_leak_across_schools(client, school_a, school_b):
    response = await client.get("/api/student/list", headers=school_a.admin_headers)

    assert response.status_code == 200
    students = response.json()["students"]
    assert {s["schoolId"] for s in students} == {school_a.id}
    assert {s["id"] for s in students} == {s.id for s in school_a.students}


async def test_teachers_list_is_scoped_and_sorted_by_name(client, school_a, school_b):
    response = await client.get("/api/teacher/list", headers=school_a.student_headers)

    assert response.status_code == 200
    names = [t["name"] for t in response.json()["teachers"]]
    assert names == sorted(names)
    assert set(names) == {school_a.teacher.name, school_a.other_teacher.name}


async def test_foreign_class_id_is_not_found(client, school_a, school_b):
    response = await client.get(
        "/api/class/students",
        params={"classId": school_b.school_class.id},
        headers=school_a.teacher_headers
    )
    assert response.status_code == 404


async def test_admin_without_school_gets_403(client, db):
    admin = await make_user(db, "Lonely", "lonely@example.com", UserRole.SCHOOLADMIN)
    await db.commit()

    response = await client.get("/api/class/list", headers=auth_headers(admin))

    assert response.status_code == 403
    assert response.json()["message"] == "School not found in session"


async def test_admin_is_repaired_from_owned_school(client, db, school_a):
    admin_id, school_id = school_a.admin.id, school_a.id
    school_a.admin.school_id = None
    await db.commit()

    response = await client.get("/api/class/list", headers=auth_headers(school_a.admin))

    assert response.status_code == 200
    db.expire_all()
    result = await db.execute(select(User.school_id).where(User.id == admin_id))
    assert result.scalar_one() == school_id


async def test_repair_is_idempotent(db, school_a):
    school_a.admin.school_id = None
    await db.commit()
    session_user = as_session(school_a.admin)
    tenants = TenantService(db)

    assert await tenants.repair_school_assignment(session_user) == school_a.id
    assert await tenants.repair_school_assignment(session_user) == school_a.id

    repaired = session_user.model_copy(update={"school_id": school_a.id})
    assert await tenants.repair_school_assignment(repaired) == school_a.id


async def test_repair_leaves_other_roles_alone(db, school_a):
    teacher = await make_user(db, "Drifter", "drifter@example.com", UserRole.TEACHER)
    await db.commit()
    session_user = as_session(teacher)

    assert await TenantService(db).resolve_school_id(session_user) is None


async def test_school_admin_creates_school_and_is_assigned(client, db):
    admin = await make_user(db, "Founder", "founder@example.com", UserRole.SCHOOLADMIN)
    await db.commit()
    headers = auth_headers(admin)

    response = await client.post(
        "/api/school/create",
        json={"name": "Hilltop School", "address": "2 Hill Rd", "location": "Hilltop"},
        headers=headers
    )
    assert response.status_code == 201
    school = response.json()["school"]
    assert school["adminId"] == admin.id

    mine = await client.get("/api/school/mine", headers=headers)
    assert mine.json()["school"]["name"] == "Hilltop School"

    again = await client.post("/api/school/create", json={"name": "Second"}, headers=headers)
    assert again.status_code == 400


async def test_school_mine_is_null_when_unassigned(client, db):
    admin = await make_user(db, "New", "new-admin@example.com", UserRole.SCHOOLADMIN)
    await db.commit()

    response = await client.get("/api/school/mine", headers=auth_headers(admin))
    assert response.json() == {"school": None}


async def test_school_update_refreshes_cached_school(client, school_a):
    headers = school_a.admin_headers
    assert (await client.get("/api/school/mine", headers=headers)).json()["school"]["location"] == "Town"

    response = await client.put("/api/school/update", json={"location": "City"}, headers=headers)
    assert response.status_code == 200

    assert (await client.get("/api/school/mine", headers=headers)).json()["school"]["location"] == "City"


async def test_signup_grants(client, db, school_a):
    super_admin = await make_user(db, "Root", "root@example.com", UserRole.SUPERADMIN)
    await db.commit()

    created = await client.post(
        "/api/admin/signup",
        json={"name": "Head", "email": "head@example.com", "password": "password123", "role": "SCHOOLADMIN"},
        headers=auth_headers(super_admin)
    )
    assert created.status_code == 201
    assert created.json()["user"]["schoolId"] is None

    forbidden = await client.post(
        "/api/admin/signup",
        json={"name": "Sneaky", "email": "sneaky@example.com", "password": "password123", "role": "SCHOOLADMIN"},
        headers=school_a.admin_headers
    )
    assert forbidden.status_code == 403

    teacher = await client.post(
        "/api/admin/signup",
        json={"name": "Newbie", "email": "newbie@example.com", "password": "password123", "role": "TEACHER"},
        headers=school_a.admin_headers
    )
    assert teacher.status_code == 201
    assert teacher.json()["user"]["schoolId"] == school_a.id

    duplicate = await client.post(
        "/api/admin/signup",
        json={"name": "Newbie", "email": "NEWBIE@example.com", "password": "password123", "role": "TEACHER"},
        headers=school_a.admin_headers
    )
    assert duplicate.status_code == 409


async def test_school_row_keeps_owner(db, school_a):
    result = await db.execute(select(School.admin_id).where(School.id == school_a.id))
    assert result.scalar_one() == school_a.admin.id
