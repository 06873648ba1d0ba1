import asyncio

import pytest
from fastapi import WebSocketDisconnect

from schoolportal.core.security import create_access_token
from schoolportal.models import Appointment
from schoolportal.routes.realtime import chat_socket
from schoolportal.schemas.enums import AppointmentStatus
from schoolportal.services.chat_relay import ConnectionManager

NOT_APPROVED = "Chat is only available for approved appointments"


class ChatClient:
    """Browser side of a chat socket: frames are queued in, replies collected"""

    def __init__(self, token: str):
        self.query_params = {"token": token}
        self.cookies = {}
        self.inbox: asyncio.Queue = asyncio.Queue()
        self.sent = []
        self.accepted = False
        self.closed_with = None
        self.task = None

    async def accept(self):
        self.accepted = True

    async def receive_json(self):
        frame = await self.inbox.get()
        if frame is None:
            raise WebSocketDisconnect(code=1000)
        if isinstance(frame, Exception):
            raise frame
        return frame

    async def send_json(self, data):
        self.sent.append(data)

    async def close(self, code: int = 1000):
        self.closed_with = code

    def received(self, event: str):
        return [frame["data"] for frame in self.sent if frame["event"] == event]


async def until(predicate, timeout: float = 2.0):
    async def poll():
        while not predicate():
            await asyncio.sleep(0.01)
    await asyncio.wait_for(poll(), timeout)


async def ask(client: ChatClient, event: str, data):
    """Send a frame and wait for the reply addressed to the sender"""
    expected = len(client.sent) + 1
    await client.inbox.put({"event": event, "data": data})
    await until(lambda: len(client.sent) >= expected)
    return client.sent[-1]


async def make_appointment(db, school, status=AppointmentStatus.APPROVED):
    appointment = Appointment(
        school_id=school.id,
        student_id=school.students[0].id,
        teacher_id=school.teacher.id,
        status=status
    )
    db.add(appointment)
    await db.commit()
    return appointment


@pytest.fixture
def connections():
    return ConnectionManager()


@pytest.fixture
async def open_chat(session_factory, redis, connections):
    opened = []

    async def _open(user):
        client = ChatClient(create_access_token(user.id, user.role, user.school_id))
        session = session_factory()
        client.task = asyncio.create_task(
            chat_socket(client, db=session, redis=redis, connections=connections)
        )
        opened.append((client, session))
        await until(lambda: client.accepted or client.closed_with is not None)
        return client

    yield _open

    for client, session in opened:
        if not client.task.done():
            await client.inbox.put(None)
        await asyncio.gather(client.task, return_exceptions=True)
        await session.close()


async def test_participants_talk_on_approved_appointment(db, school_a, open_chat, connections):
    appointment = await make_appointment(db, school_a)
    teacher = await open_chat(school_a.teacher)
    student = await open_chat(school_a.student_users[0])

    assert await ask(teacher, "join-room", appointment.id) == {"event": "joined-room", "data": str(appointment.id)}
    assert await ask(student, "join-room", str(appointment.id)) == {"event": "joined-room", "data": str(appointment.id)}
    assert connections.room_size(str(appointment.id)) == 2

    await student.inbox.put({"event": "send-message", "data": {"roomId": appointment.id, "message": "hello"}})
    await until(lambda: teacher.received("receive-message"))

    assert teacher.received("receive-message") == ["hello"]
    assert student.received("receive-message") == []


@pytest.mark.parametrize(
    "status",
    [AppointmentStatus.PENDING, AppointmentStatus.REJECTED, AppointmentStatus.COMPLETED]
)
async def test_join_refused_unless_approved(db, school_a, open_chat, connections, status):
    appointment = await make_appointment(db, school_a, status)
    student = await open_chat(school_a.student_users[0])

    reply = await ask(student, "join-room", appointment.id)

    assert reply == {"event": "error", "data": {"message": NOT_APPROVED}}
    assert not connections.is_member(str(appointment.id), student)


async def test_pending_message_never_reaches_teacher(db, school_a, open_chat):
    appointment = await make_appointment(db, school_a, AppointmentStatus.PENDING)
    teacher = await open_chat(school_a.teacher)
    student = await open_chat(school_a.student_users[0])
    await ask(teacher, "join-room", appointment.id)
    await ask(student, "join-room", appointment.id)

    reply = await ask(student, "send-message", {"roomId": appointment.id, "message": "live on PENDING"})

    assert reply == {"event": "error", "data": {"message": "Join the room first"}}
    assert teacher.received("receive-message") == []


async def test_completed_while_joined_stops_relay(db, school_a, open_chat, connections):
    appointment = await make_appointment(db, school_a)
    teacher = await open_chat(school_a.teacher)
    student = await open_chat(school_a.student_users[0])
    await ask(teacher, "join-room", appointment.id)
    await ask(student, "join-room", appointment.id)

    appointment.status = AppointmentStatus.COMPLETED
    await db.commit()
    reply = await ask(student, "send-message", {"roomId": appointment.id, "message": "still there?"})

    assert reply == {"event": "error", "data": {"message": NOT_APPROVED}}
    assert teacher.received("receive-message") == []
    assert not connections.is_member(str(appointment.id), student)


async def test_outsiders_cannot_join(db, school_a, school_b, open_chat):
    appointment = await make_appointment(db, school_a)
    colleague = await open_chat(school_a.other_teacher)
    foreign_teacher = await open_chat(school_b.teacher)

    assert await ask(colleague, "join-room", appointment.id) == {
        "event": "error", "data": {"message": "You are not part of this appointment"}
    }
    assert await ask(foreign_teacher, "join-room", appointment.id) == {
        "event": "error", "data": {"message": "Appointment not found"}
    }


async def test_bad_frames_get_error_replies(school_a, open_chat):
    student = await open_chat(school_a.student_users[0])

    assert (await ask(student, "send-message", {"roomId": 1, "message": "hi"}))["data"] == {
        "message": "Join the room first"
    }
    assert (await ask(student, "typing", None))["data"] == {"message": "Unknown event: typing"}
    assert (await ask(student, "join-room", "abc"))["data"] == {"message": "Invalid room id"}

    await student.inbox.put(["join-room", 1])
    await until(lambda: len(student.sent) == 4)
    assert student.sent[-1]["data"] == {"message": "Malformed frame"}


async def test_binary_frame_closes_and_releases_socket(db, school_a, open_chat, connections):
    appointment = await make_appointment(db, school_a)
    student = await open_chat(school_a.student_users[0])
    await ask(student, "join-room", appointment.id)

    # receive_json on a bytes frame finds no "text" entry
    await student.inbox.put(KeyError("text"))
    await asyncio.gather(student.task, return_exceptions=True)

    assert student.closed_with == 1003
    assert connections.active_connections == []
    assert connections.rooms == {}


async def test_unexpected_failure_still_releases_socket(db, school_a, open_chat, connections):
    appointment = await make_appointment(db, school_a)
    student = await open_chat(school_a.student_users[0])
    await ask(student, "join-room", appointment.id)

    await student.inbox.put(RuntimeError("database went away"))
    (outcome,) = await asyncio.gather(student.task, return_exceptions=True)

    assert isinstance(outcome, RuntimeError)
    assert connections.active_connections == []
    assert connections.rooms == {}
