from . import (
    admin,
    attendance,
    auth,
    certificates,
    classes,
    communication,
    fees,
    history,
    homework,
    leaves,
    marks,
    newsfeed,
    realtime,
    school,
    student,
    teacher
)

# (module, prefix) pairs mounted under /api
API_ROUTERS = [
    (auth, "/auth"),
    (admin, "/admin"),
    (school, "/school"),
    (student, "/student"),
    (teacher, "/teacher"),
    (classes, "/class"),
    (attendance, "/attendance"),
    (marks, "/marks"),
    (homework, "/homework"),
    (newsfeed, "/newsfeed"),
    (certificates, "/certificates"),
    (fees, "/fees"),
    (history, "/history"),
    (communication, "/communication"),
    (leaves, "/leaves"),
]

__all__ = ["API_ROUTERS", "realtime"]
