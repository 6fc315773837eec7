"""ASGI entrypoint for the student portal API."""

from student_portal.api.app import create_app
from student_portal.containers import build_container

app = create_app(build_container())
