"""Run the student portal with uvicorn.

Run with:
  python -m student_portal
"""

import uvicorn

from student_portal.config import Settings


def main() -> None:
    settings = Settings()
    uvicorn.run("student_portal.api.asgi:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
