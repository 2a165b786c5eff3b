from db import get_db  # noqa: F401
