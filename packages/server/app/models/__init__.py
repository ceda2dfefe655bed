# SQLModel definitions — imported here to ensure metadata is populated for Alembic.
from .base import UUIDMixin, TimestampMixin  # noqa: F401
from .user import User  # noqa: F401
from .fanclub import Fanclub  # noqa: F401
from .membership import Membership  # noqa: F401
from .post import Post  # noqa: F401
