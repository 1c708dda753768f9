# SQLModel definitions — imported here to ensure metadata is populated for Alembic.
from .base import IntIDMixin, TimestampMixin  # noqa: F401
from .user import User  # noqa: F401
from .organization import Organization  # noqa: F401
from .membership import Membership  # noqa: F401
from .gallery import Gallery  # noqa: F401
from .photo import Photo  # noqa: F401
from .competition import Competition  # noqa: F401
from .submission import Submission  # noqa: F401
from .rating import Rating  # noqa: F401
