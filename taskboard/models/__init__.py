# Importing the models registers them on Base.metadata before create_all.
from taskboard.models.user import User  # noqa: F401
from taskboard.models.project import Project  # noqa: F401
from taskboard.models.task import Task, TaskTag  # noqa: F401
from taskboard.models.attachment import Attachment  # noqa: F401
