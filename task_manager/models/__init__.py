from task_manager.models.user import User
from task_manager.models.status import Status
from task_manager.models.label import Label
from task_manager.models.task import Task, tasks_labels
