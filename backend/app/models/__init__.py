from app.models.user import User
from app.models.form import CollectionForm
from app.models.submission import Submission, SubmissionTopic, SubmissionProject
from app.models.selected_topic import SelectedTopic, SelectedTopicSubmitter
from app.models.system_log import SystemLog

__all__ = [
    "User", "CollectionForm", "Submission", "SubmissionTopic", "SubmissionProject",
    "SelectedTopic", "SelectedTopicSubmitter", "SystemLog",
]
