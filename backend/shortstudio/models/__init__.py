from shortstudio.models.user import User
from shortstudio.models.series import Series
from shortstudio.models.script import Script
from shortstudio.models.video import Video
from shortstudio.models.publish_job import PublishJob
from shortstudio.models.schedule import Schedule
from shortstudio.models.api_key_set import ApiKeySet
from shortstudio.models.platform_connection import PlatformConnection

__all__ = [
    "User",
    "Series",
    "Script",
    "Video",
    "PublishJob",
    "Schedule",
    "ApiKeySet",
    "PlatformConnection",
]
