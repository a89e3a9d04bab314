"""
Konfiguracja Celery — kolejka zadań.
Osobne kolejki per typ zadania: montaż i polling renderu, publikacja, harmonogram.
"""

from celery import Celery

from shortstudio.core.config import get_settings

settings = get_settings()

celery_app = Celery(
    "shortstudio",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
)

celery_app.conf.update(
    # Serialization
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # Retry
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,

    # Routing: osobne kolejki dla różnych typów zadań
    task_routes={
        "shortstudio.tasks.video_pipeline.*": {"queue": "video_pipeline"},
        "shortstudio.tasks.scheduler.*": {"queue": "scheduler"},
    },

    # Beat schedule
    beat_schedule={
        "dispatch-due-schedules": {
            "task": "shortstudio.tasks.scheduler.dispatch_due_schedules",
            "schedule": 60.0,  # co minutę
        },
        "refresh-platform-tokens": {
            "task": "shortstudio.tasks.scheduler.refresh_expiring_tokens",
            "schedule": 3600.0,  # co godzinę
        },
    },

    # Timeouts
    task_soft_time_limit=600,  # 10 min soft limit
    task_time_limit=900,  # 15 min hard limit
)

# autodiscover_tasks szuka podmodułu "tasks" w pakietach, nie pasuje do układu projektu
celery_app.conf.update(
    include=[
        "shortstudio.tasks.video_pipeline",
        "shortstudio.tasks.scheduler",
    ],
)
