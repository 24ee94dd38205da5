# ==============================================
# dyntables/tasks/celery_app.py
# ==============================================
from datetime import timedelta

from celery import Celery
from celery.signals import after_setup_logger, worker_process_init
from kombu import Queue

from dyntables.core.config import settings
from dyntables.core.logging import setup_logging

celery_app = Celery(
    "dyntables_worker",
    broker=settings.celery_settings.broker_url,
    backend=settings.celery_settings.result_backend,
    include=["dyntables.tasks.import_tasks"],
)

celery_app.conf.update(
    task_routes={
        "dyntables.tasks.import_tasks.*": {"queue": "imports"},
    },
    task_queues=(
        Queue("imports", routing_key="imports"),
        Queue("default", routing_key="default"),
    ),
    task_default_queue="default",

    task_serializer=settings.celery_settings.task_serializer,
    accept_content=settings.celery_settings.accept_content,
    result_serializer=settings.celery_settings.result_serializer,
    timezone=settings.celery_settings.timezone,
    enable_utc=settings.celery_settings.enable_utc,

    result_expires=timedelta(days=1),

    # Imports hold a whole spreadsheet in memory
    task_time_limit=3600,
    task_soft_time_limit=3000,
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=200,
    task_acks_late=True,
    task_reject_on_worker_lost=True,

    worker_hijack_root_logger=False,
    worker_send_task_events=True,
    task_send_sent_event=True,
    broker_connection_retry_on_startup=True,

    task_always_eager=settings.celery_settings.task_always_eager or settings.is_testing,
    task_eager_propagates=True,
)


@after_setup_logger.connect
def configure_logger(logger=None, **kwargs):
    setup_logging()


@worker_process_init.connect
def init_worker(**kwargs):
    setup_logging()
