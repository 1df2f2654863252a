from django.apps import AppConfig


class JobOrdersConfig(AppConfig):
    """Configuration for the job_orders app.

    Job orders carry the target weight and the cached production figures
    derived from the roll ledger in ``production_line``.
    """

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'job_orders'
