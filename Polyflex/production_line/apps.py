from django.apps import AppConfig


class ProductionLineConfig(AppConfig):
    """Configuration for the production_line app.

    Owns the roll ledger and the reconciliation rules.  Importing the
    signals module on ready wires roll writes to the job-order cache.
    """

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'production_line'

    def ready(self):
        from . import signals  # noqa: F401
