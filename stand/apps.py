from django.apps import AppConfig


class StandConfig(AppConfig):
    name = "stand"
    verbose_name = "Food stand orders"
