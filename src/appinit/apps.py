"""Module: appinit.apps

Purpose: Django app configuration for AppInit.

Key Components:
- AppinitConfig: Django AppConfig for appinit app
"""

from django.apps import AppConfig


class AppinitConfig(AppConfig):
    """Django app configuration for appinit.

    Purpose: Register appinit as a Django app so its management commands are found.
    """

    name = 'appinit'
    verbose_name = 'AppInit'
    default_auto_field = 'django.db.models.BigAutoField'
