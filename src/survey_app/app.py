"""Fire Door Survey client - application composition root."""
import logging
import click

from .state import SessionState
from .handlers.survey_handler import SurveyHandler
from .handlers.photo_handler import PhotoHandler
from .handlers.survey_list_handler import SurveyListHandler
from .config_manager import ConfigManager
from .services.api_service import APIService
from .services.geolocation_service import GeolocationService
from .services.image_service import ImageService
from .logging_config import setup_logging


def console_alert(title, message):
    click.echo(click.style(title, bold=True), err=True)
    click.echo(message, err=True)


def console_confirm(title, message):
    return click.confirm(f"{title}: {message}", default=False)


class SurveyApp:
    """Wires configuration, services, state and handlers together.

    A user interface drives the form through state.store and the handlers;
    alert and confirm are the callbacks the handlers use to talk to the user.
    """

    def __init__(self, config=None, alert=None, confirm=None, api_service=None, position_provider=None):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.config = config or ConfigManager()
        self.alert = alert or console_alert
        self.confirm = confirm or console_confirm

        self.api_service = api_service or APIService(self.config.api_base_url, timeout=self.config.api_timeout)
        self.geolocation_service = GeolocationService(self.config, provider=position_provider)
        self.image_service = ImageService(self.api_service, self.config)

        self.state = SessionState()

        self.survey_handler = SurveyHandler(self)
        self.photo_handler = PhotoHandler(self)
        self.survey_list_handler = SurveyListHandler(self)
        self.logger.debug(f"Survey app composed (API URL={self.config.api_base_url})")

    def startup(self):
        """Mount a fresh survey form."""
        self.logger.info("Starting survey app")
        return self.survey_handler.mount()


def main(**kwargs):
    setup_logging()
    app = SurveyApp(**kwargs)
    app.startup()
    return app
