"""taxonpreview web application."""

import logging

from taxonpreview.config import ConfigManager
from taxonpreview.system.structlog_configurator import configure_structlog
from taxonpreview.web.core.factory import create_app

# Configure logging before anything else imports and creates loggers
config_manager = ConfigManager()
config = config_manager.load()
configure_structlog(config)

# Disable uvicorn access logger; request outcomes are logged by the routes
logging.getLogger("uvicorn.access").disabled = True

app = create_app()
