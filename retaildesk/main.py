from retaildesk import create_app
from retaildesk.core.config import get_settings
from retaildesk.core.logging import configure_logging
from retaildesk.core.metrics import install_health_and_metrics

settings = get_settings()
configure_logging(settings.LOG_LEVEL)
app = create_app(settings)
instrumentator = install_health_and_metrics(app)
