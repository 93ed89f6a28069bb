import logging

from ultrascore import create_app
from ultrascore.api import STORE_KEY
from ultrascore.config import CONFIG
from ultrascore.ingestion import start_udp_listener

logging.basicConfig(
    level=getattr(logging, CONFIG.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app()

if __name__ == "__main__":
    logging.getLogger(__name__).info("Starting Basketball Ultra Score Data Out service")
    start_udp_listener(app.extensions[STORE_KEY], CONFIG.udp_port, CONFIG.udp_host)
    app.run(
        host=CONFIG.flask_host,
        port=CONFIG.flask_port,
        debug=CONFIG.flask_debug,
        use_reloader=False,
    )
