from flask import Flask

from .config import CONFIG
from .state import MatchStore


def create_app(store=None):
    app = Flask(__name__)
    app.config["SECRET_KEY"] = CONFIG.flask_secret_key

    from .api import api, STORE_KEY

    app.extensions[STORE_KEY] = store if store is not None else MatchStore()
    app.register_blueprint(api, url_prefix="/")

    return app
