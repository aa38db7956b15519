from flask import Flask

from . import config
from .controllers.auth import bp as auth_bp
from .controllers.booking import bp as booking_bp
from .controllers.cars import bp as cars_bp
from .controllers.host import bp as host_bp
from .controllers.media import bp as media_bp
from .controllers.profile import bp as profile_bp
from .controllers.rentals import bp as rentals_bp
from .controllers.reviews import bp as reviews_bp
from .controllers.views import bp as views_bp
from .models.store import Store
from .services.storage_service import StorageService
from .utils.filters import register_filters


def create_app(overrides=None):
    app = Flask(__name__, static_folder="static", template_folder="templates")
    app.config.update(config.flask_settings())
    if overrides:
        app.config.update(overrides)

    Store.instance(app.config["DATA_PATH"])  # load data.pkl or start empty
    StorageService.instance(app.config["STORAGE_DIR"])

    for bp in (views_bp, auth_bp, cars_bp, booking_bp, rentals_bp,
               reviews_bp, host_bp, profile_bp, media_bp):
        app.register_blueprint(bp)
    register_filters(app)

    return app
