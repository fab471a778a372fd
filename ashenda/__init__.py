from flask import Flask

from ashenda.config import Config
from ashenda.extensions import db, login_manager, migrate
from ashenda.routes import register_routes
from ashenda.services import auth, client


def create_app(test_config=None):
    app = Flask(
        __name__,
        template_folder="../templates",
        static_folder="../static",
    )
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    login_manager.login_view = "login"

    auth.init_app(app)
    client.init_app(app)

    @login_manager.user_loader
    def load_user(user_id):
        user = auth.get_auth().get_user()
        if user is not None and user.get_id() == user_id:
            return user
        return None

    register_routes(app)
    return app


__all__ = ["db", "migrate", "create_app"]
