from ashenda.routes.api import register_api_routes
from ashenda.routes.auth import register_auth_routes
from ashenda.routes.public import register_public_routes


def register_routes(app):
    register_auth_routes(app)
    register_public_routes(app)
    register_api_routes(app)
