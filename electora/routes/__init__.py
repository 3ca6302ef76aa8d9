from flask import jsonify

from electora.routes.admin import register_admin_routes
from electora.routes.auth import register_auth_routes
from electora.routes.public import register_public_routes
from electora.services.errors import LedgerError


def register_routes(app):
    @app.errorhandler(LedgerError)
    def ledger_error(err):
        return jsonify(err.to_dict()), err.status_code

    register_auth_routes(app)
    register_public_routes(app)
    register_admin_routes(app)
