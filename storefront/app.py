"""商店後端 Flask 應用：購物車、訂單與商品目錄 API。"""

from __future__ import annotations

import traceback
from typing import Optional

from flask import Flask, request
from werkzeug.exceptions import HTTPException

from .common.db import Database
from .common.errors import StoreError
from .common.services import CartService, CatalogService, OrderService
from .common.services.logging import log_event, set_level
from .config import StoreConfig
from .routes import cart, orders, products
from .routes.responses import fail, ok


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(StoreError)
    def handle_store_error(exc: StoreError):
        return fail(exc.message, exc.status_code)

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return fail(exc.description or exc.name, exc.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        log_event(
            "error",
            "request.failed",
            method=request.method,
            path=request.path,
            error=repr(exc),
            trace=traceback.format_exc(),
        )
        return fail("Internal server error", 500)


def create_app(config: Optional[StoreConfig] = None, database: Optional[Database] = None) -> Flask:
    config = config or StoreConfig.load()
    set_level(config.log_level)

    if database is None:
        database = Database(config.database_url)
    database.connect()
    database.create_all()

    app = Flask(__name__)
    app.config["SECRET_KEY"] = config.secret_key
    app.config["STORE_CONFIG"] = config

    components = {
        "database": database,
        "cart_service": CartService(database.session),
        "order_service": OrderService(
            database.session,
            tax_rate=config.tax_rate,
            free_shipping_threshold=config.free_shipping_threshold,
            flat_shipping_fee=config.flat_shipping_fee,
        ),
        "catalog_service": CatalogService(database.session),
    }
    app.extensions["storefront_components"] = components

    app.register_blueprint(cart.cart_bp)
    app.register_blueprint(orders.orders_bp)
    app.register_blueprint(products.products_bp)

    @app.get("/api/health")
    def health():
        return ok({"status": "OK"}, message="Storefront API is running")

    _register_error_handlers(app)
    return app


def main() -> None:
    config = StoreConfig.load()
    database = Database(config.database_url).connect()
    try:
        app = create_app(config, database)
        log_event("info", "app.started", host=config.host, port=config.port)
        app.run(host=config.host, port=config.port, debug=False)
    finally:
        database.close()


if __name__ == "__main__":
    main()
