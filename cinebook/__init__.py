from flask import Flask

from cinebook.extensions import db, cache, mail


def create_app(config_object="cinebook.config.Config"):
    app = Flask(__name__)
    app.config.from_object(config_object)

    db.init_app(app)
    cache.init_app(app)
    mail.init_app(app)

    from cinebook import models  # noqa: F401  (registers tables)
    from cinebook.commands import register_commands
    from cinebook.controllers import register_controllers
    from cinebook.services.notifications import notify_refund_required
    from cinebook.services.orchestrator import BookingOrchestrator

    app.extensions["cinebook.orchestrator"] = BookingOrchestrator(
        payment_timeout=app.config["CINEBOOK_PAYMENT_TIMEOUT"],
        notifier=notify_refund_required,
    )
    register_controllers(app)
    register_commands(app)
    return app
