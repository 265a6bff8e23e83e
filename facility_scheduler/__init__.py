from flask import Flask
from facility_scheduler.config import DevelopmentConfig
from facility_scheduler.extensions import db, migrate

def create_app(config_class=DevelopmentConfig):
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Models must be imported before create_all / migrations see the metadata
    from facility_scheduler import models  # noqa: F401

    # Register Blueprints
    from facility_scheduler.api.routes.bookings import bookings_bp
    from facility_scheduler.api.routes.facilities import facilities_bp
    from facility_scheduler.api.routes.calendar import calendar_bp

    app.register_blueprint(bookings_bp, url_prefix='/api/bookings')
    app.register_blueprint(facilities_bp, url_prefix='/api/facilities')
    app.register_blueprint(calendar_bp, url_prefix='/api/calendar')

    @app.route('/health')
    def health():
        return {"status": "ok", "app": "FacilityScheduler"}

    return app
