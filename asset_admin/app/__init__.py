from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_bcrypt import Bcrypt
from asset_admin.config import Config, BASE_DIR

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()

def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    if app.config['SQLALCHEMY_DATABASE_URI'].startswith(f'sqlite:///{BASE_DIR}'):
        (BASE_DIR / 'data').mkdir(exist_ok=True)

    from asset_admin.app.logger import setup_logging
    setup_logging(app)

    db.init_app(app)
    bcrypt.init_app(app)
    login_manager.init_app(app)

    from asset_admin.app import auth
    auth.init_auth(login_manager)

    from asset_admin.app.errors import register_error_handlers
    register_error_handlers(app)

    from asset_admin.app.routes import add_cors_headers
    app.after_request(add_cors_headers)

    with app.app_context():
        # Import blueprints inside context
        from asset_admin.app.routes import (assets_bp, categories_bp, assignments_bp,
                                            returning_requests_bp)
        from asset_admin.app.routes.users import users_bp, auth_bp

        # Register blueprints
        app.register_blueprint(auth_bp)
        app.register_blueprint(assets_bp)
        app.register_blueprint(categories_bp)
        app.register_blueprint(assignments_bp)
        app.register_blueprint(returning_requests_bp)
        app.register_blueprint(users_bp)

        # Create all database tables
        from asset_admin.app import models  # noqa: F401
        db.create_all()

        from asset_admin.app.database import seed_db
        seed_db()

    app.logger.info('Application created with %s', config_class.__name__)
    return app
