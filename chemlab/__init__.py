import os
from flask import Flask
from .extensions import db

def create_app(test_config=None):
    app = Flask(__name__, instance_relative_config=True)

    # Configuration
    app.config.from_mapping(
        SECRET_KEY=os.getenv('CHEMLAB_SECRET_KEY', 'dev'),
        SQLALCHEMY_DATABASE_URI=os.getenv(
            'CHEMLAB_DATABASE_URI',
            'sqlite:///' + os.path.join(app.instance_path, 'chemlab.db'),
        ),
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        # None -> fresh entropy for the clock-reaction jitter on every request
        REACTION_SEED=os.getenv('CHEMLAB_REACTION_SEED'),
    )
    if test_config:
        app.config.update(test_config)

    # Ensure instance folder exists
    try:
        os.makedirs(app.instance_path)
    except OSError:
        pass

    # Initialize Extensions
    db.init_app(app)

    # Register Blueprints
    from .blueprints import admin, api
    app.register_blueprint(admin.bp)
    app.register_blueprint(api.bp)

    # Create DB Tables
    with app.app_context():
        from . import models  # noqa: F401
        db.create_all()

    return app
