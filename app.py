import logging
import os
from flask import Flask
from flask_cors import CORS
from extensions import db
from dotenv import load_dotenv

load_dotenv() # Load environment variables from .env file BEFORE importing routes

import config
import routes
from seed import seed_demo_data

logger = logging.getLogger(__name__)


def create_app(overrides=None):
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    app = Flask(__name__)
    CORS(app)

    # Configure the database from the environment variable
    database_url = os.environ.get('DATABASE_URL')
    if not database_url:
        raise RuntimeError("DATABASE_URL is not set. Please create a .env file or set the environment variable.")

    # Heroku/Render use postgres://, but SQLAlchemy needs postgresql://
    if database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql://", 1)

    app.config['SQLALCHEMY_DATABASE_URI'] = database_url
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['SEED'] = config.load_seed_config()
    app.config['SEED_DEMO_DATA'] = config.SEED_DEMO_DATA
    if overrides:
        app.config.update(overrides)

    # Initialize the database with the app
    db.init_app(app)

    # Initialize routes
    routes.init_app(app)

    # Create database tables if they don't exist
    with app.app_context():
        db.create_all()
        if app.config['SEED_DEMO_DATA']:
            seed_demo_data(app.config['SEED'])

    logger.info("Application created (database: %s)", database_url.split('://', 1)[0])
    return app

if __name__ == '__main__':
    app = create_app()
    app.run(port=5001, debug=True)
