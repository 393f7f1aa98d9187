from dotenv import load_dotenv
from app import create_app, db
from seed import seed_demo_data

# Load environment variables from .env file
load_dotenv()

# Seeding is done explicitly below so it also runs when SEED_DEMO_DATA is off
app = create_app({'SEED_DEMO_DATA': False})

# The 'with app.app_context()' is crucial. It sets up the necessary
# context for Flask-SQLAlchemy to know which database to connect to.
with app.app_context():
    print("Initializing database and creating tables...")

    # This command creates all tables defined in models.py
    # It will not re-create tables that already exist.
    db.create_all()
    print("Database tables created successfully!")

    added = seed_demo_data(app.config['SEED'])
    print(f"Demo data seeded ({added} new rows).")
