from flask_sqlalchemy import SQLAlchemy

# Created here and bound in the app factory to avoid circular imports
# between app.py, models.py and the domain modules.
db = SQLAlchemy()
