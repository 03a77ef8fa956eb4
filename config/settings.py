import os
from dotenv import load_dotenv

# Only load the .env file if we're not on Render (i.e., we are in a local environment)
if os.environ.get("RENDER") != "true":
    load_dotenv()

# Flask Configuration
SECRET_KEY = os.getenv('SECRET_KEY', 'a_very_secret_key_that_should_be_changed')
CORS_ORIGINS = os.getenv('CORS_ORIGINS', '*')

# Database Configuration
DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///trivia.db')
if DATABASE_URL.startswith('postgres://'):
    # Render hands out the legacy scheme, SQLAlchemy only accepts postgresql://
    DATABASE_URL = DATABASE_URL.replace('postgres://', 'postgresql://', 1)
SQL_DEBUG = os.getenv('SQL_DEBUG', 'false').lower() == 'true'

# Game Configuration
SHARE_CODE = os.getenv('SHARE_CODE', '')
ADMIN_PASSWORD = os.getenv('ADMIN_PASSWORD', 'changeme')
ADMIN_SESSION_HOURS = int(os.getenv('ADMIN_SESSION_HOURS', 24))
RECONCILE_INTERVAL_SECONDS = int(os.getenv('RECONCILE_INTERVAL_SECONDS', 30))
DEFAULT_POINTS = int(os.getenv('DEFAULT_POINTS', 10))

# Server Configuration
PORT = int(os.getenv('PORT', 5000))
DEBUG = os.environ.get('RENDER', '') != 'true'
SOCKETIO_ASYNC_MODE = os.getenv('SOCKETIO_ASYNC_MODE', 'eventlet')
