import os
from dotenv import load_dotenv

load_dotenv(os.path.join(os.path.dirname(__file__), '.env'))

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-prod'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///facility_scheduler.db'

    # Scheduling Rules Defaults
    OPENING_HOUR = 6    # 6 AM
    CLOSING_HOUR = 22   # 10 PM
    BOOKING_CODE_PREFIX = 'BK'
    BOOKING_CODE_ATTEMPTS = 3
    TIMEZONE = os.environ.get('TIMEZONE') or 'Asia/Ho_Chi_Minh'

class DevelopmentConfig(Config):
    DEBUG = True

class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'

class ProductionConfig(Config):
    DEBUG = False
    # In prod, rely on env vars strictly
