import os
from dotenv import load_dotenv

load_dotenv(os.path.join(os.path.dirname(__file__), '.env'))

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-prod'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///roomshare.db'
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    JWT_EXPIRATION_HOURS = int(os.environ.get('JWT_EXPIRATION_HOURS', 24))

    # Business Rules Defaults
    # 'confirmed' books instantly, 'pending' waits for the owner's approval
    BOOKING_INITIAL_STATUS = os.environ.get('BOOKING_INITIAL_STATUS', 'confirmed')
    ROOMS_PAGE_SIZE = int(os.environ.get('ROOMS_PAGE_SIZE', 12))
    REVIEW_COMMENT_MAX_LENGTH = 1000

class DevelopmentConfig(Config):
    DEBUG = True

class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    LOG_LEVEL = 'WARNING'

class ProductionConfig(Config):
    DEBUG = False
    # In prod, rely on env vars strictly
