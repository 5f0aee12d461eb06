import os

class BaseConfig:
    SECRET_KEY = os.getenv('SECRET_KEY', 'change-me')
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///app.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # shared secret expected in X-Webhook-Secret; unset disables the check
    WEBHOOK_SECRET = os.getenv('WEBHOOK_SECRET')
    ADMIN_SECRET = os.getenv('ADMIN_SECRET')
    DEFAULT_ORGANIZATION_ID = int(os.getenv('DEFAULT_ORGANIZATION_ID', '1'))

class DevConfig(BaseConfig):
    DEBUG = True
    ENV = 'development'

class ProdConfig(BaseConfig):
    DEBUG = False
    ENV = 'production'
