import os


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'payroll-secret-key-here'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///hr_and_payroll.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # HR System API configuration (employee lookup)
    HR_SYSTEM_URL = os.environ.get('HR_SYSTEM_URL') or 'http://localhost:5000'
    HR_API_TIMEOUT = int(os.environ.get('HR_API_TIMEOUT') or 30)
    USE_HR_API = os.environ.get('USE_HR_API', '').lower() in ('1', 'true', 'yes')

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL') or 'INFO'

    # Batch payroll runs
    PAYROLL_BATCH_WORKERS = int(os.environ.get('PAYROLL_BATCH_WORKERS') or 4)


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    USE_HR_API = False
    LOG_LEVEL = 'DEBUG'
    PAYROLL_BATCH_WORKERS = 1
