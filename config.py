import os
from dotenv import load_dotenv

BASE_DIR = os.path.abspath(os.path.dirname(__file__))
load_dotenv(os.path.join(BASE_DIR, '.env'))

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///' + os.path.join(BASE_DIR, 'guessage.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Age lookup API (agify.io compatible)
    AGE_API_URL = os.environ.get('AGE_API_URL', 'https://api.agify.io')
    # Optional ISO 3166-1 country hint, e.g. "US"
    AGE_API_COUNTRY = os.environ.get('AGE_API_COUNTRY')
    AGE_API_TIMEOUT_SEC = float(os.environ.get('AGE_API_TIMEOUT_SEC', '5'))
    # Where subject names come from: file, database or faker
    NAME_SOURCE = os.environ.get('NAME_SOURCE', 'file')
    NAMES_FILE = os.environ.get('NAMES_FILE') or os.path.join(BASE_DIR, 'guessage', 'static', 'valid_names.txt')
    # Attempts allowed to find a name the age API recognizes (faker source)
    NAME_RETRY_LIMIT = int(os.environ.get('NAME_RETRY_LIMIT', '10'))
    LEADERBOARD_SIZE = int(os.environ.get('LEADERBOARD_SIZE', '5'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
