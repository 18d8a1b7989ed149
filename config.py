import os
from dotenv import load_dotenv

load_dotenv()


#Over here all the configurations are added within this class
class Config:
    SECRET_KEY = os.getenv('JWT_SECRET', 'change-me-in-production')
    JWT_ALGORITHM = 'HS256'
    JWT_EXPIRES_HOURS = int(os.getenv('JWT_EXPIRES_HOURS', 24))

    DB_PATH = os.getenv('DB_PATH', 'blog.db')

    API_KEY = os.getenv('GEMINI_API_KEY')
    GEMINI_MODEL = os.getenv('GEMINI_MODEL', 'gemini-1.5-flash-001')

    # A viewer is counted once per post inside this window
    VIEW_WINDOW_HOURS = 24

    # Search result rendering
    SNIPPET_WINDOW = 30
    PREVIEW_LENGTH = 120

    CORS_ORIGINS = os.getenv('CORS_ORIGINS', '*')
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
