import os
from pathlib import Path
from dotenv import load_dotenv

ROOT_DIR = Path(__file__).parent
load_dotenv(ROOT_DIR / '.env')

# MongoDB
MONGO_URL = os.environ.get('MONGO_URL', 'mongodb://localhost:27017')
DB_NAME = os.environ.get('DB_NAME', 'blog')
COMMENT_COLLECTION = os.environ.get('COMMENT_COLLECTION', 'comments')

# JWT
JWT_SECRET = os.environ.get('JWT_SECRET')
if not JWT_SECRET:
    raise RuntimeError("JWT_SECRET environment variable must be set")
JWT_ALGORITHM = os.environ.get('JWT_ALGORITHM', 'HS256')

# CORS
CORS_ORIGINS = os.environ.get('CORS_ORIGINS', 'http://localhost:3000').split(',')

# Sensitive-word filter
SENSITIVE_WORDS_PATH = Path(
    os.environ.get('SENSITIVE_WORDS_PATH', str(ROOT_DIR / 'resources' / 'sensitive_words.txt'))
)
SENSITIVE_MASK_CHAR = os.environ.get('SENSITIVE_MASK_CHAR', '*')
# 1 = minimum match, 2 = maximum match
SENSITIVE_MATCH_MODE = int(os.environ.get('SENSITIVE_MATCH_MODE', '1'))

# Pagination
DEFAULT_PAGE_ROWS = int(os.environ.get('DEFAULT_PAGE_ROWS', '10'))
MAX_PAGE_ROWS = int(os.environ.get('MAX_PAGE_ROWS', '100'))

# Roles allowed to purge every comment of a document
MODERATOR_ROLES = ("owner", "admin")
