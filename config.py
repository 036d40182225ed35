import os


def _env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """Base configuration"""

    # Flask Settings
    SECRET_KEY = os.environ.get('SECRET_KEY', 'CHANGE-THIS-SECRET-KEY-IN-PRODUCTION')
    JSON_AS_ASCII = False
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Database Settings
    _database_url = os.environ.get('DATABASE_URL')
    if not _database_url:
        pg_user = os.environ.get('PGUSER')
        pg_pass = os.environ.get('PGPASSWORD')
        pg_host = os.environ.get('PGHOST')
        pg_port = os.environ.get('PGPORT')
        pg_db = os.environ.get('PGDATABASE')
        if all([pg_user, pg_pass, pg_host, pg_port, pg_db]):
            _database_url = f"postgresql://{pg_user}:{pg_pass}@{pg_host}:{pg_port}/{pg_db}"

    if _database_url and _database_url.startswith("postgres://"):
        _database_url = _database_url.replace("postgres://", "postgresql://", 1)

    SQLALCHEMY_DATABASE_URI = _database_url or 'sqlite:///portfolio.db'
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_size': 10,
        'pool_recycle': 3600,
        'pool_pre_ping': True,
    }
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Upload Settings
    MAX_CONTENT_LENGTH = 32 * 1024 * 1024  # whole request, all files included

    # Binary store: 'database' keeps base64 blobs in image_storage,
    # 's3' offloads them to an S3-compatible bucket.
    STORAGE_BACKEND = os.environ.get('STORAGE_BACKEND', 'database')
    STORAGE_FOLDERS = {
        'projects': 'projects',
        'categories': 'category_covers',
        'skills': 'skills',
        'cvs': 'cvs',
    }
    ALLOWED_EXTENSIONS = {
        'image': {'jpg', 'jpeg', 'png', 'gif', 'webp'},
        'logo': {'jpg', 'jpeg', 'png', 'gif', 'webp', 'svg'},
        'document': {'pdf', 'doc', 'docx'},
    }
    MAX_FILE_SIZE = {
        'image': 5 * 1024 * 1024,  # 5MB
        'logo': 2 * 1024 * 1024,  # 2MB
        'document': 10 * 1024 * 1024,  # 10MB
    }

    # S3 Settings
    AWS_BUCKET = os.environ.get('AWS_BUCKET')
    AWS_DEFAULT_REGION = os.environ.get('AWS_DEFAULT_REGION', 'us-east-1')
    AWS_ACCESS_KEY_ID = os.environ.get('AWS_ACCESS_KEY_ID')
    AWS_SECRET_ACCESS_KEY = os.environ.get('AWS_SECRET_ACCESS_KEY')
    AWS_ENDPOINT = os.environ.get('AWS_ENDPOINT')
    AWS_URL = os.environ.get('AWS_URL')
    AWS_USE_PATH_STYLE_ENDPOINT = _env_bool('AWS_USE_PATH_STYLE_ENDPOINT')
    AWS_CDN_ENABLED = _env_bool('AWS_CDN_ENABLED')
    AWS_CDN_URL = os.environ.get('AWS_CDN_URL')
    S3_CONNECT_TIMEOUT = 5
    S3_READ_TIMEOUT = 30
    S3_PRESIGNED_EXPIRY = 3600

    # Listing Settings
    PROJECTS_PER_PAGE = 12
    CATEGORIES_PER_PAGE = 15
    SKILLS_PER_PAGE = 20
    LIST_CACHE_TTL = 600  # 10 minutes
    LIST_CACHE_PAGES = 10

    # Category delete guard
    CATEGORY_DELETE_RETRIES = 3
    CATEGORY_DELETE_RETRY_DELAY = 0.1

    # Auth Settings
    ALLOW_REGISTRATION = _env_bool('ALLOW_REGISTRATION')
    API_TOKEN_BYTES = 40

    # Contact form rate limiting
    RATE_LIMIT_MAX_REQUESTS = 10
    RATE_LIMIT_WINDOW = 60

    # Admin Notification Settings
    ADMIN_TELEGRAM_BOT_TOKEN = os.environ.get('ADMIN_TELEGRAM_BOT_TOKEN')
    ADMIN_TELEGRAM_CHAT_ID = os.environ.get('ADMIN_TELEGRAM_CHAT_ID')


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    TESTING = False
    LOG_LEVEL = 'DEBUG'


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    TESTING = False


class TestingConfig(Config):
    """Testing configuration"""
    DEBUG = True
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    # For in-memory SQLite during tests, keep engine options empty to avoid
    # passing invalid pool settings like pool_size to SQLite's StaticPool.
    SQLALCHEMY_ENGINE_OPTIONS = {}
    STORAGE_BACKEND = 'database'
    CATEGORY_DELETE_RETRY_DELAY = 0
    ADMIN_TELEGRAM_BOT_TOKEN = None
    ADMIN_TELEGRAM_CHAT_ID = None


# Select configuration based on environment
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config(config_name=None):
    """Get configuration by name, falling back to FLASK_ENV"""
    env = config_name or os.environ.get('FLASK_ENV', 'development')
    return config.get(env, config['default'])
