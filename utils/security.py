"""
Security Module - Bearer tokens, password hashing, client IP and rate limiting
"""

import hashlib
import secrets
import time
from datetime import datetime

from flask import request, current_app, g
from werkzeug.security import generate_password_hash, check_password_hash

from extensions import db


# Rate Limiting
RATE_LIMIT_REQUESTS = {}  # {ip: [(timestamp, endpoint), ...]}


def get_client_ip():
    """Get real client IP address"""
    forwarded = request.environ.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.environ.get('REMOTE_ADDR', 'unknown')


def check_rate_limit(endpoint='contact'):
    """Check if IP is within rate limit"""
    max_requests = current_app.config.get('RATE_LIMIT_MAX_REQUESTS', 10)
    window = current_app.config.get('RATE_LIMIT_WINDOW', 60)
    client_ip = get_client_ip()
    current_time = time.time()

    # Clean old requests outside the window
    RATE_LIMIT_REQUESTS[client_ip] = [
        (ts, ep) for ts, ep in RATE_LIMIT_REQUESTS.get(client_ip, [])
        if current_time - ts < window
    ]

    endpoint_requests = [
        ep for ts, ep in RATE_LIMIT_REQUESTS[client_ip] if ep == endpoint
    ]
    if len(endpoint_requests) >= max_requests:
        current_app.logger.warning(f"Rate limit exceeded for {client_ip} on {endpoint}")
        return False

    RATE_LIMIT_REQUESTS[client_ip].append((current_time, endpoint))
    return True


def hash_password(password):
    return generate_password_hash(password)


def verify_password(password, password_hash):
    """Verify password against hash"""
    return check_password_hash(password_hash, password)


def hash_token(token):
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def issue_token(user, name='auth_token'):
    """Create a personal access token; only its hash is stored"""
    from models import ApiToken

    token = secrets.token_urlsafe(current_app.config.get('API_TOKEN_BYTES', 40))
    db.session.add(ApiToken(user_id=user.id, name=name, token_hash=hash_token(token)))
    db.session.commit()
    return token


def get_bearer_token(req):
    header = req.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    return token.strip()


def load_user_from_request(req):
    """Flask-Login request loader: authenticate `Authorization: Bearer <token>`"""
    from models import ApiToken

    token = get_bearer_token(req)
    if not token:
        return None

    api_token = ApiToken.query.filter_by(token_hash=hash_token(token)).first()
    if not api_token:
        return None

    api_token.last_used_at = datetime.utcnow()
    db.session.commit()
    g.api_token = api_token
    return api_token.user


def revoke_current_token():
    api_token = g.get('api_token')
    if not api_token:
        return False
    db.session.delete(api_token)
    db.session.commit()
    g.api_token = None
    return True


__all__ = [
    'get_client_ip',
    'check_rate_limit',
    'hash_password',
    'verify_password',
    'hash_token',
    'issue_token',
    'load_user_from_request',
    'revoke_current_token'
]
