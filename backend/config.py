import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Socket.IO namespace clients connect to
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/ws')
    # Comma-separated list of browser origins allowed for HTTP and Socket.IO
    CORS_ALLOWED_ORIGINS = [
        o.strip() for o in os.environ.get(
            'CORS_ALLOWED_ORIGINS',
            'http://localhost:5173,http://127.0.0.1:5173,http://localhost:5174,http://127.0.0.1:5174',
        ).split(',') if o.strip()
    ]
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Optional: fixed seed for shuffles and starter picks. Unset means random.
    SHUFFLE_SEED = int(os.environ['SHUFFLE_SEED']) if os.environ.get('SHUFFLE_SEED') else None
