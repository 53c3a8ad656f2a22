import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Origins allowed for both HTTP and Socket.IO (comma separated, '*' for any)
    CORS_ALLOWED_ORIGINS = os.environ.get('CORS_ALLOWED_ORIGINS', '*')
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    LOG_LEVEL = os.environ.get('LOG_LEVEL') or (
        'INFO' if os.environ.get('FLASK_ENV') == 'production' else 'DEBUG'
    )
    # Room capacity, moderators included
    MAX_PLAYERS_PER_ROOM = int(os.environ.get('MAX_PLAYERS_PER_ROOM', '20'))
    # Seat is kept this long after a transport disconnect (seconds)
    RECONNECTION_GRACE_PERIOD_SEC = float(os.environ.get('RECONNECTION_GRACE_PERIOD_SEC', '30'))
    # Empty rooms idle longer than this are deleted (seconds)
    ROOM_CLEANUP_TIMEOUT_SEC = float(os.environ.get('ROOM_CLEANUP_TIMEOUT_SEC', str(30 * 60)))
    ROOM_CLEANUP_INTERVAL_SEC = float(os.environ.get('ROOM_CLEANUP_INTERVAL_SEC', '60'))
    # Time for the removal notice to flush before the socket is closed (ms)
    REMOVAL_DISCONNECT_DELAY_MS = int(os.environ.get('REMOVAL_DISCONNECT_DELAY_MS', '100'))
