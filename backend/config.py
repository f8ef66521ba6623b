import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Socket.IO namespace all match traffic lives on
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/ws')
    CORS_ORIGINS = [o.strip() for o in os.environ.get(
        'CORS_ORIGINS',
        'http://localhost:5173,http://127.0.0.1:5173,http://localhost:5174,http://127.0.0.1:5174',
    ).split(',') if o.strip()]
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # 'background' runs timers as Socket.IO background tasks, 'manual' waits for advance()
    SCHEDULER_MODE = os.environ.get('SCHEDULER_MODE', 'background')
    # Round timers (milliseconds)
    COUNTDOWN_DURATION_MS = int(os.environ.get('COUNTDOWN_DURATION_MS', '4000'))
    # Combat tuning
    MAX_HP = int(os.environ.get('MAX_HP', '100'))
    MELEE_RANGE = float(os.environ.get('MELEE_RANGE', '60'))
    MELEE_DAMAGE = int(os.environ.get('MELEE_DAMAGE', '10'))
    MAX_PROJECTILES = int(os.environ.get('MAX_PROJECTILES', '5'))
    PROJECTILE_DAMAGE = int(os.environ.get('PROJECTILE_DAMAGE', '15'))
    PROJECTILE_SPEED = float(os.environ.get('PROJECTILE_SPEED', '520'))
    PROJECTILE_LIFETIME_MS = int(os.environ.get('PROJECTILE_LIFETIME_MS', '2200'))
    PROJECTILE_RANGE = float(os.environ.get('PROJECTILE_RANGE', '800'))
    PROJECTILE_VERTICAL_TOLERANCE = float(os.environ.get('PROJECTILE_VERTICAL_TOLERANCE', '60'))
    # Input sanitizing
    ROOM_ID_MAX_LENGTH = int(os.environ.get('ROOM_ID_MAX_LENGTH', '32'))
    NAME_MAX_LENGTH = int(os.environ.get('NAME_MAX_LENGTH', '16'))
    # Client-side delay applied to opponent updates (ms). 0 disables.
    CLIENT_LAG_BUFFER_MS = int(os.environ.get('CLIENT_LAG_BUFFER_MS', '100'))
