import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Players needed before a race can start (auto policy starts right there)
    MIN_PLAYERS = int(os.environ.get('MIN_PLAYERS', '2'))
    # 'auto': race begins once MIN_PLAYERS are present
    # 'host': the first player to join starts it with a start-race event
    START_POLICY = os.environ.get('START_POLICY', 'auto')
    # 'first-to-finish' or 'all-finish'
    COMPLETION_RULE = os.environ.get('COMPLETION_RULE', 'first-to-finish')
    ROOM_CODE_LENGTH = int(os.environ.get('ROOM_CODE_LENGTH', '6'))
    # Longer display names are truncated
    MAX_NAME_LENGTH = int(os.environ.get('MAX_NAME_LENGTH', '32'))
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    CORS_ORIGINS = [
        origin.strip()
        for origin in os.environ.get(
            'CORS_ORIGINS',
            'http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000,http://127.0.0.1:3000',
        ).split(',')
        if origin.strip()
    ]
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
