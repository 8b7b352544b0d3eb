import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma separated list of allowed origins, or '*'
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/ws')
    # Room id generation: length of the hex code and how many times to retry on collision
    ROOM_ID_LENGTH = int(os.environ.get('ROOM_ID_LENGTH', '4'))
    ROOM_ID_MAX_ATTEMPTS = int(os.environ.get('ROOM_ID_MAX_ATTEMPTS', '32'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '3001'))
