import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '3000'))
    # Comma separated; '*' allows any origin
    CORS_ORIGINS = [o.strip() for o in os.environ.get('CORS_ORIGINS', '*').split(',') if o.strip()]
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    # Dice each player holds at match start and after a reset
    STARTING_DICE = int(os.environ.get('STARTING_DICE', '4'))
    # Minimum ready players before a match begins
    MIN_PLAYERS = int(os.environ.get('MIN_PLAYERS', '2'))
    MAX_NAME_LENGTH = int(os.environ.get('MAX_NAME_LENGTH', '24'))
    # Auto-advance timers (seconds)
    REVEAL_DURATION_SEC = float(os.environ.get('REVEAL_DURATION_SEC', '5'))
    GAME_OVER_DURATION_SEC = float(os.environ.get('GAME_OVER_DURATION_SEC', '5'))
