import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma-separated list of browser origins allowed by CORS and Socket.IO
    CORS_ORIGINS = [o.strip() for o in os.environ.get(
        'CORS_ORIGINS',
        'http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173',
    ).split(',') if o.strip()]
    PORT = int(os.environ.get('PORT', '3001'))
    # Phase timing (milliseconds)
    WARMUP_DURATION_MS = int(os.environ.get('WARMUP_DURATION_MS', '30000'))
    # Win threshold = largest team size * this
    WIN_POINTS_PER_PLAYER = int(os.environ.get('WIN_POINTS_PER_PLAYER', '2000'))
    # Liveness: a player counts as connected if seen within this window
    IDLE_TIMEOUT_MS = int(os.environ.get('IDLE_TIMEOUT_MS', '5000'))
    # A team with nobody connected for this long resets the whole game
    EMPTY_TEAM_RESET_MS = int(os.environ.get('EMPTY_TEAM_RESET_MS', '15000'))
    # Minimum gap between passive income payouts
    PASSIVE_INCOME_INTERVAL_MS = int(os.environ.get('PASSIVE_INCOME_INTERVAL_MS', '1000'))
    MAX_NAME_LENGTH = int(os.environ.get('MAX_NAME_LENGTH', '32'))
