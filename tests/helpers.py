from datetime import datetime

# Every test runs with the clock frozen at this instant (UTC)
NOW = datetime(2024, 1, 1, 8, 0)

def at(hour, minute=0, day=1):
    return datetime(2024, 1, day, hour, minute)
