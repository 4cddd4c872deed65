DEFAULT_LEAGUE_TIMEZONE = 'UTC'
DEFAULT_MAX_PHOTOS_PER_ACTIVITY = 10

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# Regularity calendar and heatmap windows, in days
CALENDAR_WINDOW_DAYS = 14
HEATMAP_WINDOW_DAYS = 90

# Days without activity a streak survives before resetting
STREAK_GRACE_DAYS = 1

# Where notifications go: the notifications table or the application log
NOTIFICATION_SINKS = ('database', 'log')
DEFAULT_NOTIFICATION_SINK = 'database'
