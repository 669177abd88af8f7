"""Prometheus metrics for the network monitor."""

from prometheus_client import Counter, Gauge, Histogram, Info

from src.config import APP_VERSION

# Application info
app_info = Info("net_monitor", "Application information")
app_info.info({
    "version": APP_VERSION,
    "service": "net-monitor-bot",
})

# Check metrics
checks_total = Counter(
    "net_monitor_checks_total",
    "Total number of reachability checks executed",
    ["result"],
)

check_duration_seconds = Histogram(
    "net_monitor_check_duration_seconds",
    "Duration of reachability checks in seconds",
    ["probe"],
    buckets=[0.1, 0.5, 1, 2, 5, 10, 30],
)

# Target status
target_up = Gauge(
    "net_monitor_target_up",
    "Target reachability (1=up, 0=down)",
    ["target"],
)

transitions_total = Counter(
    "net_monitor_transitions_total",
    "Total number of reachability transitions recorded",
    ["new_state"],
)

# Notification metrics
notifications_sent_total = Counter(
    "net_monitor_notifications_sent_total",
    "Total number of notifications sent",
    ["channel", "type"],
)

notifications_failed_total = Counter(
    "net_monitor_notifications_failed_total",
    "Total number of failed notification attempts",
    ["channel", "type"],
)

# Bot command metrics
commands_total = Counter(
    "net_monitor_commands_total",
    "Total number of bot commands handled",
    ["command"],
)

command_poll_errors_total = Counter(
    "net_monitor_command_poll_errors_total",
    "Total number of failed getUpdates polls",
)
