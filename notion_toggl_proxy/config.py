import os

# ----------------------
# HTTP surface
# ----------------------
FRONTEND_ORIGIN = os.getenv("FRONTEND_ORIGIN", "*")
RATE_LIMIT = os.getenv("RATE_LIMIT", "60 per minute")
RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() in ("1", "true", "yes", "on")
MAX_REQUEST_BYTES = int(os.getenv("MAX_REQUEST_BYTES", "262144"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# ----------------------
# Upstreams
# ----------------------
UPSTREAM_TIMEOUT = float(os.getenv("UPSTREAM_TIMEOUT", "15"))

NOTION_API_BASE = os.getenv("NOTION_API_BASE", "https://api.notion.com/v1").rstrip("/")
NOTION_VERSION = os.getenv("NOTION_VERSION", "2022-06-28")

TOGGL_API_BASE = os.getenv("TOGGL_API_BASE", "https://api.track.toggl.com/api/v9").rstrip("/")
TOGGL_CREATED_WITH = os.getenv("TOGGL_CREATED_WITH", "Notion-Toggl-Timer")

# ----------------------
# Notion database layout
# ----------------------
CATEGORY_PROPERTY = os.getenv("CATEGORY_PROPERTY", "カテゴリ")
DEPARTMENT_PROPERTY = os.getenv("DEPARTMENT_PROPERTY", "部門")
COMPLETION_DATE_PROPERTY = os.getenv("COMPLETION_DATE_PROPERTY", "完了日")
MINUTES_PROPERTY = os.getenv("MINUTES_PROPERTY", "作業時間")
UNCATEGORIZED_LABEL = os.getenv("UNCATEGORIZED_LABEL", "その他")

# Upper bound on paginated query round trips per KPI window
KPI_MAX_PAGES = int(os.getenv("KPI_MAX_PAGES", "20"))
