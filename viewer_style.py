# viewer_style.py — colours and fonts shared by the viewer widgets

BG_MAIN = "#f3f4f6"
BG_TOOLBAR = "#1f2937"
BG_PANEL = "#ffffff"
BG_BUTTON = "#2563eb"
FG_BUTTON = "#ffffff"
FG_TEXT = "#111827"
FG_SUBTEXT = "#4b5563"
FG_ERROR = "#b91c1c"

FONT_HEADER = ("Segoe UI", 11, "bold")
FONT_TEXT = ("Segoe UI", 10)
FONT_BUTTON = ("Segoe UI", 10, "bold")
FONT_MONO = ("Consolas", 10)

HISTOGRAM_COLOR = "#3b82f6"
ZOOM_STEP = 1.25
