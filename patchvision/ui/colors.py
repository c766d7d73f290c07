# patchvision/ui/colors.py
"""
PatchVision — Terminal Color System
ANSI color codes and semantic roles for CLI output
"""

# ═══════════════════════════════════════════════════════════════
# PALETTE
# ═══════════════════════════════════════════════════════════════

NEON_PURPLE = "\033[38;5;165m"     # Brand / headings
ELECTRIC_CYAN = "\033[38;5;51m"    # Paths / hunk headers
MID_GRAY = "\033[38;5;250m"        # Muted labels
DARK_GRAY = "\033[38;5;240m"       # Separators

GLITCH_RED = "\033[38;5;196m"      # Errors / removed lines
GLITCH_GREEN = "\033[38;5;46m"     # Success / added lines
NEON_YELLOW = "\033[38;5;226m"     # Warnings / clipboard notes

# ═══════════════════════════════════════════════════════════════
# TEXT STYLES
# ═══════════════════════════════════════════════════════════════

BOLD = "\033[1m"
DIM = "\033[2m"

RESET = "\033[0m"

# ═══════════════════════════════════════════════════════════════
# SEMANTIC COLOR ROLES
# ═══════════════════════════════════════════════════════════════

PRIMARY_FG = NEON_PURPLE
ACCENT_FG = ELECTRIC_CYAN
MUTED_FG = MID_GRAY
MUTED_DARK_FG = DARK_GRAY
ERROR_FG = GLITCH_RED
SUCCESS_FG = GLITCH_GREEN
WARNING_FG = NEON_YELLOW

DIFF_ADDED_FG = GLITCH_GREEN
DIFF_REMOVED_FG = GLITCH_RED
DIFF_HUNK_FG = ELECTRIC_CYAN
DIFF_HEADER_FG = f"{BOLD}{MID_GRAY}"

# ═══════════════════════════════════════════════════════════════
# COLOR UTILITIES
# ═══════════════════════════════════════════════════════════════

def colorize(text: str, color: str, style: str = "") -> str:
    """Apply color and optional style to text"""
    return f"{style}{color}{text}{RESET}"

def glow(text: str, color: str = NEON_PURPLE) -> str:
    """Bold + color"""
    return f"{BOLD}{color}{text}{RESET}"
