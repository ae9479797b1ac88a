"""
Configuration constants for the photo reconciler.
"""

# --- File Type Definitions ---
RAW_EXTS = {'.arw', '.cr2', '.cr3', '.nef', '.orf', '.rw2', '.dng'}
JPEG_EXTS = {'.jpg', '.jpeg', '.jpe'}

# Extensions treated as photos by the default filter
PHOTO_EXTS = {'.jpg', '.jpeg', '.arw'}

# Extension to Category Mapping
# Used as the FileRecord category tag; unknown extensions get ''
EXT_TO_TYPE = {}
for ext in RAW_EXTS: EXT_TO_TYPE[ext] = 'raw'
for ext in JPEG_EXTS: EXT_TO_TYPE[ext] = 'jpeg'

# --- Session Grouping ---
# Directories whose mtime is more than this many whole hours after the
# first directory of the current group start a new group.
GROUP_GAP_HOURS = 39
NS_PER_HOUR = 3600 * 1_000_000_000

# --- Hashing & Performance ---
HASH_CHUNK_SIZE = 64 * 1024  # 64 KB chunks for reading

# --- Reporting ---
DATE_FORMAT = "%Y-%m-%d"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
