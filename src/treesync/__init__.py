"""Tree Sync - Content-addressed directory tree synchronization."""

__version__ = "0.1.0"

# Directory and file constants
TREESYNC_DIR = ".treesync"
CONFIG_FILE = "config.json"
