from enum import Enum
import re


class CacheKind(Enum):
    MODULE = "module"
    BUILD_CACHE = "build-cache"
    VERSION = "version"
    WRAPPER_DIST = "wrapper-dist"


# Gradle User Home layout
CACHES_DIR = "caches"
MODULES_DIR = "modules-2"
MODULE_FILES_GLOB = "files-*"
BUILD_CACHE_GLOB = "build-cache-*"
WRAPPER_DISTS_DIR = "wrapper/dists"

DEFAULT_MARKER_FILE_NAME = "gc.properties"
MARKER_KEYS = ("lastUsed", "timestamp")

# Signal for a root whose marker is missing or corrupt
NEVER_USED = 0

# e.g. 7.5.1, 8.0-rc-1, 7.6-milestone-2, 8.1-20230101000000+0000
GRADLE_VERSION_PATTERN = re.compile(r"^\d+\.\d+(?:\.\d+)?(?:-[0-9A-Za-z.+-]+)?$")
WRAPPER_DIST_PATTERN = re.compile(r"^gradle-(?P<version>.+)-(?:bin|all)$")
BUILD_CACHE_ENTRY_PATTERN = re.compile(r"^[0-9a-f]{32,64}$")

# Staging directory contents
SNAPSHOT_FILE_NAME = "cache-snapshot.json"
STATE_FILE_NAME = "state.json"
SNAPSHOT_FORMAT_VERSION = 1

# Keys saved in the state store between CI steps
STATE_EXECUTABLE = "executable"
