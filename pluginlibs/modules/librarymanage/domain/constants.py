"""Constants shared across librarymanage domain models."""

from pluginlibs import __version__

HTTP_USER_AGENT = f"pluginlibs/{__version__}"

CONNECT_TIMEOUT_SECS = 5.0
READ_TIMEOUT_SECS = 5.0

CACHE_DIR_NAME = "lib"
TEMP_SUFFIX = ".tmp"
RELOCATED_SUFFIX = "-relocated"
JAR_EXTENSION = ".jar"

# Placeholder accepted in group ids and relocation patterns, rewritten to "."
PACKAGE_PLACEHOLDER = "{}"

# Joins include/exclude globs into one relocator argument
GLOB_SEPARATOR = ","

CHECKSUM_ALGORITHM = "sha256"
CHECKSUM_LENGTH = 32

MAVEN_CENTRAL = "https://repo1.maven.org/maven2/"
SONATYPE = "https://oss.sonatype.org/content/groups/public/"
JCENTER = "https://jcenter.bintray.com/"
JITPACK = "https://jitpack.io/"
MAVEN_LOCAL_DIR = ".m2/repository"
