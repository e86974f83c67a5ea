"""
imagesmith Constants

Single source of truth for names shared by the resolvers, the config models
and the CLI.
"""

import re

# Environment variable pointing at an override mapping document
MAPPING_ENV_VAR = "IMAGESMITH_MAPPING"

# Environment variable holding the default log level
LOG_LEVEL_ENV_VAR = "IMAGESMITH_LOG_LEVEL"

# Bundled Kind -> filename type table, relative to imagesmith_sdk.kinds
DEFAULT_MAPPING_RESOURCE = "resources/kind-filename-type-mapping-default.adoc"

# Image environment variable the Java run script reads its main class from
JAVA_MAIN_CLASS_ENV = "JAVA_MAIN_CLASS"

# Archive descriptor entry and attribute
MANIFEST_PATH = "META-INF/MANIFEST.MF"
MAIN_CLASS_ATTRIBUTE = "Main-Class"

# Suffixes recognized on split manifest fragments
FRAGMENT_EXTENSIONS = (".yml", ".yaml", ".json")

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

LOG_STREAMS = ["stdout", "stderr"]

# Dotted Java binary name, e.g. "org.example.App" or "org.example.Outer$Inner"
JAVA_CLASS_NAME = re.compile(r"^(?:[^\W\d]|\$)[\w$]*(?:\.(?:[^\W\d]|\$)[\w$]*)*$")


class GeneratorDefaults:
    """Defaults used when generating an image configuration."""

    FROM_IMAGE = "eclipse-temurin:17-jre"
    IMAGE_TAG = "latest"
    OUTPUT_DIR = "target"
    CLASSES_DIR = "classes"
